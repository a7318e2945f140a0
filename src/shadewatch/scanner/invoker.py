# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""External scanner invocation, one subprocess per work unit."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import shlex
import time

from shadewatch.core.config import Settings, get_settings
from shadewatch.core.exceptions import ConfigurationError
from shadewatch.models.invocation import InvocationResult

logger = logging.getLogger("shadewatch.scanner.invoker")

_TERMINATE_GRACE_SECONDS = 2.0


def split_lines(text: str) -> list[str]:
    """Split captured output into non-empty lines, preserving order."""
    return [line.rstrip("\r") for line in text.split("\n") if line.strip()]


def build_command(template: str, **values: object) -> list[str]:
    """Expand a command template into an argv list.

    The template is tokenized before substitution, so a value containing
    spaces (e.g. a target path) always stays a single argument.
    """
    try:
        tokens = shlex.split(template)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid command template {template!r}: {exc}") from exc
    if not tokens:
        raise ConfigurationError("Command template is empty")
    argv = []
    for token in tokens:
        for key, value in values.items():
            token = token.replace("{" + key + "}", str(value))
        argv.append(token)
    return argv


class ScanInvoker:
    """Runs the external scanner and captures its line-oriented output."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()

    def port_scan_args(self, port: int) -> list[str]:
        return build_command(
            self._settings.port_scan_command,
            address=self._settings.port_scan_address,
            port=port,
        )

    def malware_scan_args(self, target: str) -> list[str]:
        return build_command(self._settings.malware_scan_command, target=target)

    async def run(
        self,
        args: list[str],
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> InvocationResult:
        """Run one command to completion.

        Never raises for a failed start, a timeout, cancellation or a
        non-zero exit; those are reported in the returned result. The
        process is always reaped before returning.
        """
        result = InvocationResult(command=list(args))
        start_time = time.monotonic()
        logger.debug("Spawning: %s", shlex.join(args))

        try:
            proc = await asyncio.create_subprocess_exec(
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            result.error = f"Command not found: {args[0]}"
            logger.error("Failed to start scanner: %s", result.error)
            return result
        except OSError as exc:
            result.error = f"Failed to start {args[0]}: {exc}"
            logger.error("Failed to start scanner: %s", result.error)
            return result

        communicate = asyncio.ensure_future(proc.communicate())
        waiters: set[asyncio.Future] = {communicate}
        cancel_wait: asyncio.Future | None = None
        if cancel_event is not None:
            cancel_wait = asyncio.ensure_future(cancel_event.wait())
            waiters.add(cancel_wait)

        try:
            done, _ = await asyncio.wait(
                waiters,
                timeout=self._settings.process_timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            logger.warning("Scan task cancelled; terminating scanner process %s", proc.pid)
            await _terminate(proc)
            communicate.cancel()
            raise
        finally:
            if cancel_wait is not None and not cancel_wait.done():
                cancel_wait.cancel()

        if communicate not in done:
            if cancel_event is not None and cancel_event.is_set():
                result.error = "Scan cancelled"
            else:
                result.error = (
                    f"Timed out after {self._settings.process_timeout}s: {shlex.join(args)}"
                )
            logger.warning("Terminating scanner process: %s", result.error)
            await _terminate(proc)

        stdout, stderr = await communicate
        result.exit_status = proc.returncode
        result.stdout_lines = split_lines(stdout.decode("utf-8", errors="replace"))
        result.stderr_lines = split_lines(stderr.decode("utf-8", errors="replace"))
        result.duration_ms = int((time.monotonic() - start_time) * 1000)

        if result.error is None and proc.returncode != 0:
            result.error = f"Command failed with exit status {proc.returncode}: {shlex.join(args)}"
        if result.error:
            logger.info("Scanner finished with error: %s", result.error)
        return result


async def _terminate(proc: asyncio.subprocess.Process) -> None:
    with contextlib.suppress(ProcessLookupError):
        proc.terminate()
    try:
        await asyncio.wait_for(proc.wait(), timeout=_TERMINATE_GRACE_SECONDS)
    except TimeoutError:
        with contextlib.suppress(ProcessLookupError):
            proc.kill()
        await proc.wait()
