# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for the external scanner invoker."""

from __future__ import annotations

import asyncio
import os
import sys

import pytest

from shadewatch.core.config import Settings
from shadewatch.core.exceptions import ConfigurationError
from shadewatch.scanner.invoker import ScanInvoker, build_command, split_lines

PY = sys.executable


class TestSplitLines:
    def test_drops_empty_and_blank_lines(self):
        assert split_lines("a\n\nb\n   \nc\n") == ["a", "b", "c"]

    def test_strips_carriage_returns(self):
        assert split_lines("one\r\ntwo\r\n") == ["one", "two"]

    def test_empty(self):
        assert split_lines("") == []


class TestBuildCommand:
    def test_placeholders_expanded(self):
        argv = build_command(
            "python -m shadelight {address} --ports {port}",
            address="127.0.0.1/32",
            port=80,
        )
        assert argv == ["python", "-m", "shadelight", "127.0.0.1/32", "--ports", "80"]

    def test_target_with_spaces_stays_single_argument(self):
        argv = build_command("python signature_scan.py {target}", target="/tmp/My Files/a b.exe")
        assert argv == ["python", "signature_scan.py", "/tmp/My Files/a b.exe"]

    def test_quoted_template_tokens(self):
        argv = build_command('"/opt/scan tools/py" scan.py {target}', target="x")
        assert argv == ["/opt/scan tools/py", "scan.py", "x"]

    def test_empty_template_raises(self):
        with pytest.raises(ConfigurationError):
            build_command("   ")

    def test_unbalanced_quotes_raise(self):
        with pytest.raises(ConfigurationError):
            build_command('python "unterminated {target}', target="x")

    def test_invoker_shapes(self):
        invoker = ScanInvoker(settings=Settings(_env_file=None))
        assert invoker.port_scan_args(443)[-2:] == ["--ports", "443"]
        assert "127.0.0.1/32" in invoker.port_scan_args(443)
        assert invoker.malware_scan_args("/srv/upload")[-1] == "/srv/upload"


class TestRun:
    """ScanInvoker.run() against real subprocesses."""

    @pytest.fixture
    def invoker(self) -> ScanInvoker:
        return ScanInvoker(settings=Settings(_env_file=None))

    async def test_captures_stdout_and_stderr(self, invoker):
        code = (
            "import sys\n"
            "print('[INFO] first')\n"
            "print()\n"
            "print('[RESULT] 80 open')\n"
            "print('warning: slow', file=sys.stderr)\n"
        )
        result = await invoker.run([PY, "-c", code])

        assert result.exit_status == 0
        assert result.ok is True
        assert result.error is None
        assert result.stdout_lines == ["[INFO] first", "[RESULT] 80 open"]
        assert result.stderr_lines == ["warning: slow"]
        assert result.duration_ms is not None

    async def test_nonzero_exit_is_reported_not_raised(self, invoker):
        code = "import sys; print('partial'); sys.exit(3)"
        result = await invoker.run([PY, "-c", code])

        assert result.exit_status == 3
        assert result.ok is False
        assert "exit status 3" in result.error
        assert result.stdout_lines == ["partial"]

    async def test_missing_command_is_reported_not_raised(self, invoker):
        result = await invoker.run(["definitely-not-a-real-scanner-binary", "--ports", "22"])

        assert result.ok is False
        assert result.exit_status is None
        assert "not found" in result.error

    async def test_timeout_terminates_process(self):
        invoker = ScanInvoker(settings=Settings(_env_file=None, process_timeout=0.2))
        result = await invoker.run([PY, "-c", "import time; time.sleep(30)"])

        assert result.ok is False
        assert "Timed out" in result.error
        assert result.exit_status is not None

    async def test_cancel_event_terminates_process(self, invoker):
        cancel = asyncio.Event()
        run = asyncio.create_task(
            invoker.run([PY, "-c", "import time; time.sleep(30)"], cancel_event=cancel)
        )
        await asyncio.sleep(0.2)
        cancel.set()
        result = await asyncio.wait_for(run, timeout=10)

        assert result.error == "Scan cancelled"
        assert result.ok is False

    @pytest.mark.skipif(sys.platform == "win32", reason="signal 0 liveness check is POSIX-only")
    async def test_task_cancellation_terminates_process(self, invoker, tmp_path):
        pid_file = tmp_path / "child.pid"
        script = (
            "import os, sys, time; "
            "open(sys.argv[1], 'w').write(str(os.getpid())); "
            "time.sleep(30)"
        )
        run = asyncio.create_task(invoker.run([PY, "-c", script, str(pid_file)]))
        for _ in range(200):
            if pid_file.exists() and pid_file.read_text():
                break
            await asyncio.sleep(0.05)
        pid = int(pid_file.read_text())

        run.cancel()
        with pytest.raises(asyncio.CancelledError):
            await run

        with pytest.raises(ProcessLookupError):
            os.kill(pid, 0)

    async def test_unset_cancel_event_does_not_interfere(self, invoker):
        cancel = asyncio.Event()
        result = await invoker.run([PY, "-c", "print('hi')"], cancel_event=cancel)
        assert result.ok is True
        assert result.stdout_lines == ["hi"]
