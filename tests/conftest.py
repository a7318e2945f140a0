# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Shared test fixtures and configuration."""

from __future__ import annotations

import asyncio
import sys
import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest

from shadewatch.core.config import Settings
from shadewatch.core.constants import ScanState, Severity
from shadewatch.models.invocation import InvocationResult
from shadewatch.models.session import ScanSummary
from shadewatch.scanner.base import ScanObserver
from shadewatch.scanner.invoker import ScanInvoker

FAKE_SCANNER_SOURCE = textwrap.dedent(
    """
    import json
    import sys

    args = sys.argv[1:]
    if "--ports" in args:
        port = args[args.index("--ports") + 1]
        if port == "80":
            print(f"[RESULT] 127.0.0.1:{port} open")
        else:
            print(f"[RESULT] 127.0.0.1:{port} closed")
        sys.exit(0)

    target, artifact = args[0], args[1]
    print(f"[INFO] Scanning {target}")
    print(f"[DANGER] Threat signature in {target}")
    with open(artifact, "w", encoding="utf-8") as fh:
        json.dump(
            [
                {
                    "path": target,
                    "risk": {"level": "High", "score": 92, "reasons": ["packed binary"]},
                    "exact_match": {"name": "Eicar-Test"},
                }
            ],
            fh,
        )
    """
)


class RecordingObserver(ScanObserver):
    """Observer that records every callback for assertions."""

    def __init__(self) -> None:
        self.lines: list[tuple[Severity, str]] = []
        self.progress: list[int] = []
        self.summaries: list[ScanSummary] = []
        self.notices: list[str] = []
        self.states: list[ScanState] = []

    def on_line(self, severity: Severity, text: str) -> None:
        self.lines.append((severity, text))

    def on_progress(self, percent: int) -> None:
        self.progress.append(percent)

    def on_summary(self, summary: ScanSummary) -> None:
        self.summaries.append(summary)

    def on_notice(self, message: str) -> None:
        self.notices.append(message)

    def on_state_change(self, state: ScanState) -> None:
        self.states.append(state)

    def texts(self, severity: Severity | None = None) -> list[str]:
        return [t for s, t in self.lines if severity is None or s == severity]


class FakeInvoker(ScanInvoker):
    """ScanInvoker that answers from canned results keyed by the last argv entry."""

    def __init__(
        self,
        settings: Settings,
        responses: dict[str, InvocationResult] | None = None,
        *,
        gate: asyncio.Event | None = None,
        on_run: Callable[[list[str]], None] | None = None,
    ) -> None:
        super().__init__(settings=settings)
        self.responses = responses or {}
        self.gate = gate
        self.on_run = on_run
        self.calls: list[list[str]] = []

    async def run(
        self,
        args: list[str],
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> InvocationResult:
        self.calls.append(list(args))
        if self.gate is not None:
            await self.gate.wait()
        if self.on_run is not None:
            self.on_run(args)
        canned = self.responses.get(args[-1])
        if canned is None:
            return InvocationResult(command=list(args), exit_status=0)
        return canned.model_copy(update={"command": list(args)})


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings with no delays and an artifact path inside tmp_path."""
    return Settings(
        _env_file=None,
        inter_unit_delay=0,
        display_hold=0,
        progress_tick=0.001,
        result_artifact_path=tmp_path / "signature_scan_result_structured.json",
    )


@pytest.fixture
def recorder() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture
def fake_invoker_cls() -> type[FakeInvoker]:
    return FakeInvoker


@pytest.fixture
def fake_scanner(tmp_path: Path) -> Path:
    """A stand-in external scanner script for end-to-end subprocess tests."""
    script = tmp_path / "fake_scanner.py"
    script.write_text(FAKE_SCANNER_SOURCE, encoding="utf-8")
    return script


@pytest.fixture
def fake_scanner_settings(settings: Settings, fake_scanner: Path) -> Settings:
    """Settings whose scanner commands run the fake scanner script."""
    artifact = settings.result_artifact_path
    py = sys.executable
    return settings.model_copy(
        update={
            "port_scan_command": f'"{py}" "{fake_scanner}" {{address}} --ports {{port}}',
            "malware_scan_command": f'"{py}" "{fake_scanner}" {{target}} "{artifact}"',
        }
    )
