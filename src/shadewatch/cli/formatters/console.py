# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Rich console observer: live log, progress bar and summary card."""

from __future__ import annotations

from enum import StrEnum

from rich.console import Console
from rich.progress import BarColumn, Progress, TaskID, TextColumn, TimeElapsedColumn

from shadewatch.cli.tui.results import build_log_line, build_summary_panel
from shadewatch.core.constants import ScanState, Severity
from shadewatch.models.session import ScanSummary
from shadewatch.scanner.base import ScanObserver

default_console = Console()


class LineFilter(StrEnum):
    ALL = "all"
    INFO = "info"
    DANGER = "danger"


class ConsoleObserver(ScanObserver):
    """Renders controller callbacks to a Rich console."""

    def __init__(
        self,
        console: Console | None = None,
        *,
        line_filter: LineFilter = LineFilter.ALL,
        show_progress: bool = True,
        label: str = "Scan",
    ) -> None:
        self.console = console or default_console
        self.line_filter = line_filter
        self.show_progress = show_progress
        self.label = label
        self.last_summary: ScanSummary | None = None
        self.triggers_enabled = True
        self._progress: Progress | None = None
        self._task: TaskID | None = None

    def accepts(self, severity: Severity) -> bool:
        return self.line_filter == LineFilter.ALL or severity == self.line_filter

    def on_line(self, severity: Severity, text: str) -> None:
        if self.accepts(severity):
            self.console.print(build_log_line(severity, text))

    def on_progress(self, percent: int) -> None:
        if self._progress is not None and self._task is not None:
            self._progress.update(self._task, completed=percent)

    def on_summary(self, summary: ScanSummary) -> None:
        self.last_summary = summary
        if self._progress is not None and self._task is not None:
            self._progress.update(self._task, description="Done")
        self.console.print(build_summary_panel(summary))

    def on_notice(self, message: str) -> None:
        self.console.print(build_log_line(Severity.INFO, message))

    def on_state_change(self, state: ScanState) -> None:
        self.triggers_enabled = state == ScanState.IDLE
        if state == ScanState.RUNNING:
            self._start_progress()
        elif state == ScanState.IDLE:
            self._stop_progress()

    def _start_progress(self) -> None:
        if not self.show_progress or self._progress is not None:
            return
        self._progress = Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(bar_width=40),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
        )
        self._task = self._progress.add_task(f"{self.label} in progress", total=100)
        self._progress.start()

    def _stop_progress(self) -> None:
        if self._progress is not None:
            self._progress.stop()
        self._progress = None
        self._task = None
