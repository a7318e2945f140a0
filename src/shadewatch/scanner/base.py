# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Presentation-facing observer interface for the scan controller."""

from __future__ import annotations

from abc import ABC, abstractmethod

from shadewatch.core.constants import ScanState, Severity
from shadewatch.models.session import ScanSummary


class ScanObserver(ABC):
    """Receives everything the controller wants shown to the user.

    The controller only ever calls into the observer; it never reads
    presentation state back.
    """

    @abstractmethod
    def on_line(self, severity: Severity, text: str) -> None:
        """A classified output or status line."""
        ...

    def on_progress(self, percent: int) -> None:
        """Progress value in [0, 100]."""

    def on_summary(self, summary: ScanSummary) -> None:
        """Final summary of a finished session."""

    def on_notice(self, message: str) -> None:
        """Informational notice outside any session (e.g. no target selected)."""

    def on_state_change(self, state: ScanState) -> None:
        """Controller state transition; triggers are enabled only in IDLE."""


class NullObserver(ScanObserver):
    """Observer that discards everything."""

    def on_line(self, severity: Severity, text: str) -> None:
        pass
