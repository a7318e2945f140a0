# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Standardized exit codes for CI/CD pipeline integrations.

Exit codes:
    0 CLEAN - no open ports or threats
    1 FINDINGS - open ports or threats were reported
    2 ERROR - at least one scanner invocation failed, or the scan was cancelled
"""

from __future__ import annotations

from enum import IntEnum

from shadewatch.models.session import ScanSummary


class CIExitCode(IntEnum):
    """Exit codes used by shadewatch in CI mode."""

    CLEAN = 0
    FINDINGS = 1
    SCAN_ERROR = 2


def summary_to_exit_code(summary: ScanSummary | None) -> CIExitCode:
    """Convert a scan summary to a CI exit code.

    Findings take precedence over errors so that a partially failed port
    scan that still found an open port fails the pipeline as a finding.
    A missing summary (scan never started) is an error.
    """
    if summary is None:
        return CIExitCode.SCAN_ERROR
    if summary.open_ports or summary.threats:
        return CIExitCode.FINDINGS
    if summary.errors or summary.cancelled:
        return CIExitCode.SCAN_ERROR
    return CIExitCode.CLEAN
