# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Severity classification of raw scanner output lines."""

from __future__ import annotations

from shadewatch.core.constants import (
    ERROR_KEYWORD,
    MARKER_DANGER,
    MARKER_INFO,
    MARKER_RESULT,
    MARKER_SAFE,
    OPEN_KEYWORD,
    THREAT_KEYWORD,
    FindingOrigin,
    OutputStream,
    Severity,
)
from shadewatch.models.finding import Finding


def classify(line: str) -> Severity:
    """Map one non-empty output line to a severity. First matching rule wins."""
    lower = line.lower()
    if MARKER_DANGER in line or (MARKER_RESULT in line and OPEN_KEYWORD in lower):
        return Severity.DANGER
    if MARKER_INFO in line:
        return Severity.INFO
    if MARKER_SAFE in line:
        return Severity.NEUTRAL
    if MARKER_RESULT in line:
        return Severity.NEUTRAL
    if ERROR_KEYWORD in lower:
        return Severity.DANGER
    return Severity.NEUTRAL


def reports_open_port(line: str) -> bool:
    """True if a port-scan stdout line reports an open port."""
    return OPEN_KEYWORD in line.lower()


def mentions_threat(line: str) -> bool:
    """True if a malware-scan stdout line counts as a detected threat."""
    return THREAT_KEYWORD in line.lower() or MARKER_DANGER in line


def classify_lines(
    lines: list[str],
    stream: OutputStream,
    unit: str | None = None,
) -> list[Finding]:
    """Classify each line into an immutable streamed Finding, preserving order."""
    return [
        Finding(
            severity=classify(line),
            origin=FindingOrigin.STREAMED,
            source_line=line,
            stream=stream,
            unit=unit,
        )
        for line in lines
    ]
