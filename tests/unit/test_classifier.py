# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Tests for scanner output line classification."""

from __future__ import annotations

import pytest

from shadewatch.core.constants import FindingOrigin, OutputStream, Severity
from shadewatch.scanner.classifier import (
    classify,
    classify_lines,
    mentions_threat,
    reports_open_port,
)


class TestClassifyRules:
    """Each rule in evaluation order, first match wins."""

    @pytest.mark.parametrize(
        "line",
        [
            "[DANGER] trojan found",
            "[DANGER] [SAFE] contradictory output",
            "[INFO] [DANGER] both markers",
            "prefix [DANGER]",
            "[DANGER] [RESULT] port 22 closed",
        ],
    )
    def test_danger_marker_always_danger(self, line):
        assert classify(line) == Severity.DANGER

    @pytest.mark.parametrize(
        "line",
        [
            "[RESULT] 127.0.0.1:80 open",
            "[RESULT] 127.0.0.1:80 OPEN",
            "[RESULT] Port 443 is Open",
            "[INFO] [RESULT] port 22 open",
            "[SAFE] [RESULT] opened connection",
        ],
    )
    def test_result_with_open_is_danger(self, line):
        assert classify(line) == Severity.DANGER

    def test_result_without_open_is_neutral(self):
        assert classify("[RESULT] 127.0.0.1:22 closed") == Severity.NEUTRAL

    def test_result_without_open_beats_error_keyword(self):
        assert classify("[RESULT] error probing port 22") == Severity.NEUTRAL

    def test_info_marker(self):
        assert classify("[INFO] Scanning 127.0.0.1") == Severity.INFO

    def test_info_beats_error_keyword(self):
        assert classify("[INFO] retrying after error") == Severity.INFO

    def test_safe_marker(self):
        assert classify("[SAFE] report.pdf") == Severity.NEUTRAL

    def test_safe_beats_error_keyword(self):
        assert classify("[SAFE] no error found") == Severity.NEUTRAL

    @pytest.mark.parametrize(
        "line",
        ["Error: connection refused", "ERROR", "Traceback: ValueError raised"],
    )
    def test_error_substring_is_danger(self, line):
        assert classify(line) == Severity.DANGER

    @pytest.mark.parametrize(
        "line",
        [
            "Scanning complete",
            "port 80 open",
            "threat database loaded",
            "[danger] lowercase tags are not markers",
            "[result] lowercase tags are not markers",
        ],
    )
    def test_unmarked_lines_are_neutral(self, line):
        assert classify(line) == Severity.NEUTRAL

    def test_markers_are_case_sensitive(self):
        assert classify("[info] lowercase") == Severity.NEUTRAL


class TestCountingHelpers:
    """Open-port and threat counting predicates."""

    def test_open_port_case_insensitive(self):
        assert reports_open_port("[RESULT] port 80 OPEN")
        assert reports_open_port("port 80 open")

    def test_closed_port_not_counted(self):
        assert not reports_open_port("[RESULT] port 22 closed")

    def test_threat_keyword(self):
        assert mentions_threat("Threat detected: Eicar")
        assert mentions_threat("2 THREATS found")

    def test_danger_marker_counts_as_threat(self):
        assert mentions_threat("[DANGER] suspicious entropy")

    def test_plain_line_not_threat(self):
        assert not mentions_threat("[SAFE] clean.txt")


class TestClassifyLines:
    """Bulk classification into streamed findings."""

    def test_preserves_order_and_metadata(self):
        lines = ["[INFO] start", "[RESULT] 80 open", "done"]
        findings = classify_lines(lines, OutputStream.STDOUT, unit="80")

        assert [f.source_line for f in findings] == lines
        assert [f.severity for f in findings] == [
            Severity.INFO,
            Severity.DANGER,
            Severity.NEUTRAL,
        ]
        assert all(f.origin == FindingOrigin.STREAMED for f in findings)
        assert all(f.stream == OutputStream.STDOUT for f in findings)
        assert all(f.unit == "80" for f in findings)

    def test_empty_input(self):
        assert classify_lines([], OutputStream.STDERR) == []

    def test_streamed_findings_are_not_structured_threats(self):
        (finding,) = classify_lines(["[DANGER] x"], OutputStream.STDOUT)
        assert finding.is_threat is False
        assert finding.display_text == "[DANGER] x"
