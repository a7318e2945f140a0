# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""JSON output formatter."""

from __future__ import annotations

import json

from shadewatch.models.session import ScanSession, ScanSummary


def format_json(summary: ScanSummary) -> str:
    """Return a scan summary as formatted JSON string."""
    return summary.model_dump_json(indent=2)


def format_session_json(session: ScanSession) -> str:
    """Return the summary plus every finding of a finished session."""
    data = {
        "session_id": session.session_id,
        "scan_type": session.scan_type,
        "target": session.target,
        "open_ports": session.open_port_count,
        "threats": session.threat_count,
        "cancelled": session.cancelled,
        "errors": session.errors,
        "finding_count_by_severity": session.finding_count_by_severity,
        "findings": [f.model_dump(mode="json", exclude_none=True) for f in session.findings],
    }
    return json.dumps(data, indent=2)
