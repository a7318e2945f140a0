# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Rich renderables for log lines and the last-run summary card."""

from __future__ import annotations

from datetime import datetime

from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from shadewatch.core.constants import SCAN_TYPE_LABELS, Severity
from shadewatch.models.session import ScanSession, ScanSummary

SEVERITY_COLORS: dict[str, str] = {
    Severity.DANGER: "bold red",
    Severity.INFO: "cyan",
    Severity.NEUTRAL: "white",
}

SEVERITY_BADGE_STYLES: dict[str, str] = {
    Severity.DANGER: "bold white on red",
    Severity.INFO: "bold black on cyan",
}


def make_severity_badge(severity: str) -> Text:
    """Badge for non-neutral severities; neutral lines carry no badge."""
    if severity not in SEVERITY_BADGE_STYLES:
        return Text("")
    return Text(f" {severity.upper()} ", style=SEVERITY_BADGE_STYLES[severity])


def format_timestamp(now: datetime | None = None) -> str:
    return (now or datetime.now()).strftime("%H:%M:%S")


def build_log_line(severity: Severity, message: str, now: datetime | None = None) -> Text:
    """Timestamped, badge-prefixed log entry."""
    line = Text(f"[{format_timestamp(now)}] ", style="dim")
    badge = make_severity_badge(severity)
    if badge.plain:
        line.append_text(badge)
        line.append(" ")
    line.append(message, style=SEVERITY_COLORS.get(severity, "white"))
    return line


def pluralize(count: int, noun: str) -> str:
    return f"{count} {noun}{'' if count == 1 else 's'}"


def build_summary_panel(summary: ScanSummary) -> Panel:
    """Summary card: last run type plus open-port and threat badges."""
    ports_style = "bold white on red" if summary.open_ports else "bold black on green"
    threats_style = "bold white on red" if summary.threats else "bold black on green"
    badges = Text.assemble(
        (f" {pluralize(summary.open_ports, 'Open Port')} ", ports_style),
        "  ",
        (f" {pluralize(summary.threats, 'Threat')} ", threats_style),
    )
    detail = Text(f"Last run: {SCAN_TYPE_LABELS[summary.scan_type]}", style="bold")
    parts: list[Text] = [detail, badges]
    if summary.cancelled:
        parts.append(Text("Cancelled before completion", style="yellow"))
    if summary.errors:
        parts.append(Text(f"Errors: {len(summary.errors)}", style="red"))
    border = "red" if summary.open_ports or summary.threats else "green"
    return Panel(Group(*parts), title="Summary", title_align="left", border_style=border)


def build_findings_table(session: ScanSession, severity: Severity | None = None) -> Table:
    """Table of a session's findings, optionally restricted to one severity."""
    table = Table(title=f"Findings ({session.session_id})", show_lines=False)
    table.add_column("Severity", no_wrap=True)
    table.add_column("Origin", style="dim")
    table.add_column("Unit", style="dim")
    table.add_column("Detail")

    for finding in session.findings:
        if severity is not None and finding.severity != severity:
            continue
        table.add_row(
            Text(finding.severity.upper(), style=SEVERITY_COLORS.get(finding.severity, "white")),
            finding.origin,
            finding.unit or finding.subject_name or "-",
            finding.display_text,
        )
    return table
