# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Typer CLI application root."""

from __future__ import annotations

import sys
from enum import StrEnum
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console

from shadewatch.cli.formatters.console import ConsoleObserver, LineFilter
from shadewatch.cli.tui.app import run_scan
from shadewatch.core.config import Settings, get_settings, with_ports
from shadewatch.core.constants import SCAN_TYPE_LABELS, ScanType
from shadewatch.models.session import ScanSummary
from shadewatch.scanner.controller import ScanController

app = typer.Typer(
    name="shadewatch",
    help="Port checks and signature malware scans driven through an external scanner",
    no_args_is_help=True,
)


class OutputFormat(StrEnum):
    CONSOLE = "console"
    JSON = "json"


@app.callback()
def main(
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="Logging level (overrides SHADEWATCH_LOG_LEVEL)"),
    ] = None,
) -> None:
    """Configure logging before any command runs."""
    from shadewatch.core.logging import setup_logging

    settings = get_settings()
    setup_logging(log_level or settings.log_level, settings.log_format)


@app.command()
def ports(
    port_list: Annotated[
        str | None,
        typer.Option("--ports", "-p", help="Comma-separated ports (default from settings)"),
    ] = None,
    fmt: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format"),
    ] = OutputFormat.CONSOLE,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Output file path"),
    ] = None,
    line_filter: Annotated[
        LineFilter,
        typer.Option("--filter", help="Only show log lines of this severity"),
    ] = LineFilter.ALL,
    ci_mode: Annotated[
        bool,
        typer.Option("--ci-mode", help="Enable CI mode with standardized exit codes"),
    ] = False,
) -> None:
    """Scan each configured port on the fixed address, one at a time."""
    settings = get_settings()
    if port_list:
        try:
            settings = with_ports(settings, port_list)
        except ValidationError:
            typer.echo(f"Invalid port list: {port_list}", err=True)
            raise typer.Exit(1)

    controller, observer = _build_controller(settings, fmt, line_filter, ScanType.PORT_SCAN)
    summary = run_scan(controller, controller.start_port_scan(), observer.console)
    if summary is None:
        raise typer.Exit(1)
    _finish(controller, summary, fmt, output, ci_mode)


@app.command()
def malware(
    target: Annotated[
        str | None,
        typer.Argument(help="File or folder to scan (prompted for when omitted)"),
    ] = None,
    fmt: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format"),
    ] = OutputFormat.CONSOLE,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Output file path"),
    ] = None,
    line_filter: Annotated[
        LineFilter,
        typer.Option("--filter", help="Only show log lines of this severity"),
    ] = LineFilter.ALL,
    ci_mode: Annotated[
        bool,
        typer.Option("--ci-mode", help="Enable CI mode with standardized exit codes"),
    ] = False,
) -> None:
    """Run a signature-based malware scan on a file or folder."""
    settings = get_settings()
    controller, observer = _build_controller(settings, fmt, line_filter, ScanType.MALWARE_SCAN)

    if target is None:
        from shadewatch.cli.tui.scanner import choose_target

        target = choose_target(observer.console)

    summary = run_scan(controller, controller.start_malware_scan(target), observer.console)
    if summary is None:
        raise typer.Exit(1)
    _finish(controller, summary, fmt, output, ci_mode)


@app.command()
def classify(
    lines: Annotated[list[str], typer.Argument(help="Scanner output lines to classify")],
) -> None:
    """Print the severity assigned to each scanner output line."""
    from shadewatch.cli.tui.results import build_log_line
    from shadewatch.scanner.classifier import classify as classify_line

    console = Console()
    for line in lines:
        if not line.strip():
            continue
        severity = classify_line(line)
        console.print(f"{severity:<8}", build_log_line(severity, line), sep="")


@app.command()
def tui() -> None:
    """Launch the interactive TUI mode."""
    from shadewatch.cli.tui.app import run_tui

    run_tui()


@app.command()
def version() -> None:
    """Show version information."""
    from shadewatch import __version__

    typer.echo(f"shadewatch v{__version__}")


def _build_controller(
    settings: Settings,
    fmt: OutputFormat,
    line_filter: LineFilter,
    scan_type: ScanType,
) -> tuple[ScanController, ConsoleObserver]:
    # JSON output owns stdout; the live log goes to stderr
    console = Console(stderr=True) if fmt == OutputFormat.JSON else Console()
    observer = ConsoleObserver(
        console,
        line_filter=line_filter,
        show_progress=fmt == OutputFormat.CONSOLE,
        label=SCAN_TYPE_LABELS[scan_type],
    )
    return ScanController(observer, settings=settings), observer


def _finish(
    controller: ScanController,
    summary: ScanSummary | None,
    fmt: OutputFormat,
    output: Path | None,
    ci_mode: bool,
) -> None:
    if fmt == OutputFormat.JSON:
        from shadewatch.cli.formatters.json_fmt import format_json, format_session_json

        session = controller.last_session
        if session is not None:
            _write_output(format_session_json(session), output)
        elif summary is not None:
            _write_output(format_json(summary), output)

    if ci_mode:
        from shadewatch.ci.exit_codes import summary_to_exit_code

        raise typer.Exit(int(summary_to_exit_code(summary)))


def _write_output(text: str, output: Path | None) -> None:
    if output:
        output.write_text(text)
        typer.echo(f"Output written to {output}", err=True)
    else:
        sys.stdout.write(text + "\n")
