# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Interactive TUI loop with one reusable scan controller."""

from __future__ import annotations

import asyncio
import logging
import signal
from collections.abc import Coroutine
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt

from shadewatch.cli.formatters.console import ConsoleObserver, LineFilter
from shadewatch.cli.tui.results import build_findings_table, build_summary_panel
from shadewatch.cli.tui.scanner import choose_target
from shadewatch.core.config import Settings, get_settings
from shadewatch.core.constants import Severity
from shadewatch.models.session import ScanSummary
from shadewatch.scanner.controller import ScanController

logger = logging.getLogger("shadewatch.cli.tui.app")

HELP_TEXT = (
    "[bold]Available commands:[/bold]\n\n"
    "  [cyan]ports[/cyan]             Scan the configured ports\n"
    "  [cyan]malware[/cyan] [path]    Scan a file or folder for malware\n"
    "  [cyan]findings[/cyan] [sev]    Show findings of the last run (all|info|danger)\n"
    "  [cyan]filter[/cyan] <sev>      Filter the live log (all|info|danger)\n"
    "  [cyan]summary[/cyan]           Show the last-run summary card\n"
    "  [cyan]help[/cyan]              Show this help\n"
    "  [cyan]quit[/cyan]              Exit the TUI\n"
)


def run_tui(console: Console | None = None, settings: Settings | None = None) -> None:
    """Launch the interactive mode.

    Scans run one at a time; the prompt only returns once the controller is
    back to idle, so a second scan can never be triggered mid-run.
    """
    if console is None:
        console = Console()
    settings = settings or get_settings()

    observer = ConsoleObserver(console)
    controller = ScanController(observer, settings=settings)

    console.print()
    console.print(
        Panel(
            "[bold blue]shadewatch Interactive Scanner[/bold blue]\n"
            "Commands: [bold]ports[/bold], [bold]malware[/bold] <path>, "
            "[bold]findings[/bold], [bold]help[/bold], [bold]quit[/bold]",
            border_style="blue",
        )
    )
    console.print()

    while True:
        try:
            command = Prompt.ask("[bold blue]shadewatch>[/bold blue]", console=console)
        except (KeyboardInterrupt, EOFError):
            console.print("\n[dim]Goodbye.[/dim]")
            break

        parts = command.strip().split(maxsplit=1)
        cmd = parts[0].lower() if parts else ""
        arg = parts[1].strip() if len(parts) > 1 else ""

        if cmd in ("quit", "exit", "q"):
            console.print("[dim]Goodbye.[/dim]")
            break

        elif cmd == "ports":
            observer.label = "Port Scan"
            run_scan(controller, controller.start_port_scan(), console)

        elif cmd == "malware":
            target = arg or choose_target(console)
            observer.label = "Malware Scan"
            run_scan(controller, controller.start_malware_scan(target), console)

        elif cmd == "findings":
            session = controller.last_session
            if session is None:
                console.print("[yellow]No scan has run yet.[/yellow]")
                continue
            severity = _parse_severity(arg)
            console.print(build_findings_table(session, severity))

        elif cmd == "filter":
            try:
                observer.line_filter = LineFilter(arg.lower() or "all")
            except ValueError:
                console.print(f"[yellow]Unknown filter: {arg}[/yellow]")
                continue
            console.print(f"[dim]Log filter: {observer.line_filter}[/dim]")

        elif cmd == "summary":
            if observer.last_summary is None:
                console.print("[yellow]No scan has run yet.[/yellow]")
            else:
                console.print(build_summary_panel(observer.last_summary))

        elif cmd == "help":
            console.print(Panel(HELP_TEXT, title="Help", border_style="blue"))

        elif cmd:
            console.print(f"[yellow]Unknown command: {cmd}. Type 'help' for commands.[/yellow]")


def run_scan(
    controller: ScanController,
    scan: Coroutine[Any, Any, ScanSummary | None],
    console: Console,
) -> ScanSummary | None:
    """Run one scan to completion; Ctrl-C requests a cooperative cancel.

    A cancelled scan still finalizes and returns its summary. If the event
    loop cannot install a SIGINT handler, Ctrl-C cancels the task instead and
    the invoker reaps any running scanner process before the loop exits.
    """
    try:
        return asyncio.run(_cancel_on_interrupt(controller, scan, console))
    except KeyboardInterrupt:
        console.print("\n[yellow]Scan interrupted.[/yellow]")
        return None


async def _cancel_on_interrupt(
    controller: ScanController,
    scan: Coroutine[Any, Any, ScanSummary | None],
    console: Console,
) -> ScanSummary | None:
    def request_cancel() -> None:
        if controller.cancel():
            console.print("\n[yellow]Cancelling scan...[/yellow]")

    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, request_cancel)
    except (NotImplementedError, RuntimeError, ValueError):
        logger.debug("SIGINT handler unavailable; Ctrl-C will abort the scan task")
        return await scan
    try:
        return await scan
    finally:
        loop.remove_signal_handler(signal.SIGINT)


def _parse_severity(arg: str) -> Severity | None:
    if not arg or arg.lower() == "all":
        return None
    try:
        return Severity(arg.lower())
    except ValueError:
        return None
