# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Interactive target selection for malware scans."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from rich.console import Console
from rich.prompt import Prompt
from rich.table import Table


def _human_size(nbytes: int) -> str:
    """Convert bytes to a human-readable string."""
    for unit in ("B", "KB", "MB", "GB"):
        if nbytes < 1024:
            return f"{nbytes:.0f} {unit}"
        nbytes /= 1024  # type: ignore[assignment]
    return f"{nbytes:.1f} TB"


def build_target_table(target: Path) -> Table:
    """Describe a selected file or folder before scanning it."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("key", style="dim", no_wrap=True)
    table.add_column("value")
    table.add_row("Target:", str(target))
    if target.is_dir():
        entries = sum(1 for p in target.rglob("*") if p.is_file())
        table.add_row("Type:", "folder")
        table.add_row("Files:", str(entries))
    else:
        stat = target.stat()
        mtime = datetime.fromtimestamp(stat.st_mtime, tz=UTC).strftime("%Y-%m-%d %H:%M")
        table.add_row("Type:", "file")
        table.add_row("Size:", _human_size(stat.st_size))
        table.add_row("Modified:", mtime)
    return table


def choose_target(console: Console | None = None, default: str = "") -> str | None:
    """Ask for a file or folder to scan.

    Returns None when the user enters nothing or a path that does not exist.
    """
    if console is None:
        console = Console()

    answer = Prompt.ask(
        "Select file or folder to scan (empty to cancel)",
        default=default,
        console=console,
        show_default=bool(default),
    )
    answer = answer.strip()
    if not answer:
        return None

    target = Path(answer).expanduser()
    if not target.exists():
        console.print(f"[yellow]Path not found: {target}[/yellow]")
        return None

    console.print(build_target_table(target))
    return str(target)
