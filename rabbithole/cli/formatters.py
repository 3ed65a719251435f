"""Rich formatters for rabbithole CLI output.

Tables for engines, tracked windows and search history, plus the
error-with-remediation format shared by every command.
"""

from datetime import datetime
from typing import Dict, List, Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..config import SearchEngine
from ..core.models import RegistryEntry
from ..errors import RabbitholeError


# Global console instances
console = Console()
error_console = Console(stderr=True)


def format_engine_table(engines: Sequence[SearchEngine]) -> Table:
    """Format configured search engines as a Rich table."""
    table = Table(title="Search Engines", show_header=True, header_style="bold cyan")
    table.add_column("Key", style="bold yellow", width=4)
    table.add_column("Name", style="bold green")
    table.add_column("URL", style="blue")

    for engine in engines:
        table.add_row(escape(engine.key), escape(engine.name), escape(engine.url))

    return table


def _age(created_at: datetime, now: datetime) -> str:
    if created_at == datetime.min:
        return "unknown"
    diff = now - created_at
    if diff.days > 0:
        return f"{diff.days}d ago"
    if diff.seconds // 3600 > 0:
        return f"{diff.seconds // 3600}h ago"
    if diff.seconds // 60 > 0:
        return f"{diff.seconds // 60}m ago"
    return f"{diff.seconds}s ago"


def format_window_table(
    entries: Sequence[RegistryEntry],
    now: Optional[datetime] = None,
) -> Table:
    """Format tracked research windows as a Rich table.

    Args:
        entries: Registry entries, oldest first
        now: Reference time for the age column (default: now)
    """
    now = now or datetime.now()
    table = Table(title="Research Windows", show_header=True, header_style="bold cyan")
    table.add_column("Window ID", style="bold green")
    table.add_column("Created", style="dim")
    table.add_column("Age", justify="right", style="yellow")

    for entry in entries:
        created = "" if entry.created_at == datetime.min else entry.created_at.strftime("%Y-%m-%d %H:%M:%S")
        table.add_row(str(entry.window_id), created, _age(entry.created_at, now))

    return table


def format_history_table(rows: List[Dict]) -> Table:
    """Format recent searches as a Rich table."""
    table = Table(title="Recent Searches", show_header=True, header_style="bold cyan")
    table.add_column("When", style="dim")
    table.add_column("Engine", style="bold green")
    table.add_column("Source", style="magenta")
    table.add_column("Query")

    for row in rows:
        table.add_row(
            str(row.get("timestamp", "")),
            row.get("engine_name", ""),
            row.get("trigger_method", ""),
            escape(row.get("query", "")),
        )

    return table


def format_selection_table(selections: Dict[str, str]) -> Table:
    """Format raw selection buffer contents for debugging.

    Args:
        selections: Buffer name → contents (or an error description)
    """
    table = Table(title="X Selections", show_header=True, header_style="bold cyan")
    table.add_column("Buffer", style="bold yellow")
    table.add_column("Length", justify="right", style="dim")
    table.add_column("Contents")

    for buffer, text in selections.items():
        table.add_row(buffer.upper(), str(len(text)), escape(repr(text)))

    return table


def print_error_with_remediation(error: RabbitholeError, out: Optional[Console] = None) -> None:
    """Print an error and, when known, how to fix it.

    Format: "✗ Error: <issue>" followed by "  Remediation: <steps>".
    """
    out = out or error_console
    out.print(f"[red]✗ Error:[/red] {escape(str(error))}", highlight=False)
    if error.suggestion:
        out.print(f"[blue]  Remediation:[/blue] {escape(error.suggestion)}", highlight=False)


def print_success(message: str, out: Optional[Console] = None) -> None:
    """Print a success line."""
    (out or console).print(f"[green]✓[/green] {escape(message)}", highlight=False)


def print_warning(message: str, out: Optional[Console] = None) -> None:
    """Print a warning line."""
    (out or error_console).print(f"[yellow]⚠[/yellow] {escape(message)}", highlight=False)
