"""History command for viewing past runs.

This module provides the `omarchyctl history` command for viewing what
previous commands changed.
"""

import json
from datetime import datetime
from typing import Annotated

import typer
from rich.table import Table

from omarchyctl.core.state import StateManager
from omarchyctl.models.history import HistoryEntry
from omarchyctl.models.step import StepStatus
from omarchyctl.utils.formatting import console, print_info

app = typer.Typer(
    name="history",
    help="View history of provisioning runs.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def history(
    ctx: typer.Context,
    limit: Annotated[
        int,
        typer.Option(
            "--limit",
            "-n",
            help="Maximum number of entries to show.",
        ),
    ] = 20,
    since: Annotated[
        str | None,
        typer.Option(
            "--since",
            help="Show entries since a date (YYYY-MM-DD) or ISO timestamp.",
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON.",
        ),
    ] = False,
) -> None:
    """Show history of provisioning runs.

    Each entry shows when a command ran, which command it was, how many
    steps changed the system and whether it succeeded.

    Examples:
        omarchyctl history              # Show last 20 entries
        omarchyctl history -n 50        # Show last 50 entries
        omarchyctl history --since 2026-01-01
        omarchyctl history --json       # JSON output for scripting
    """
    if ctx.invoked_subcommand is not None:
        return

    since_at = _parse_since(since) if since else None
    entries = StateManager().get_history(limit=limit, since=since_at)

    if not entries:
        print_info("No history entries found.")
        return

    if json_output:
        _print_json(entries)
    else:
        _print_table(entries)


def _parse_since(value: str) -> datetime:
    """Parse ``--since`` as a date or an ISO timestamp."""
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        typer.echo(f"Invalid date format: {value}. Use YYYY-MM-DD.", err=True)
        raise typer.Exit(code=1) from None


def _summarize_steps(entry: HistoryEntry) -> str:
    """Comma-separated step names, changed steps highlighted."""
    names = [
        f"[changed]{item.name}[/changed]" if item.status == StepStatus.CHANGED else item.name
        for item in entry.items[:4]
    ]
    summary = ", ".join(names)
    if len(entry.items) > 4:
        summary += f" (+{len(entry.items) - 4} more)"
    return summary


def _print_table(entries: list[HistoryEntry]) -> None:
    """Print history as Rich table.

    Args:
        entries: List of history entries to display.
    """
    table = Table(
        title="Run History",
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("ID", style="dim")
    table.add_column("Timestamp", style="info")
    table.add_column("Kind")
    table.add_column("Steps")
    table.add_column("Result")

    for entry in entries:
        table.add_row(
            entry.id[:8],
            _format_timestamp(entry.timestamp),
            entry.kind.value,
            _summarize_steps(entry),
            "[success]ok[/]" if entry.success else "[error]failed[/]",
        )

    console.print(table)


def _format_timestamp(iso_timestamp: str) -> str:
    """Format ISO timestamp for display (YYYY-MM-DD HH:MM)."""
    dt = datetime.fromisoformat(iso_timestamp.replace("Z", "+00:00"))
    return dt.strftime("%Y-%m-%d %H:%M")


def _print_json(entries: list[HistoryEntry]) -> None:
    """Print history as JSON for scripting."""
    output = [entry.to_dict() for entry in entries]
    console.print(json.dumps(output, indent=2), markup=False, highlight=False, soft_wrap=True)
