"""Snapshot commands."""

import typer

from omarchyctl.cli.helpers import get_settings, report, report_error
from omarchyctl.core.errors import COMMAND_ERRORS
from omarchyctl.disk.snapper import setup_snapshots
from omarchyctl.models.history import HistoryKind

app = typer.Typer(
    help="Configure Btrfs snapshots with snapper.",
    no_args_is_help=True,
)


@app.command()
def setup(ctx: typer.Context) -> None:
    """Create snapper configs, apply retention, install pacman hooks and enable timers.

    Examples:
        omarchyctl snapshots setup
    """
    settings = get_settings(ctx)
    try:
        results = setup_snapshots(settings.snapper)
    except COMMAND_ERRORS as e:
        report_error(HistoryKind.SNAPSHOTS, "snapper", e)

    report(HistoryKind.SNAPSHOTS, results, title="Snapshots")
