"""Ghostty command."""

import typer

from omarchyctl.cli.helpers import get_settings, report, report_error
from omarchyctl.core.errors import COMMAND_ERRORS
from omarchyctl.desktop.ghostty import configure_ghostty
from omarchyctl.models.history import HistoryKind

app = typer.Typer(
    help="Apply Ghostty terminal settings.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def ghostty(ctx: typer.Context) -> None:
    """Set the configured keys in ~/.config/ghostty/config."""
    if ctx.invoked_subcommand is not None:
        return

    settings = get_settings(ctx)
    try:
        result = configure_ghostty(settings.ghostty)
    except COMMAND_ERRORS as e:
        report_error(HistoryKind.GHOSTTY, "ghostty-config", e)
    report(HistoryKind.GHOSTTY, [result], title="Ghostty")
