"""Hyprland command."""

from typing import Annotated

import typer

from omarchyctl.cli.helpers import get_settings, report, report_error
from omarchyctl.core.errors import COMMAND_ERRORS
from omarchyctl.desktop.hyprland import configure_hyprland
from omarchyctl.models.history import HistoryKind

app = typer.Typer(
    help="Manage a block of settings in hyprland.conf.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def hyprland(
    ctx: typer.Context,
    no_reload: Annotated[
        bool,
        typer.Option(
            "--no-reload",
            help="Do not run 'hyprctl reload'.",
        ),
    ] = False,
) -> None:
    """Write the configured lines into hyprland.conf and reload Hyprland."""
    if ctx.invoked_subcommand is not None:
        return

    settings = get_settings(ctx)
    try:
        results = configure_hyprland(settings.hyprland, reload=not no_reload)
    except COMMAND_ERRORS as e:
        report_error(HistoryKind.HYPRLAND, "hyprland-conf", e)
    report(HistoryKind.HYPRLAND, results, title="Hyprland")
