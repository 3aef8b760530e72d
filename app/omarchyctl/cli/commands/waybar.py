"""Waybar commands."""

from typing import Annotated

import typer

from omarchyctl.cli.helpers import report, report_error
from omarchyctl.core.errors import COMMAND_ERRORS
from omarchyctl.desktop.waybar import setup_waybar_netbird
from omarchyctl.models.history import HistoryKind

app = typer.Typer(
    help="Add modules to Waybar.",
    no_args_is_help=True,
)


@app.command()
def netbird(
    no_reload: Annotated[
        bool,
        typer.Option(
            "--no-reload",
            help="Do not signal Waybar to reload.",
        ),
    ] = False,
) -> None:
    """Add a NetBird status module with click-to-toggle to Waybar.

    Installs the waybar-netbird, nb-up and nb-down helpers to ~/.local/bin,
    backs up config.jsonc and style.css once and inserts the module.

    Examples:
        omarchyctl waybar netbird
    """
    try:
        results = setup_waybar_netbird(reload=not no_reload)
    except COMMAND_ERRORS as e:
        report_error(HistoryKind.WAYBAR, "config", e)

    report(HistoryKind.WAYBAR, results, title="Waybar NetBird")
