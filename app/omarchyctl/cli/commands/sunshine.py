"""Sunshine command binding the streaming server to the active GPU."""

from typing import Annotated

import typer

from omarchyctl.cli.helpers import get_settings, report, report_error
from omarchyctl.core.errors import COMMAND_ERRORS
from omarchyctl.desktop.sunshine import configure_sunshine
from omarchyctl.models.history import HistoryKind

app = typer.Typer(
    help="Bind Sunshine to the GPU driving the connected monitor.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def sunshine(
    ctx: typer.Context,
    no_restart: Annotated[
        bool,
        typer.Option(
            "--no-restart",
            help="Update sunshine.conf without restarting the service.",
        ),
    ] = False,
) -> None:
    """Detect the connected monitor, write sunshine.conf and restart Sunshine.

    Examples:
        omarchyctl sunshine
        omarchyctl sunshine --no-restart
    """
    if ctx.invoked_subcommand is not None:
        return

    settings = get_settings(ctx)
    try:
        results = configure_sunshine(settings.sunshine, restart=not no_restart)
    except COMMAND_ERRORS as e:
        report_error(HistoryKind.SUNSHINE, "sunshine-conf", e)

    report(HistoryKind.SUNSHINE, results, title="Sunshine")
