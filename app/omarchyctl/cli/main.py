"""Main CLI application entry point.

Defines the Typer application, global options and logging setup.
"""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.logging import RichHandler

from omarchyctl import __version__
from omarchyctl.cli.commands import (
    config,
    disk,
    ghostty,
    gpu,
    history,
    hyprland,
    pkg,
    setup,
    snapshots,
    sunshine,
    waybar,
)
from omarchyctl.utils.formatting import err_console, set_quiet

app = typer.Typer(
    name="omarchyctl",
    help="Provision and maintain an Arch/Omarchy workstation.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"omarchyctl version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool, quiet: bool) -> None:
    """Route log records through Rich on stderr.

    WARNING by default, DEBUG with ``--verbose``, ERROR with ``--quiet``.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=verbose, rich_tracebacks=True)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            help="Settings file. Default: ~/.config/omarchyctl/config.toml",
            dir_okay=False,
        ),
    ] = None,
) -> None:
    """omarchyctl - Provision and maintain an Arch/Omarchy workstation.

    Every command checks the current state before changing anything, so
    re-running a command is safe.
    """
    configure_logging(verbose, quiet)
    set_quiet(quiet)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = config_path.expanduser() if config_path else None


# Register commands
app.add_typer(pkg.app, name="pkg")
app.add_typer(setup.app, name="setup")
app.command("gpu")(gpu.gpu)
app.add_typer(sunshine.app, name="sunshine")
app.add_typer(waybar.app, name="waybar")
app.add_typer(hyprland.app, name="hyprland")
app.add_typer(ghostty.app, name="ghostty")
app.add_typer(disk.app, name="disk")
app.add_typer(snapshots.app, name="snapshots")
app.add_typer(history.app, name="history")
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
