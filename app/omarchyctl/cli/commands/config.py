"""Settings commands.

``omarchyctl config init`` writes a settings file with every default so it
can be edited; ``omarchyctl config show`` prints the effective settings.
"""

from typing import Annotated

import tomli_w
import typer

from omarchyctl.cli.helpers import fail, get_settings
from omarchyctl.core.errors import SettingsError
from omarchyctl.core.paths import get_settings_path
from omarchyctl.core.settings import Settings, save_settings
from omarchyctl.utils.formatting import console, print_info, print_success

app = typer.Typer(
    help="Create and inspect the omarchyctl settings file.",
    no_args_is_help=True,
)


@app.command()
def init(
    ctx: typer.Context,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Overwrite an existing settings file.",
        ),
    ] = False,
) -> None:
    """Write the default settings to config.toml.

    Examples:
        omarchyctl config init
        omarchyctl --config ./omarchyctl.toml config init --force
    """
    path = (ctx.obj or {}).get("config_path") or get_settings_path()
    if path.exists() and not force:
        print_info(f"Settings already exist at {path}. Use --force to overwrite.")
        return

    try:
        saved = save_settings(Settings(), path)
    except SettingsError as e:
        fail(str(e))
    print_success(f"Settings written to {saved}")


@app.command()
def show(ctx: typer.Context) -> None:
    """Print the effective settings as TOML."""
    settings = get_settings(ctx)
    console.print(
        tomli_w.dumps(settings.model_dump(mode="json")).rstrip(),
        markup=False,
        highlight=False,
        soft_wrap=True,
    )
