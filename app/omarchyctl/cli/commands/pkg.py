"""Package commands.

``omarchyctl pkg add`` installs a package with yay and records an
idempotent installer for it in the git-tracked setup script;
``omarchyctl pkg install-list`` installs everything in the package list.
"""

from pathlib import Path
from typing import Annotated

import typer

from omarchyctl.cli.helpers import get_settings, report, report_error
from omarchyctl.core.errors import COMMAND_ERRORS
from omarchyctl.models.history import HistoryKind
from omarchyctl.packages.listfile import install_packages_from_list
from omarchyctl.packages.setup_script import SetupRepo, add_package
from omarchyctl.utils.formatting import print_info, print_step

app = typer.Typer(
    help="Install packages and track them in the setup repository.",
    no_args_is_help=True,
)


@app.command()
def add(
    ctx: typer.Context,
    package: Annotated[
        str,
        typer.Argument(help="Package to install (AUR or repository)."),
    ],
    run: Annotated[
        bool,
        typer.Option(
            "--run",
            help="Run the generated installer function after adding it.",
        ),
    ] = False,
    no_push: Annotated[
        bool,
        typer.Option(
            "--no-push",
            help="Commit but do not push.",
        ),
    ] = False,
    add_to_list: Annotated[
        bool,
        typer.Option(
            "--list",
            help="Also add the package to the package list.",
        ),
    ] = False,
) -> None:
    """Install a package and add its installer to the setup script.

    The installer function is appended only once; the change is committed
    and pushed when a remote is configured.

    Examples:
        omarchyctl pkg add visual-studio-code-bin
        omarchyctl pkg add btop --run --no-push
        omarchyctl pkg add obsidian --list
    """
    settings = get_settings(ctx)
    repo = SetupRepo.from_settings(settings.setup)
    metadata = {"package": package}

    print_step(f"Adding '{package}' to {repo.script}")
    try:
        results = add_package(
            package,
            repo,
            run_after=run,
            push=not no_push,
            add_to_list=add_to_list,
        )
    except COMMAND_ERRORS as e:
        report_error(HistoryKind.PACKAGE_ADD, "add", e, metadata=metadata)

    report(HistoryKind.PACKAGE_ADD, results, metadata=metadata)


@app.command("install-list")
def install_list(
    ctx: typer.Context,
    list_file: Annotated[
        Path | None,
        typer.Option(
            "--list",
            "-l",
            help="Package list file. Default: the list in the setup repository.",
        ),
    ] = None,
    extra_args: Annotated[
        list[str] | None,
        typer.Argument(
            help="Extra yay arguments, given after '--'.",
            show_default=False,
        ),
    ] = None,
) -> None:
    """Install every package named in a package list with yay.

    Examples:
        omarchyctl pkg install-list
        omarchyctl pkg install-list -l ~/packages.list
        omarchyctl pkg install-list -- --overwrite '*'
    """
    settings = get_settings(ctx)
    path = (list_file or settings.setup.package_list_path).expanduser()
    metadata = {"list": str(path)}

    print_info(f"Installing packages from {path}")
    try:
        result = install_packages_from_list(path, extra_args or None)
    except COMMAND_ERRORS as e:
        report_error(HistoryKind.PACKAGE_LIST, "package-list", e, metadata=metadata)

    report(HistoryKind.PACKAGE_LIST, [result], metadata=metadata)
