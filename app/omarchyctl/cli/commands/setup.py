"""Setup command running the workstation bootstrap steps."""

from typing import Annotated

import typer

from omarchyctl.cli.display import create_plan_table, print_step_result
from omarchyctl.cli.helpers import EXIT_USAGE, fail, get_settings, report
from omarchyctl.core.steps import run_steps, select_steps
from omarchyctl.dotfiles import build_setup_steps
from omarchyctl.models.history import HistoryKind
from omarchyctl.utils.formatting import console, print_info

app = typer.Typer(
    help="Bootstrap the workstation: shell, browser, editor and packages.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def setup(
    ctx: typer.Context,
    only: Annotated[
        list[str] | None,
        typer.Option(
            "--only",
            help="Run only this step (repeatable).",
        ),
    ] = None,
    skip: Annotated[
        list[str] | None,
        typer.Option(
            "--skip",
            help="Skip this step (repeatable).",
        ),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            help="Show the steps that would run and exit.",
        ),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option(
            "--yes",
            "-y",
            help="Skip confirmation prompt.",
        ),
    ] = False,
) -> None:
    """Run the bootstrap steps in order, stopping at the first failure.

    Every step checks the current state first, so re-running is safe.

    Examples:
        omarchyctl setup --dry-run
        omarchyctl setup --only zshrc-config --only default-shell
        omarchyctl setup --skip texlive -y
    """
    if ctx.invoked_subcommand is not None:
        return

    settings = get_settings(ctx)
    try:
        steps = select_steps(build_setup_steps(settings), only, skip)
    except ValueError as e:
        fail(str(e), EXIT_USAGE)

    if not steps:
        print_info("No steps selected.")
        return

    title = "Setup Plan (Dry Run)" if dry_run else "Setup Plan"
    console.print(create_plan_table(steps, title=title))
    if dry_run:
        return

    if not yes:
        confirmed = typer.confirm(f"\nRun {len(steps)} step(s)?", default=True)
        if not confirmed:
            print_info("Aborted.")
            raise typer.Exit(code=0)

    results = run_steps(steps, on_result=print_step_result)
    report(
        HistoryKind.SETUP,
        results,
        metadata={"steps": [s.name for s in steps]},
        show_table=False,
    )
