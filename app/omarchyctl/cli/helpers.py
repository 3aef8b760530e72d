"""Shared helpers for CLI commands.

Commands load settings from the path chosen by the global ``--config``
option, report step results the same way and map domain errors onto exit
codes: 0 on success, 1 on failure, 2 on usage errors.
"""

from typing import Any, NoReturn

import typer

from omarchyctl.cli.display import create_results_table, print_results_summary
from omarchyctl.core.errors import SettingsError
from omarchyctl.core.settings import Settings, load_settings
from omarchyctl.core.state import record_run
from omarchyctl.models.history import HistoryKind
from omarchyctl.models.step import StepResult, StepStatus
from omarchyctl.utils.formatting import console, print_error

EXIT_FAILURE = 1
EXIT_USAGE = 2


def fail(message: str, code: int = EXIT_FAILURE) -> NoReturn:
    """Print an error and exit with ``code``."""
    print_error(message)
    raise typer.Exit(code=code)


def get_settings(ctx: typer.Context) -> Settings:
    """Load settings from ``--config`` or the default location.

    Exits with code 1 when the file is invalid.
    """
    config_path = (ctx.obj or {}).get("config_path")
    try:
        return load_settings(config_path)
    except SettingsError as e:
        fail(str(e))


def report(
    kind: HistoryKind,
    results: list[StepResult],
    *,
    title: str = "Results",
    metadata: dict[str, Any] | None = None,
    show_table: bool = True,
) -> None:
    """Record results to history, display them and exit 1 on failure."""
    record_run(kind, results, metadata)
    if not results:
        return
    if show_table:
        console.print(create_results_table(results, title=title))
    print_results_summary(results)
    if any(r.failed for r in results):
        raise typer.Exit(code=EXIT_FAILURE)


def report_error(
    kind: HistoryKind,
    step: str,
    error: Exception,
    results: list[StepResult] | None = None,
    metadata: dict[str, Any] | None = None,
) -> NoReturn:
    """Record a failed step ending a command, print the error and exit 1."""
    failed = StepResult(name=step, status=StepStatus.FAILED, error=str(error))
    record_run(kind, [*(results or []), failed], metadata)
    fail(str(error))
