"""Shared Rich display functions for step plans and results.

Provides reusable table builders and summary printers used by every
provisioning command.
"""

from rich.table import Table

from omarchyctl.core.steps import Step
from omarchyctl.models.step import StepResult, StepStatus
from omarchyctl.utils.formatting import console, print_success

STATUS_STYLES: dict[StepStatus, str] = {
    StepStatus.CHANGED: "changed",
    StepStatus.UNCHANGED: "unchanged",
    StepStatus.SKIPPED: "skipped",
    StepStatus.FAILED: "error",
}


def format_status(status: StepStatus) -> str:
    """Rich markup for a step status."""
    style = STATUS_STYLES[status]
    return f"[{style}]{status.value}[/{style}]"


def create_plan_table(steps: list[Step], title: str = "Planned Steps") -> Table:
    """Create a Rich table listing steps that would run.

    Args:
        steps: Steps in execution order.
        title: Table title.

    Returns:
        Rich Table with #, Step and Description columns.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("#", justify="right", width=3)
    table.add_column("Step", no_wrap=True)
    table.add_column("Description")

    for index, step in enumerate(steps, start=1):
        table.add_row(str(index), step.name, f"[muted]{step.description}[/muted]")

    return table


def create_results_table(results: list[StepResult], title: str = "Results") -> Table:
    """Create a Rich table displaying step results.

    Failed steps show their error; other steps show their message.

    Args:
        results: Step results in execution order.
        title: Table title.

    Returns:
        Rich Table with Status, Step and Detail columns.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", width=9)
    table.add_column("Step", no_wrap=True)
    table.add_column("Detail")

    for result in results:
        if result.failed:
            detail = result.error or "Unknown error"
        else:
            detail = result.message or ""
        table.add_row(format_status(result.status), result.name, f"[muted]{detail}[/muted]")

    return table


def print_step_result(result: StepResult) -> None:
    """Print one result as soon as its step finishes."""
    detail = result.error if result.failed else result.message
    line = f"{format_status(result.status)} {result.name}"
    console.print(f"{line} [muted]{detail}[/muted]" if detail else line)


def print_results_summary(results: list[StepResult]) -> None:
    """Print a summary of step results.

    Shows a success message when nothing failed, or counts per status
    otherwise.

    Args:
        results: Step results.
    """
    changed = sum(1 for r in results if r.status == StepStatus.CHANGED)
    unchanged = sum(1 for r in results if r.status == StepStatus.UNCHANGED)
    skipped = sum(1 for r in results if r.status == StepStatus.SKIPPED)
    failed = sum(1 for r in results if r.failed)

    if failed == 0:
        print_success(f"Done: {changed} changed, {unchanged} unchanged, {skipped} skipped.")
    else:
        console.print(
            f"\n[changed]{changed} changed[/changed], "
            f"[unchanged]{unchanged} unchanged[/unchanged], "
            f"[error]{failed} failed[/error]"
        )
