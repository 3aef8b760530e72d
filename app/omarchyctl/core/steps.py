"""Sequential step execution.

Commands are built from ordered steps that run to completion or stop at
the first failure, the way a ``set -euo pipefail`` script does.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from omarchyctl.core.errors import COMMAND_ERRORS
from omarchyctl.models.step import StepResult, StepStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Step:
    """A named unit of provisioning work.

    Attributes:
        name: Identifier used by ``--only``/``--skip`` and in history.
        description: One-line summary shown in plans.
        run: Callable performing the step.
    """

    name: str
    description: str
    run: Callable[[], StepResult]


def select_steps(
    steps: list[Step],
    only: list[str] | None = None,
    skip: list[str] | None = None,
) -> list[Step]:
    """Filter steps by name, preserving their order.

    Args:
        steps: All steps in execution order.
        only: If given, keep only these steps.
        skip: Steps to drop.

    Returns:
        The selected steps.

    Raises:
        ValueError: If a name in ``only`` or ``skip`` is unknown.
    """
    known = {step.name for step in steps}
    unknown = sorted({*(only or []), *(skip or [])} - known)
    if unknown:
        available = ", ".join(s.name for s in steps)
        msg = f"Unknown step(s): {', '.join(unknown)}. Available: {available}"
        raise ValueError(msg)

    selected = [s for s in steps if not only or s.name in only]
    return [s for s in selected if s.name not in (skip or [])]


def run_steps(
    steps: list[Step],
    on_result: Callable[[StepResult], None] | None = None,
) -> list[StepResult]:
    """Run steps in order, stopping after the first failure.

    A step fails by returning a FAILED result or by raising
    :class:`ProvisionError`, ``OSError`` or ``subprocess.TimeoutExpired``;
    raised errors are converted into FAILED results.

    Args:
        steps: Steps to run.
        on_result: Called with each result as soon as it is available.

    Returns:
        Results of the steps that ran, in order.
    """
    results: list[StepResult] = []
    for step in steps:
        logger.debug("Running step %s", step.name)
        try:
            result = step.run()
        except COMMAND_ERRORS as e:
            logger.debug("Step %s raised: %s", step.name, e)
            result = StepResult(name=step.name, status=StepStatus.FAILED, error=str(e))

        results.append(result)
        if on_result is not None:
            on_result(result)
        if result.failed:
            break
    return results
