"""Step result models.

A provisioning step is one guarded unit of work (check, then mutate or
skip). Every step reports what it did through a :class:`StepResult`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class StepStatus(Enum):
    """Outcome of a provisioning step.

    Attributes:
        CHANGED: The step modified the system.
        UNCHANGED: The system already matched; nothing was done.
        SKIPPED: The step did not apply (e.g. program not installed).
        FAILED: The step could not complete.
    """

    CHANGED = "changed"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class StepResult:
    """Outcome of a single provisioning step.

    Attributes:
        name: Step identifier (e.g. "zshrc-config").
        status: What happened.
        message: Human-readable detail.
        error: Error message when the step failed.
    """

    name: str
    status: StepStatus
    message: str | None = None
    error: str | None = None

    @property
    def failed(self) -> bool:
        """Check if the step failed."""
        return self.status == StepStatus.FAILED

    @property
    def changed(self) -> bool:
        """Check if the step modified the system."""
        return self.status == StepStatus.CHANGED

    @classmethod
    def from_changed(cls, name: str, changed: bool, message: str | None = None) -> StepResult:
        """Build a CHANGED or UNCHANGED result from a boolean."""
        return cls(
            name=name,
            status=StepStatus.CHANGED if changed else StepStatus.UNCHANGED,
            message=message,
        )
