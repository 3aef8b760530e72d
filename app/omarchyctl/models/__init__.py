"""Data models for omarchyctl."""

from omarchyctl.models.action import Action, ActionResult
from omarchyctl.models.history import HistoryEntry, HistoryItem, HistoryKind
from omarchyctl.models.package import PackageSource
from omarchyctl.models.step import StepResult, StepStatus

__all__ = [
    "Action",
    "ActionResult",
    "HistoryEntry",
    "HistoryItem",
    "HistoryKind",
    "PackageSource",
    "StepResult",
    "StepStatus",
]
