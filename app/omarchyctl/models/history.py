"""History entry model for tracking provisioning runs.

This module defines data structures for recording what each command
changed on the machine in a JSONL history file.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from omarchyctl.models.step import StepResult, StepStatus


class HistoryKind(str, Enum):
    """Command that produced a history entry."""

    PACKAGE_ADD = "package_add"
    PACKAGE_LIST = "package_list"
    SETUP = "setup"
    GPU_MODE = "gpu_mode"
    SUNSHINE = "sunshine"
    WAYBAR = "waybar"
    HYPRLAND = "hyprland"
    GHOSTTY = "ghostty"
    DISK = "disk"
    SNAPSHOTS = "snapshots"


@dataclass(frozen=True, slots=True)
class HistoryItem:
    """Outcome of one step within a recorded run.

    Attributes:
        name: Step name (e.g. 'zsh-plugins', 'subvolumes').
        status: Step outcome.
        detail: Optional message or error text.
    """

    name: str
    status: StepStatus
    detail: str | None = None

    def __post_init__(self) -> None:
        """Validate item data after initialization."""
        if not self.name:
            msg = "Step name cannot be empty"
            raise ValueError(msg)

    @classmethod
    def from_step(cls, result: StepResult) -> HistoryItem:
        """Create a history item from a step result."""
        return cls(name=result.name, status=result.status, detail=result.error or result.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        result: dict[str, Any] = {"name": self.name, "status": self.status.value}
        if self.detail is not None:
            result["detail"] = self.detail
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HistoryItem:
        """Deserialize from dictionary.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If status is invalid.
        """
        return cls(
            name=data["name"],
            status=StepStatus(data["status"]),
            detail=data.get("detail"),
        )


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """Record of a single command run.

    Attributes:
        id: Unique identifier (12-character hex string from UUID).
        timestamp: When the run finished (ISO 8601 format with timezone).
        kind: Which command produced the entry.
        items: Step outcomes in execution order.
        success: Whether every step completed without failure.
        metadata: Additional context (command line, arguments).
    """

    id: str
    timestamp: str
    kind: HistoryKind
    items: tuple[HistoryItem, ...]
    success: bool = True
    metadata: dict[str, Any] = field(default_factory=lambda: {})

    def __post_init__(self) -> None:
        """Validate entry data after initialization."""
        if not self.id:
            msg = "History entry ID cannot be empty"
            raise ValueError(msg)
        if not self.timestamp:
            msg = "Timestamp cannot be empty"
            raise ValueError(msg)
        if not self.items:
            msg = "History entry must have at least one item"
            raise ValueError(msg)

    @property
    def changed_count(self) -> int:
        """Number of steps that modified the system."""
        return sum(1 for item in self.items if item.status == StepStatus.CHANGED)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "kind": self.kind.value,
            "items": [item.to_dict() for item in self.items],
            "success": self.success,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HistoryEntry:
        """Deserialize from dictionary.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If kind or item data is invalid.
        """
        return cls(
            id=data["id"],
            timestamp=data["timestamp"],
            kind=HistoryKind(data["kind"]),
            items=tuple(HistoryItem.from_dict(item) for item in data["items"]),
            success=data.get("success", True),
            metadata=data.get("metadata", {}),
        )

    def to_json_line(self) -> str:
        """Serialize to JSON line for JSONL storage (no trailing newline)."""
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_json_line(cls, line: str) -> HistoryEntry:
        """Deserialize from JSON line.

        Raises:
            json.JSONDecodeError: If line is not valid JSON.
            KeyError: If required fields are missing.
            ValueError: If data is invalid.
        """
        return cls.from_dict(json.loads(line.strip()))


def create_history_entry(
    kind: HistoryKind,
    results: list[StepResult],
    metadata: dict[str, Any] | None = None,
) -> HistoryEntry:
    """Factory function to create a new HistoryEntry from step results.

    Automatically generates a unique ID and current timestamp.

    Args:
        kind: Command that produced the results.
        results: Step results in execution order.
        metadata: Optional additional context.

    Returns:
        New HistoryEntry with auto-generated ID and timestamp.

    Raises:
        ValueError: If results list is empty.
    """
    if not results:
        msg = "Cannot create history entry with no step results"
        raise ValueError(msg)

    return HistoryEntry(
        id=uuid.uuid4().hex[:12],
        timestamp=datetime.now(UTC).isoformat(),
        kind=kind,
        items=tuple(HistoryItem.from_step(r) for r in results),
        success=not any(r.failed for r in results),
        metadata=metadata or {},
    )
