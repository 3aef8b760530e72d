"""State management for history tracking.

This module provides the StateManager class for persisting and querying
history entries in a JSONL file format, and a helper that records a
command's step results without interrupting the command on failure.
"""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any

from omarchyctl.core.paths import ensure_state_dir, get_state_dir
from omarchyctl.models.history import HistoryEntry, HistoryKind, create_history_entry
from omarchyctl.models.step import StepResult

logger = logging.getLogger(__name__)


class StateManager:
    """Manages history state in JSONL file.

    Storage location: ~/.local/state/omarchyctl/history.jsonl

    Each line is a complete JSON object representing a HistoryEntry, which
    allows append-only writes and tolerant parsing.

    Attributes:
        state_dir: Directory containing the history file.
    """

    HISTORY_FILENAME = "history.jsonl"

    def __init__(self, state_dir: Path | None = None) -> None:
        """Initialize StateManager.

        Args:
            state_dir: Optional override for state directory.
                      Default: ~/.local/state/omarchyctl
        """
        self._state_dir = state_dir if state_dir is not None else get_state_dir()

    @property
    def history_path(self) -> Path:
        """Path to history.jsonl file."""
        return self._state_dir / self.HISTORY_FILENAME

    def record(self, entry: HistoryEntry) -> None:
        """Append an entry to the history file.

        Creates file and parent directories if they don't exist.

        Args:
            entry: The history entry to record.

        Raises:
            RuntimeError: If the state directory cannot be created.
            OSError: If the file cannot be written.
        """
        if self._state_dir == get_state_dir():
            ensure_state_dir()
        else:
            self._state_dir.mkdir(parents=True, exist_ok=True)

        with self.history_path.open(mode="a", encoding="utf-8") as f:
            f.write(entry.to_json_line() + "\n")
            f.flush()

    def get_history(
        self,
        limit: int | None = None,
        since: datetime | None = None,
    ) -> list[HistoryEntry]:
        """Read history entries, newest first.

        Args:
            limit: Maximum number of entries to return, applied after
                ``since``. If None, returns all entries.
            since: Keep entries from this point on. A naive value compares
                by calendar date; an aware one compares exact timestamps.

        Returns:
            List of HistoryEntry, newest first.
            Returns empty list if file doesn't exist.
        """
        if not self.history_path.exists():
            return []

        entries: list[HistoryEntry] = []

        with self.history_path.open(encoding="utf-8") as f:
            for line_num, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue

                try:
                    entries.append(HistoryEntry.from_json_line(line))
                except (json.JSONDecodeError, KeyError, ValueError) as e:
                    logger.warning("Skipping corrupt history line %d: %s", line_num, str(e))
                    continue

        entries.reverse()

        if since is not None:
            entries = [e for e in entries if _is_since(e, since)]

        if limit is not None:
            return entries[:limit]

        return entries


def _is_since(entry: HistoryEntry, since: datetime) -> bool:
    recorded = datetime.fromisoformat(entry.timestamp.replace("Z", "+00:00"))
    if since.tzinfo is None:
        return recorded.date() >= since.date()
    return recorded >= since


def record_run(
    kind: HistoryKind,
    results: list[StepResult],
    metadata: dict[str, Any] | None = None,
    state: StateManager | None = None,
) -> None:
    """Record a command's step results to history.

    Errors during history recording are logged but do **not** interrupt
    the calling command's flow.

    Args:
        kind: Command that produced the results.
        results: Step results in execution order. Nothing is recorded if empty.
        metadata: Optional context stored with the entry. The command line
            is added automatically.
        state: Optional StateManager (defaults to the XDG state location).
    """
    if not results:
        return

    meta = {"command": " ".join(["omarchyctl", *sys.argv[1:]]), **(metadata or {})}
    try:
        (state or StateManager()).record(create_history_entry(kind, results, meta))
        logger.debug("Recorded %d step(s) for %s", len(results), kind.value)
    except (OSError, RuntimeError) as e:
        logger.warning("Failed to record history: %s", str(e))
