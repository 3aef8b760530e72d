"""Fixtures shared by CLI command tests."""

from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest


@pytest.fixture(autouse=True)
def mock_record_run(home: Path) -> Iterator[MagicMock]:
    """Isolate HOME and capture history writes made by commands."""
    with patch("omarchyctl.cli.helpers.record_run") as mock_record:
        yield mock_record
