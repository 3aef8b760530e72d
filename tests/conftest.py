"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from pathlib import Path

import pytest


@pytest.fixture
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HOME at a temporary directory and clear XDG overrides."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    for var in ("XDG_CONFIG_HOME", "XDG_STATE_HOME"):
        monkeypatch.delenv(var, raising=False)
    return home_dir


@pytest.fixture
def mock_snapper_config_output() -> str:
    """Sample ``snapper get-config`` output for testing."""
    return """Key                    │ Value
───────────────────────┼──────
ALLOW_GROUPS           │
NUMBER_LIMIT           │ 50
SUBVOLUME              │ /
TIMELINE_CREATE        │ yes
TIMELINE_LIMIT_DAILY   │ 10
TIMELINE_LIMIT_HOURLY  │ 10
TIMELINE_LIMIT_MONTHLY │ 10
TIMELINE_LIMIT_WEEKLY  │ 0
TIMELINE_LIMIT_YEARLY  │ 10"""


@pytest.fixture
def mock_fstab_output() -> str:
    """Sample ``genfstab -U`` output for testing."""
    return """# /dev/nvme0n1p2 LABEL=ARCH-BTRFS
UUID=1111-aaaa\t/\tbtrfs\trw,noatime,compress=zstd:3,ssd,space_cache=v2,discard=async,subvol=/@\t0 0

# /dev/nvme0n1p1 LABEL=BOOT
UUID=ABCD-1234\t/boot\tvfat\trw,relatime\t0 2"""
