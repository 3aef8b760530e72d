"""CLI commands for omarchyctl.

This package contains all subcommand implementations.
"""

from omarchyctl.cli.commands import (
    config,
    disk,
    ghostty,
    gpu,
    history,
    hyprland,
    pkg,
    setup,
    snapshots,
    sunshine,
    waybar,
)

__all__ = [
    "config",
    "disk",
    "ghostty",
    "gpu",
    "history",
    "hyprland",
    "pkg",
    "setup",
    "snapshots",
    "sunshine",
    "waybar",
]
