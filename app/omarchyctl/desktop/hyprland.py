"""Managed block of extra lines in hyprland.conf."""

import logging
from pathlib import Path

from omarchyctl.core.paths import get_user_config_home
from omarchyctl.core.settings import HyprlandSettings
from omarchyctl.models.step import StepResult, StepStatus
from omarchyctl.utils.shell import command_exists, run_best_effort
from omarchyctl.utils.textedit import read_text, upsert_managed_block, write_if_changed

logger = logging.getLogger(__name__)

BLOCK_BEGIN = "# BEGIN OMARCHYCTL (managed)"
BLOCK_END = "# END OMARCHYCTL (managed)"


def hyprland_config_path() -> Path:
    """``~/.config/hypr/hyprland.conf``."""
    return get_user_config_home() / "hypr" / "hyprland.conf"


def render_hyprland_block(lines: list[str]) -> str:
    """Wrap configured lines in the managed markers."""
    return "\n".join([BLOCK_BEGIN, *lines, BLOCK_END]) + "\n"


def configure_hyprland(settings: HyprlandSettings, *, reload: bool = True) -> list[StepResult]:
    """Write the managed block and ask Hyprland to reload its config."""
    path = hyprland_config_path()
    text = upsert_managed_block(
        read_text(path), BLOCK_BEGIN, BLOCK_END, render_hyprland_block(settings.lines)
    )
    changed = write_if_changed(path, text)
    results = [StepResult.from_changed("hyprland-conf", changed, str(path))]

    if reload and changed and command_exists("hyprctl"):
        if run_best_effort(["hyprctl", "reload"]):
            results.append(StepResult.from_changed("reload", True, "Hyprland reloaded"))
        else:
            results.append(
                StepResult(
                    name="reload",
                    status=StepStatus.SKIPPED,
                    message="hyprctl reload failed; log out or reload manually",
                )
            )
    elif reload:
        results.append(
            StepResult(
                name="reload",
                status=StepStatus.SKIPPED,
                message="Nothing to reload" if not changed else "hyprctl not found",
            )
        )
    return results
