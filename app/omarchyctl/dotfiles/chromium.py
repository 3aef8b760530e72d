"""Chromium workspace-move crash workaround.

Chromium on Hyprland crashes when windows move between workspaces unless it
runs on XWayland with ANGLE over OpenGL. A wrapper script carrying those
flags is installed and wired into the desktop file and Omarchy's webapp
launcher.
"""

import logging
import re
import shutil
from pathlib import Path

from omarchyctl.core.paths import get_omarchy_share_dir, get_user_config_home
from omarchyctl.models.step import StepResult, StepStatus
from omarchyctl.utils.environment import import_user_environment, write_environment_file
from omarchyctl.utils.shell import command_exists, run_best_effort
from omarchyctl.utils.textedit import read_text, write_if_changed

logger = logging.getLogger(__name__)

CHROMIUM_FLAGS = [
    "--ozone-platform=x11",
    "--use-gl=egl-angle",
    "--use-angle=opengl",
]

SYSTEM_DESKTOP_FILE = Path("/usr/share/applications/chromium.desktop")


def wrapper_path() -> Path:
    """Location of the ``chromium-stable`` wrapper."""
    return get_omarchy_share_dir() / "bin" / "chromium-stable"


def render_wrapper() -> str:
    """Render the wrapper script passing the stable flags."""
    flags = "".join(f"  {flag} \\\n" for flag in CHROMIUM_FLAGS)
    return f'#!/usr/bin/env bash\nexec chromium \\\n{flags}  "$@"\n'


def render_desktop_file(text: str, wrapper: Path) -> str:
    """Point every ``Exec=`` line of a desktop entry at the wrapper."""
    return re.sub(r"^Exec=.*$", f"Exec={wrapper} %U", text, flags=re.MULTILINE)


def patch_webapp_launcher(text: str, wrapper: Path, log_file: Path) -> str:
    """Route ``exec chromium`` in omarchy-launch-webapp through the wrapper."""
    replacement = f"exec {wrapper} --enable-logging=stderr --v=1 2>>{log_file}"
    return re.sub(
        r"^([ \t]*)exec[ \t]*chromium",
        lambda m: m.group(1) + replacement,
        text,
        flags=re.MULTILINE,
    )


def _override_desktop_file(wrapper: Path) -> bool:
    if not SYSTEM_DESKTOP_FILE.is_file():
        logger.warning("Could not find %s to override.", SYSTEM_DESKTOP_FILE)
        return False

    applications = Path.home() / ".local" / "share" / "applications"
    target = applications / SYSTEM_DESKTOP_FILE.name
    changed = write_if_changed(target, render_desktop_file(read_text(SYSTEM_DESKTOP_FILE), wrapper))
    if changed:
        run_best_effort(["xdg-settings", "set", "default-web-browser", SYSTEM_DESKTOP_FILE.name])
        run_best_effort(["update-desktop-database", str(applications)])
    return changed


def _patch_webapp_launcher(wrapper: Path) -> bool:
    share = get_omarchy_share_dir()
    launcher = share / "bin" / "omarchy-launch-webapp"
    if not launcher.is_file():
        logger.warning("omarchy-launch-webapp not found. Skipping webapp launcher patch.")
        return False

    logs = share / "logs"
    logs.mkdir(parents=True, exist_ok=True)
    return write_if_changed(
        launcher, patch_webapp_launcher(read_text(launcher), wrapper, logs / "chromium.log")
    )


def clean_profile_state(profile_dir: Path | None = None) -> None:
    """Kill running Chromium and drop singleton locks and GPU caches."""
    profile = profile_dir or get_user_config_home() / "chromium"
    run_best_effort(["killall", "-9", "chromium", "chrome"])
    for lock in profile.glob("Singleton*"):
        lock.unlink(missing_ok=True)
    for cache in ("GPUCache", "ShaderCache"):
        shutil.rmtree(profile / cache, ignore_errors=True)


def setup_chromium_workspace_fix() -> StepResult:
    """Install the wrapper, flags, environment and desktop overrides.

    Profile state is cleaned only when the wrapper or flags change, so
    re-running does not kill a running browser.
    """
    if not command_exists("chromium"):
        return StepResult(
            name="chromium",
            status=StepStatus.SKIPPED,
            message="chromium not found on PATH. Skipping Chromium setup.",
        )

    wrapper = wrapper_path()
    wrapper_changed = write_if_changed(wrapper, render_wrapper(), mode=0o755)

    path_changed = write_environment_file(
        "omarchy-path.conf", ["PATH=$HOME/.local/share/omarchy/bin:$PATH"]
    )
    if path_changed:
        import_user_environment("PATH")

    flags_file = get_user_config_home() / "chromium-flags.conf"
    flags_changed = write_if_changed(flags_file, "\n".join(CHROMIUM_FLAGS) + "\n")

    desktop_changed = _override_desktop_file(wrapper)
    launcher_changed = _patch_webapp_launcher(wrapper)

    if wrapper_changed or flags_changed:
        logger.info("Cleaning Chromium caches and singletons")
        clean_profile_state()

    changed = any(
        [wrapper_changed, path_changed, flags_changed, desktop_changed, launcher_changed]
    )
    return StepResult.from_changed(
        "chromium",
        changed,
        "Chromium configured. Log out and back in once so GUI PATH takes effect."
        if changed
        else "Chromium wrapper and flags up to date",
    )
