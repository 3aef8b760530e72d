"""GPU mode switching with EnvyControl.

Switches between the integrated GPU, the NVIDIA GPU and hybrid mode, and
keeps the per-user VA-API driver override in
``~/.config/environment.d/10-gpu-vaapi.conf`` consistent with the mode.
"""

import logging
import os
from enum import Enum
from pathlib import Path

from omarchyctl.core.errors import ProvisionError
from omarchyctl.core.paths import get_environment_d_dir
from omarchyctl.models.step import StepResult
from omarchyctl.utils.environment import import_user_environment, write_environment_file
from omarchyctl.utils.shell import run_best_effort, run_command, run_interactive_checked

logger = logging.getLogger(__name__)

VAAPI_ENV_FILE = "10-gpu-vaapi.conf"
VAAPI_VARIABLE = "LIBVA_DRIVER_NAME"


class GpuMode(str, Enum):
    """EnvyControl graphics modes."""

    INTEGRATED = "integrated"
    NVIDIA = "nvidia"
    HYBRID = "hybrid"

    @property
    def vaapi_driver(self) -> str | None:
        """VA-API driver forced for this mode; None lets VA-API auto-select."""
        return {GpuMode.INTEGRATED: "iHD", GpuMode.NVIDIA: "nvidia"}.get(self)


def query_mode() -> str:
    """Return the active EnvyControl mode, lower-cased.

    Raises:
        CommandFailedError: If envycontrol fails.
    """
    return run_command(["sudo", "envycontrol", "-q"], check=True).stdout.strip().lower()


def apply_vaapi_override(mode: GpuMode) -> bool:
    """Write or remove the per-user VA-API override for ``mode``.

    The variable is also set in (or removed from) this process so it can
    be imported into the systemd user manager.

    Returns:
        True if the override file changed.
    """
    driver = mode.vaapi_driver
    if driver is None:
        env_file = get_environment_d_dir() / VAAPI_ENV_FILE
        os.environ.pop(VAAPI_VARIABLE, None)
        run_best_effort(["systemctl", "--user", "unset-environment", VAAPI_VARIABLE])
        if not env_file.exists():
            return False
        env_file.unlink()
        logger.info("Removed per-user VA-API override for hybrid")
        return True

    os.environ[VAAPI_VARIABLE] = driver
    changed = write_environment_file(VAAPI_ENV_FILE, [f"{VAAPI_VARIABLE}={driver}"])
    import_user_environment(VAAPI_VARIABLE)
    return changed


def switch_gpu_mode(mode: GpuMode) -> list[StepResult]:
    """Switch EnvyControl to ``mode`` and align the VA-API driver.

    Raises:
        CommandFailedError: If envycontrol fails.
        ProvisionError: If EnvyControl reports a different mode afterwards.
    """
    logger.info("Switching GPU mode to: %s", mode.value)
    run_interactive_checked(["sudo", "envycontrol", "-s", mode.value])

    active = query_mode()
    if active != mode.value:
        raise ProvisionError(f"EnvyControl reports '{active}' (expected '{mode.value}'). Aborting.")

    changed = apply_vaapi_override(mode)
    driver = mode.vaapi_driver
    return [
        StepResult.from_changed("envycontrol", True, f"Current mode: {active}"),
        StepResult.from_changed(
            "vaapi-env",
            changed,
            f"{VAAPI_VARIABLE}={driver}" if driver else "VA-API auto-selects the driver",
        ),
    ]


def intel_media_driver_present() -> bool:
    """Check ``ldconfig -p`` for the Intel iHD VA-API driver."""
    try:
        result = run_command(["ldconfig", "-p"], timeout=30.0)
    except OSError:
        return False
    return "iHD_drv_video" in result.stdout


def system_overrides(etc_dir: Path = Path("/etc")) -> list[Path]:
    """Files under /etc that set LIBVA_DRIVER_NAME system-wide."""
    candidates = [etc_dir / "environment"]
    env_d = etc_dir / "environment.d"
    if env_d.is_dir():
        candidates.extend(sorted(p for p in env_d.rglob("*") if p.is_file()))

    found: list[Path] = []
    for path in candidates:
        try:
            if VAAPI_VARIABLE in path.read_text(encoding="utf-8", errors="replace"):
                found.append(path)
        except OSError:
            continue
    return found


def gpu_mode_hints(mode: GpuMode, etc_dir: Path = Path("/etc")) -> list[str]:
    """Warnings about setups that defeat the chosen mode."""
    hints: list[str] = []
    if mode is GpuMode.INTEGRATED and not intel_media_driver_present():
        hints.append(
            "intel-media-driver missing. Install: sudo pacman -S intel-media-driver libva-utils"
        )
    overrides = system_overrides(etc_dir)
    if overrides:
        hints.append(
            f"System-wide {VAAPI_VARIABLE} detected in {', '.join(str(p) for p in overrides)}. "
            "That can override per-user on login; remove it if omarchyctl should control it."
        )
    return hints
