"""Snapper snapshot configuration.

Creates snapper configs for the Btrfs subvolumes, applies the retention
policy, installs pacman hooks that snapshot the root filesystem around
every transaction and enables the timeline and cleanup timers.
"""

import logging
import os
import textwrap
from pathlib import Path

from omarchyctl.core.errors import PreconditionError
from omarchyctl.core.settings import SnapperSettings
from omarchyctl.models.step import StepResult, StepStatus
from omarchyctl.utils.shell import command_exists, run_command
from omarchyctl.utils.textedit import read_text

logger = logging.getLogger(__name__)

SNAPPER_CONFIGS_DIR = Path("/etc/snapper/configs")
PACMAN_HOOKS_DIR = Path("/etc/pacman.d/hooks")

TIMERS = ["snapper-timeline.timer", "snapper-cleanup.timer"]

SNAPPER_CREATE = (
    "/usr/bin/snapper --no-dbus --config root create --type single --cleanup-algorithm number"
)

HOOK_TEMPLATE = textwrap.dedent(
    """\
    [Trigger]
    Operation = Upgrade
    Operation = Install
    Operation = Remove
    Type = Package
    Target = *

    [Action]
    Description = Creating snapper {phase}-transaction snapshot...
    Depends = snapper
    When = {when}
    Exec = {command} --description "pacman {phase}-transaction"
    """
)


def render_hooks() -> dict[str, str]:
    """Hook file names mapped to their content."""
    return {
        "05-snapper-pre.hook": HOOK_TEMPLATE.format(
            phase="pre", when="PreTransaction", command=SNAPPER_CREATE
        ),
        "zz-snapper-post.hook": HOOK_TEMPLATE.format(
            phase="post", when="PostTransaction", command=SNAPPER_CREATE
        ),
    }


def parse_snapper_config(output: str) -> dict[str, str]:
    """Parse the ``snapper get-config`` table into a dict.

    Handles both the box-drawing (``│``) and ASCII (``|``) separators.
    """
    values: dict[str, str] = {}
    for line in output.splitlines():
        separator = "│" if "│" in line else "|"
        if separator not in line:
            continue
        key, _, value = line.partition(separator)
        key = key.strip()
        if not key or key == "Key":
            continue
        values[key] = value.strip()
    return values


def ensure_configs(
    settings: SnapperSettings,
    configs_dir: Path = SNAPPER_CONFIGS_DIR,
) -> StepResult:
    """Create missing snapper configs.

    When ``<mount point>/.snapshots`` is already a mounted subvolume (the
    ``@snapshots`` layout), it is unmounted for ``create-config``, the
    nested subvolume snapper creates is deleted and the original mount is
    restored from fstab.

    Raises:
        CommandFailedError: If ``snapper create-config`` fails.
    """
    created: list[str] = []
    for name, mount_point in settings.configs.items():
        if (configs_dir / name).exists():
            logger.debug("Snapper config %s exists", name)
            continue
        logger.info("Creating snapper config %s for %s", name, mount_point)
        snapshots = str(Path(mount_point) / ".snapshots")
        if os.path.ismount(snapshots):
            _create_config_over_mount(name, mount_point, snapshots)
        else:
            run_command(["sudo", "snapper", "-c", name, "create-config", mount_point], check=True)
        created.append(name)

    if created:
        return StepResult.from_changed("configs", True, f"Created {', '.join(created)}")
    return StepResult.from_changed("configs", False, f"{', '.join(settings.configs)} exist")


def _create_config_over_mount(name: str, mount_point: str, snapshots: str) -> None:
    logger.info("%s is a mounted subvolume; remounting it around create-config", snapshots)
    for args in (
        ["sudo", "umount", snapshots],
        ["sudo", "rmdir", snapshots],
        ["sudo", "snapper", "-c", name, "create-config", mount_point],
        ["sudo", "btrfs", "subvolume", "delete", snapshots],
        ["sudo", "mkdir", snapshots],
        ["sudo", "mount", "-a"],
        ["sudo", "chmod", "750", snapshots],
    ):
        run_command(args, check=True)


def apply_retention(settings: SnapperSettings) -> StepResult:
    """Set timeline and number limits on every config, changing only what differs.

    Raises:
        CommandFailedError: If snapper fails.
    """
    wanted = settings.retention()
    updated: list[str] = []
    for name in settings.configs:
        current = parse_snapper_config(
            run_command(["sudo", "snapper", "-c", name, "get-config"], check=True).stdout
        )
        changes = [f"{key}={value}" for key, value in wanted.items() if current.get(key) != value]
        if not changes:
            continue
        logger.info("Setting %s on snapper config %s", ", ".join(changes), name)
        run_command(["sudo", "snapper", "-c", name, "set-config", *changes], check=True)
        updated.append(name)

    return StepResult.from_changed(
        "retention",
        bool(updated),
        f"Updated {', '.join(updated)}" if updated else "Retention policy already applied",
    )


def install_pacman_hooks(hooks_dir: Path = PACMAN_HOOKS_DIR) -> StepResult:
    """Write the pre/post transaction hooks unless identical ones exist.

    Raises:
        CommandFailedError: If writing a hook fails.
    """
    written: list[str] = []
    for name, content in render_hooks().items():
        path = hooks_dir / name
        if read_text(path) == content:
            continue
        run_command(["sudo", "mkdir", "-p", str(hooks_dir)], check=True)
        run_command(["sudo", "tee", str(path)], check=True, input_text=content)
        written.append(name)

    return StepResult.from_changed(
        "pacman-hooks",
        bool(written),
        f"Wrote {', '.join(written)}" if written else "Hooks up to date",
    )


def timer_running(timer: str) -> bool:
    """Check whether a timer is both enabled and active."""
    return (
        run_command(["systemctl", "is-enabled", timer]).success
        and run_command(["systemctl", "is-active", timer]).success
    )


def enable_timers() -> StepResult:
    """Enable and start the timeline and cleanup timers that are not running.

    Each timer is checked separately; ``systemctl is-enabled`` with several
    units succeeds as soon as one of them is enabled.

    Raises:
        CommandFailedError: If systemctl fails.
    """
    pending = [timer for timer in TIMERS if not timer_running(timer)]
    if not pending:
        return StepResult.from_changed("timers", False, "Timers already enabled")
    run_command(["sudo", "systemctl", "enable", "--now", *pending], check=True)
    return StepResult.from_changed("timers", True, f"Enabled {', '.join(pending)}")


def setup_snapshots(
    settings: SnapperSettings,
    *,
    configs_dir: Path = SNAPPER_CONFIGS_DIR,
    hooks_dir: Path = PACMAN_HOOKS_DIR,
) -> list[StepResult]:
    """Configure snapper end to end.

    Raises:
        PreconditionError: If snapper is not installed.
        CommandFailedError: If a snapper or systemctl command fails.
    """
    if not command_exists("snapper"):
        raise PreconditionError("snapper is not installed. Install it with: sudo pacman -S snapper")

    results = [ensure_configs(settings, configs_dir), apply_retention(settings)]
    if settings.pacman_hooks:
        results.append(install_pacman_hooks(hooks_dir))
    else:
        results.append(
            StepResult(
                name="pacman-hooks", status=StepStatus.SKIPPED, message="Disabled in settings"
            )
        )
    results.append(enable_timers())
    return results
