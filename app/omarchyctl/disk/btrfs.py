"""Btrfs disk preparation for a manual Arch install.

Three destructive steps, run in order from a live environment:

1. ``partition``: GPT label, an EFI system partition and a Btrfs partition;
2. ``format``: FAT32 on the ESP, Btrfs on the rest;
3. ``layout``: create the ``@``, ``@home``, ``@log``, ``@cache`` and
   ``@snapshots`` subvolumes and mount them under the target.

An optional ``fstab`` step writes the resulting mounts to the new system.
Each step refuses to touch devices that look in use unless forced.
"""

import logging
import os
import stat
from pathlib import Path

from omarchyctl.core.errors import PreconditionError
from omarchyctl.models.step import StepResult, StepStatus
from omarchyctl.utils.shell import command_exists, run_command
from omarchyctl.utils.textedit import read_text, write_text_atomic

logger = logging.getLogger(__name__)

# Subvolume name to mount point relative to the target, in mount order
SUBVOLUMES: dict[str, str] = {
    "@": "",
    "@home": "home",
    "@log": "var/log",
    "@cache": "var/cache",
    "@snapshots": ".snapshots",
}

RAW_MOUNT_DIR = "btrfs-root"


def require_commands(*names: str) -> None:
    """Raise PreconditionError for the first command missing from PATH."""
    for name in names:
        if not command_exists(name):
            raise PreconditionError(f"Missing command: {name}")


def is_block_device(path: str) -> bool:
    """Check whether ``path`` is a block device."""
    try:
        return stat.S_ISBLK(os.stat(path).st_mode)
    except OSError:
        return False


def require_block_device(path: str) -> None:
    """Raise PreconditionError unless ``path`` is a block device."""
    if not is_block_device(path):
        raise PreconditionError(f"{path} is not a block device")


def mount_options(compress: str) -> str:
    """Mount options shared by every subvolume."""
    return f"rw,noatime,compress={compress},ssd,space_cache=v2,discard=async"


def disk_has_partitions(disk: str) -> bool:
    """Check ``lsblk`` for partitions on ``disk``."""
    result = run_command(["lsblk", "-nr", "-o", "TYPE", disk], check=True)
    return "part" in result.stdout.split()


def partition_disk(disk: str, *, esp_end: str = "20GiB", force: bool = False) -> StepResult:
    """Create a GPT label, an ESP up to ``esp_end`` and a Btrfs partition.

    Raises:
        PreconditionError: If parted or lsblk is missing, ``disk`` is not a block
            device, or it already has partitions and ``force`` is off.
        CommandFailedError: If parted fails.
    """
    require_commands("parted", "lsblk")
    require_block_device(disk)
    if disk_has_partitions(disk):
        logger.warning("%s already has partitions.", disk)
        if not force:
            raise PreconditionError(f"{disk} already has partitions. Use -F to proceed anyway.")

    logger.info("Partitioning %s into %s ESP + rest Btrfs", disk, esp_end)
    run_command(
        [
            "parted", "--script", disk,
            "mklabel", "gpt",
            "mkpart", "ESP", "fat32", "1MiB", esp_end,
            "set", "1", "esp", "on",
            "mkpart", "primary", "btrfs", esp_end, "100%",
        ],
        check=True,
    )  # fmt: skip
    return StepResult.from_changed(
        "partition", True, f"{disk}: ESP 1MiB-{esp_end}, Btrfs {esp_end}-100%"
    )


def partition_report(disk: str) -> str:
    """``parted print`` and ``lsblk`` output for ``disk``."""
    parted = run_command(["parted", "-s", disk, "print"])
    lsblk = run_command(["lsblk", "-o", "NAME,SIZE,TYPE,FSTYPE,LABEL,PARTLABEL", disk])
    return (
        "== parted print ==\n"
        f"{parted.stdout.rstrip()}\n\n"
        "== lsblk -o NAME,SIZE,TYPE,FSTYPE,LABEL,PARTLABEL ==\n"
        f"{lsblk.stdout.rstrip()}"
    )


def format_partitions(
    efi_part: str,
    btrfs_part: str,
    *,
    label: str = "ARCH-BTRFS",
    efi_label: str = "BOOT",
) -> list[StepResult]:
    """Format the ESP as FAT32 and the other partition as Btrfs.

    Raises:
        PreconditionError: If mkfs tools are missing or a partition is not a
            block device.
        CommandFailedError: If mkfs fails.
    """
    require_commands("mkfs.vfat", "mkfs.btrfs")
    require_block_device(efi_part)
    require_block_device(btrfs_part)

    logger.info("Formatting EFI partition %s as FAT32 label=%s", efi_part, efi_label)
    run_command(["mkfs.vfat", "-F32", "-n", efi_label, efi_part], check=True)

    logger.info("Formatting Btrfs partition %s label=%s", btrfs_part, label)
    run_command(["mkfs.btrfs", "-L", label, btrfs_part], check=True, timeout=300.0)

    return [
        StepResult.from_changed("format-esp", True, f"{efi_part}: vfat, label {efi_label}"),
        StepResult.from_changed("format-btrfs", True, f"{btrfs_part}: btrfs, label {label}"),
    ]


def filesystems_report() -> str:
    """``lsblk -f`` output."""
    return "== lsblk -f ==\n" + run_command(["lsblk", "-f"]).stdout.rstrip()


def _blkid(tag: str, device: str) -> str:
    return run_command(["blkid", "-s", tag, "-o", "value", device]).stdout.strip()


def _check_target(target: Path, force: bool) -> None:
    if os.path.ismount(target):
        logger.warning("%s is already mounted.", target)
        if not force:
            raise PreconditionError(f"Unmount {target} or use -F to proceed.")
    if target.is_dir() and any(target.iterdir()):
        logger.warning("%s is not empty.", target)
        if not force:
            raise PreconditionError(f"Clean {target} or use -F to proceed.")


def _create_subvolumes(root: Path) -> list[str]:
    created: list[str] = []
    for name in SUBVOLUMES:
        path = root / name
        if run_command(["btrfs", "subvolume", "show", str(path)]).success:
            logger.info("Subvolume exists: %s", name)
            continue
        logger.info("Creating subvolume: %s", name)
        run_command(["btrfs", "subvolume", "create", str(path)], check=True)
        created.append(name)
    return created


def layout_subvolumes(
    efi_part: str,
    btrfs_part: str,
    *,
    label: str = "ARCH-BTRFS",
    compress: str = "zstd:3",
    target: str = "/mnt",
    force: bool = False,
) -> list[StepResult]:
    """Create the subvolumes and mount the final layout under ``target``.

    Raises:
        PreconditionError: If tools are missing, a partition is not a block
            device or not Btrfs, or ``target`` is in use and ``force`` is off.
        CommandFailedError: If a btrfs or mount command fails.
    """
    require_commands("blkid", "btrfs", "mount", "umount", "findmnt")
    require_block_device(efi_part)
    require_block_device(btrfs_part)

    root = Path(target)
    _check_target(root, force)

    raw = root / RAW_MOUNT_DIR
    raw.mkdir(parents=True, exist_ok=True)

    fstype = _blkid("TYPE", btrfs_part)
    if fstype != "btrfs":
        raise PreconditionError(f"{btrfs_part} is not Btrfs")

    results: list[StepResult] = []

    logger.info("Mounting raw Btrfs at %s to create subvolumes", raw)
    run_command(["mount", "-t", "btrfs", btrfs_part, str(raw)], check=True)
    try:
        current_label = _blkid("LABEL", btrfs_part)
        if current_label:
            results.append(
                StepResult.from_changed("label", False, f"Btrfs label detected: {current_label}")
            )
        else:
            run_command(["btrfs", "filesystem", "label", str(raw), label], check=True)
            results.append(StepResult.from_changed("label", True, f"Set Btrfs label to {label}"))

        created = _create_subvolumes(raw)
        results.append(
            StepResult.from_changed(
                "subvolumes",
                bool(created),
                f"Created {', '.join(created)}" if created else "All subvolumes exist",
            )
        )
    finally:
        run_command(["umount", str(raw)], check=True)

    options = mount_options(compress)
    for name, mount_point in SUBVOLUMES.items():
        destination = root / mount_point
        destination.mkdir(parents=True, exist_ok=True)
        logger.info("Mounting subvol=%s to %s", name, destination)
        run_command(
            ["mount", "-o", f"subvol={name},{options}", btrfs_part, str(destination)],
            check=True,
        )

    boot = root / "boot"
    boot.mkdir(parents=True, exist_ok=True)
    logger.info("Mounting EFI to %s", boot)
    run_command(["mount", efi_part, str(boot)], check=True)

    results.append(
        StepResult.from_changed(
            "mount", True, f"Mounted {len(SUBVOLUMES)} subvolumes and ESP under {root}"
        )
    )
    return results


def mounts_report(target: str = "/mnt") -> str:
    """``findmnt`` output for everything mounted under ``target``."""
    result = run_command(["findmnt", "-R", "-no", "TARGET,SOURCE,FSTYPE,OPTIONS", target])
    return f"== findmnt under {target} ==\n{result.stdout.rstrip()}"


def generate_fstab(target: str = "/mnt") -> str:
    """Run ``genfstab -U`` for ``target``.

    Raises:
        PreconditionError: If genfstab is missing.
        CommandFailedError: If genfstab fails.
    """
    require_commands("genfstab")
    return run_command(["genfstab", "-U", target], check=True).stdout


def missing_fstab_entries(existing: str, generated: str) -> list[str]:
    """Entries of ``generated`` not already present in ``existing``.

    Comments and blank lines are ignored; entries compare by whitespace-
    separated fields.
    """
    present = {tuple(line.split()) for line in existing.splitlines() if line.strip()}
    return [
        line
        for line in generated.splitlines()
        if line.strip() and not line.lstrip().startswith("#") and tuple(line.split()) not in present
    ]


def append_fstab(generated: str, target: str = "/mnt") -> StepResult:
    """Append missing entries of ``generated`` to ``<target>/etc/fstab``."""
    fstab = Path(target) / "etc" / "fstab"
    if not fstab.parent.is_dir():
        return StepResult(
            name="fstab",
            status=StepStatus.SKIPPED,
            message=f"{fstab.parent} does not exist; run pacstrap first",
        )

    existing = read_text(fstab)
    missing = missing_fstab_entries(existing, generated)
    if not missing:
        return StepResult.from_changed("fstab", False, f"{fstab} already has all entries")

    if existing and not existing.endswith("\n"):
        existing += "\n"
    write_text_atomic(fstab, existing + "\n".join(missing) + "\n")
    return StepResult.from_changed("fstab", True, f"Appended {len(missing)} entries to {fstab}")
