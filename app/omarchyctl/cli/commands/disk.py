"""Disk commands for a fresh Btrfs install.

Run from the live ISO as root, in order: ``partition``, ``format``,
``layout``, then ``fstab`` after pacstrap.
"""

from collections.abc import Callable
from typing import Annotated

import typer

from omarchyctl.cli.helpers import get_settings, report, report_error
from omarchyctl.core.errors import COMMAND_ERRORS
from omarchyctl.disk import btrfs
from omarchyctl.models.history import HistoryKind
from omarchyctl.utils.formatting import console, print_warning

app = typer.Typer(
    help="Partition, format and lay out a Btrfs disk.",
    no_args_is_help=True,
)

DiskOption = Annotated[
    str,
    typer.Option("--disk", "-d", help="Target disk (e.g. /dev/nvme0n1)."),
]
EspOption = Annotated[
    str,
    typer.Option("--esp", "-e", help="EFI system partition (e.g. /dev/nvme0n1p1)."),
]
BtrfsOption = Annotated[
    str,
    typer.Option("--btrfs", "-b", help="Btrfs partition (e.g. /dev/nvme0n1p2)."),
]
ForceOption = Annotated[
    bool,
    typer.Option("--force", "-F", help="Proceed even if safety checks fail."),
]


def _print_report(build: Callable[..., str], *args: str) -> None:
    """Print a diagnostic listing; a failure to produce it is only a warning."""
    try:
        text = build(*args)
    except COMMAND_ERRORS as e:
        print_warning(f"Could not print disk report: {e}")
        return
    console.print(text, markup=False, highlight=False, soft_wrap=True)


@app.command()
def partition(
    ctx: typer.Context,
    disk: DiskOption,
    force: ForceOption = False,
) -> None:
    """Create a GPT table with an ESP and a Btrfs partition.

    WARNING: destroys the partition table of DISK.

    Examples:
        omarchyctl disk partition -d /dev/nvme0n1
    """
    settings = get_settings(ctx)
    metadata = {"disk": disk}
    print_warning(f"Partitioning {disk} destroys all data on it.")
    try:
        result = btrfs.partition_disk(disk, esp_end=settings.btrfs.esp_end, force=force)
    except COMMAND_ERRORS as e:
        report_error(HistoryKind.DISK, "partition", e, metadata=metadata)

    _print_report(btrfs.partition_report, disk)
    report(HistoryKind.DISK, [result], title="Partition", metadata=metadata)


@app.command("format")
def format_(
    ctx: typer.Context,
    disk: DiskOption,
    esp: EspOption,
    btrfs_part: BtrfsOption,
    efi_label: Annotated[
        str | None,
        typer.Option("--efi-label", "-E", help="FAT32 label of the ESP."),
    ] = None,
    label: Annotated[
        str | None,
        typer.Option("--label", "-L", help="Btrfs filesystem label."),
    ] = None,
) -> None:
    """Format the ESP as FAT32 and the second partition as Btrfs.

    Examples:
        omarchyctl disk format -d /dev/nvme0n1 -e /dev/nvme0n1p1 -b /dev/nvme0n1p2
    """
    settings = get_settings(ctx)
    metadata = {"disk": disk, "esp": esp, "btrfs": btrfs_part}
    try:
        results = btrfs.format_partitions(
            esp,
            btrfs_part,
            label=label or settings.btrfs.label,
            efi_label=efi_label or settings.btrfs.efi_label,
        )
    except COMMAND_ERRORS as e:
        report_error(HistoryKind.DISK, "format", e, metadata=metadata)

    _print_report(btrfs.filesystems_report)
    report(HistoryKind.DISK, results, title="Format", metadata=metadata)


@app.command()
def layout(
    ctx: typer.Context,
    esp: EspOption,
    btrfs_part: BtrfsOption,
    compress: Annotated[
        str | None,
        typer.Option("--compress", "-C", help="Btrfs compression (e.g. zstd:3)."),
    ] = None,
    label: Annotated[
        str | None,
        typer.Option("--label", "-L", help="Label to set when the filesystem has none."),
    ] = None,
    force: ForceOption = False,
) -> None:
    """Create the subvolumes and mount them under the target.

    Examples:
        omarchyctl disk layout -e /dev/nvme0n1p1 -b /dev/nvme0n1p2 -C zstd:5
    """
    settings = get_settings(ctx)
    target = settings.btrfs.target
    metadata = {"esp": esp, "btrfs": btrfs_part, "target": target}
    try:
        results = btrfs.layout_subvolumes(
            esp,
            btrfs_part,
            label=label or settings.btrfs.label,
            compress=compress or settings.btrfs.compress,
            target=target,
            force=force,
        )
    except COMMAND_ERRORS as e:
        report_error(HistoryKind.DISK, "layout", e, metadata=metadata)

    _print_report(btrfs.mounts_report, target)
    report(HistoryKind.DISK, results, title="Layout", metadata=metadata)


@app.command()
def fstab(ctx: typer.Context) -> None:
    """Print genfstab output for the target and append missing entries.

    Examples:
        omarchyctl disk fstab
    """
    settings = get_settings(ctx)
    target = settings.btrfs.target
    metadata = {"target": target}
    try:
        generated = btrfs.generate_fstab(target)
        console.print(generated.rstrip(), markup=False, highlight=False, soft_wrap=True)
        result = btrfs.append_fstab(generated, target)
    except COMMAND_ERRORS as e:
        report_error(HistoryKind.DISK, "fstab", e, metadata=metadata)

    report(HistoryKind.DISK, [result], title="fstab", metadata=metadata)
