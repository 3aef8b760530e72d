"""GPU mode command switching EnvyControl and the VA-API driver."""

from typing import Annotated

import typer

from omarchyctl.cli.helpers import report, report_error
from omarchyctl.core.errors import COMMAND_ERRORS
from omarchyctl.desktop.gpu import GpuMode, gpu_mode_hints, switch_gpu_mode
from omarchyctl.models.history import HistoryKind
from omarchyctl.utils.formatting import print_info, print_warning


def gpu(
    mode: Annotated[
        GpuMode,
        typer.Argument(help="Graphics mode to switch to.", case_sensitive=False),
    ],
) -> None:
    """Switch GPU mode and align the per-user VA-API driver.

    integrated forces iHD, nvidia forces the NVIDIA driver and hybrid
    removes the override so VA-API auto-selects. Reboot afterwards.

    Examples:
        omarchyctl gpu integrated
        omarchyctl gpu hybrid
    """
    metadata = {"mode": mode.value}
    try:
        results = switch_gpu_mode(mode)
    except COMMAND_ERRORS as e:
        report_error(HistoryKind.GPU_MODE, "envycontrol", e, metadata=metadata)

    for hint in gpu_mode_hints(mode):
        print_warning(hint)

    report(HistoryKind.GPU_MODE, results, title="GPU Mode", metadata=metadata)
    print_info("Reboot to apply the new mode. Verify VA-API afterwards with: vainfo | head -n 20")
