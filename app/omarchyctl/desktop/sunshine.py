"""Bind Sunshine KMS capture to the GPU driving the connected monitor."""

import logging
from dataclasses import dataclass
from pathlib import Path

from omarchyctl.core.errors import PreconditionError
from omarchyctl.core.paths import get_user_config_home
from omarchyctl.core.settings import SunshineSettings
from omarchyctl.models.step import StepResult, StepStatus
from omarchyctl.utils.shell import run_command
from omarchyctl.utils.textedit import read_text, upsert_keys, write_if_changed

logger = logging.getLogger(__name__)

DRM_SYSFS = Path("/sys/class/drm")


@dataclass(frozen=True, slots=True)
class SunshineBinding:
    """Devices Sunshine captures from and encodes on.

    Attributes:
        connector: sysfs connector name, e.g. ``card3-HDMI-A-3``.
        kms_device: DRM card node, e.g. ``/dev/dri/card3``.
        render_node: Render node of the same card, e.g. ``/dev/dri/renderD130``.
    """

    connector: str
    kms_device: str
    render_node: str

    @property
    def card(self) -> str:
        """Card part of the connector name (``card3``)."""
        return self.connector.split("-", 1)[0]

    @property
    def monitor(self) -> str:
        """Connector part of the name (``HDMI-A-3``)."""
        return self.connector.split("-", 1)[1] if "-" in self.connector else self.connector


def connected_connectors(sysfs: Path = DRM_SYSFS) -> list[str]:
    """Names of DRM connectors whose status is ``connected``, sorted."""
    connected: list[str] = []
    for status in sorted(sysfs.glob("card*-*/status")):
        try:
            if status.read_text(encoding="utf-8").strip() == "connected":
                connected.append(status.parent.name)
        except OSError as e:
            logger.debug("Cannot read %s: %s", status, e)
    return connected


def pick_connector(connectors: list[str], preference: list[str]) -> str | None:
    """Pick the first connector matching the preferred name fragments.

    Falls back to the first connector when none matches.
    """
    for fragment in preference:
        for name in connectors:
            if fragment in name:
                return name
    return connectors[0] if connectors else None


def find_render_node(card: str, sysfs: Path = DRM_SYSFS) -> str | None:
    """First ``renderD*`` node belonging to ``card``."""
    nodes = sorted((sysfs / card / "device" / "drm").glob("renderD*"))
    if not nodes:
        return None
    return f"/dev/dri/{nodes[0].resolve().name}"


def detect_binding(preference: list[str], sysfs: Path = DRM_SYSFS) -> SunshineBinding:
    """Work out which card and render node Sunshine should use.

    Raises:
        PreconditionError: If no monitor is connected or the card has no
            render node.
    """
    connector = pick_connector(connected_connectors(sysfs), preference)
    if connector is None:
        raise PreconditionError("No connected DRM connectors found.")

    card = connector.split("-", 1)[0]
    render_node = find_render_node(card, sysfs)
    if render_node is None:
        raise PreconditionError(f"No render node found for {card}")
    return SunshineBinding(
        connector=connector, kms_device=f"/dev/dri/{card}", render_node=render_node
    )


def sunshine_config_path() -> Path:
    """``~/.config/sunshine/sunshine.conf``."""
    return get_user_config_home() / "sunshine" / "sunshine.conf"


def render_sunshine_conf(text: str, binding: SunshineBinding, settings: SunshineSettings) -> str:
    """Set capture, encoder and device keys in sunshine.conf content."""
    return upsert_keys(
        text,
        {
            "capture": settings.capture,
            "encoder": settings.encoder,
            "adapter_name": binding.render_node,
            "kms_device": binding.kms_device,
        },
    )


def configure_sunshine(
    settings: SunshineSettings,
    *,
    restart: bool = True,
    sysfs: Path = DRM_SYSFS,
) -> list[StepResult]:
    """Bind Sunshine to the connected monitor's GPU and restart it.

    Raises:
        PreconditionError: If the devices cannot be detected.
        CommandFailedError: If restarting the user service fails.
    """
    binding = detect_binding(settings.connector_preference, sysfs)
    conf = sunshine_config_path()
    changed = write_if_changed(conf, render_sunshine_conf(read_text(conf), binding, settings))
    logger.info(
        "Bound Sunshine to %s on %s (render %s)",
        binding.monitor,
        binding.kms_device,
        binding.render_node,
    )

    results = [
        StepResult.from_changed(
            "sunshine-conf",
            changed,
            f"Monitor {binding.monitor}, DRM card {binding.kms_device}, "
            f"render {binding.render_node}",
        )
    ]
    if restart:
        run_command(["systemctl", "--user", "restart", "sunshine"], check=True)
        results.append(StepResult.from_changed("restart", True, "Sunshine restarted."))
    else:
        results.append(
            StepResult(name="restart", status=StepStatus.SKIPPED, message="Restart skipped")
        )
    return results
