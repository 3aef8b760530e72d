"""omarchyctl - idempotent provisioning for Omarchy desktops."""

__version__ = "0.4.0"
