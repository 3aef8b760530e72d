"""Zypper package operator implementation (openSUSE)."""

from omarchyctl.models.package import PackageSource
from omarchyctl.operators.base import Operator


class ZypperOperator(Operator):
    """Operator for zypper packages."""

    @property
    def source(self) -> PackageSource:
        """Return ZYPPER as the package source."""
        return PackageSource.ZYPPER

    @property
    def executable(self) -> str:
        """The zypper binary."""
        return "zypper"

    def install_command(self, packages: list[str], extra_args: list[str]) -> list[str]:
        """Build ``sudo zypper install -y ...``."""
        return ["sudo", "zypper", "install", "-y", *extra_args, *packages]

    def query_command(self, package: str) -> list[str]:
        """Build ``rpm -q <package>``."""
        return ["rpm", "-q", package]
