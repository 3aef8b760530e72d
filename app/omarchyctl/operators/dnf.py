"""DNF package operator implementation (Fedora)."""

from omarchyctl.models.package import PackageSource
from omarchyctl.operators.base import Operator


class DnfOperator(Operator):
    """Operator for DNF packages."""

    @property
    def source(self) -> PackageSource:
        """Return DNF as the package source."""
        return PackageSource.DNF

    @property
    def executable(self) -> str:
        """The dnf binary."""
        return "dnf"

    def install_command(self, packages: list[str], extra_args: list[str]) -> list[str]:
        """Build ``sudo dnf install -y ...``."""
        return ["sudo", "dnf", "install", "-y", *extra_args, *packages]

    def query_command(self, package: str) -> list[str]:
        """Build ``rpm -q <package>``."""
        return ["rpm", "-q", package]
