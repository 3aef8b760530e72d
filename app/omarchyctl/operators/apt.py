"""APT package operator implementation.

Only used to bootstrap shell prerequisites on Debian/Ubuntu machines.
"""

from omarchyctl.models.action import ActionResult
from omarchyctl.models.package import PackageSource
from omarchyctl.operators.base import Operator
from omarchyctl.utils.shell import run_best_effort


class AptOperator(Operator):
    """Operator for APT/dpkg packages."""

    @property
    def source(self) -> PackageSource:
        """Return APT as the package source."""
        return PackageSource.APT

    @property
    def executable(self) -> str:
        """The apt-get binary."""
        return "apt-get"

    def install_command(self, packages: list[str], extra_args: list[str]) -> list[str]:
        """Build ``sudo apt-get install -y ...``."""
        return ["sudo", "apt-get", "install", "-y", *extra_args, *packages]

    def query_command(self, package: str) -> list[str]:
        """Build ``dpkg -s <package>``."""
        return ["dpkg", "-s", package]

    def install(
        self,
        packages: list[str],
        extra_args: list[str] | None = None,
    ) -> list[ActionResult]:
        """Refresh the package index, then install."""
        if packages and self.is_available():
            run_best_effort(["sudo", "apt-get", "update", "-y"], timeout=300.0)
        return super().install(packages, extra_args)
