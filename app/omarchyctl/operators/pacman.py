"""Pacman package operator implementation."""

from omarchyctl.models.package import PackageSource
from omarchyctl.operators.base import Operator


class PacmanOperator(Operator):
    """Operator for official Arch repository packages.

    Uses ``sudo pacman -S --needed --noconfirm`` so repeated installs are
    no-ops.

    Attributes:
        refresh: If True, sync the package databases first (``-Sy``).
    """

    def __init__(self, refresh: bool = False) -> None:
        """Initialize the operator.

        Args:
            refresh: Whether to pass ``-y`` to refresh package databases.
        """
        self._refresh = refresh

    @property
    def source(self) -> PackageSource:
        """Return PACMAN as the package source."""
        return PackageSource.PACMAN

    @property
    def executable(self) -> str:
        """The pacman binary."""
        return "pacman"

    def install_command(self, packages: list[str], extra_args: list[str]) -> list[str]:
        """Build ``sudo pacman -S[y] --needed --noconfirm ...``."""
        sync_flag = "-Sy" if self._refresh else "-S"
        return ["sudo", "pacman", sync_flag, "--needed", "--noconfirm", *extra_args, *packages]

    def query_command(self, package: str) -> list[str]:
        """Build ``pacman -Qi <package>``."""
        return ["pacman", "-Qi", package]
