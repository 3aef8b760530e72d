"""Yay (AUR helper) package operator implementation.

Also knows how to bootstrap yay itself from the AUR when it is missing.
"""

import logging
import shutil
import tempfile
from pathlib import Path

from omarchyctl.core.errors import CommandFailedError, PreconditionError
from omarchyctl.models.package import PackageSource
from omarchyctl.operators.base import Operator
from omarchyctl.operators.pacman import PacmanOperator
from omarchyctl.utils.shell import run_interactive_checked

logger = logging.getLogger(__name__)

YAY_BIN_AUR_URL = "https://aur.archlinux.org/yay-bin.git"


class YayOperator(Operator):
    """Operator for AUR and repository packages through yay.

    Yay escalates privileges itself, so commands are not run with sudo.
    """

    @property
    def source(self) -> PackageSource:
        """Return YAY as the package source."""
        return PackageSource.YAY

    @property
    def executable(self) -> str:
        """The yay binary."""
        return "yay"

    def install_command(self, packages: list[str], extra_args: list[str]) -> list[str]:
        """Build ``yay -S --needed --noconfirm [extra] <packages>``."""
        return ["yay", "-S", "--needed", "--noconfirm", *extra_args, *packages]

    def query_command(self, package: str) -> list[str]:
        """Build ``yay -Qi <package>``."""
        return ["yay", "-Qi", package]

    def require(self) -> None:
        """Fail fast when yay is not installed.

        Raises:
            PreconditionError: If yay is not on PATH.
        """
        if not self.is_available():
            raise PreconditionError("yay is not installed. Please install yay first.")

    def bootstrap(self, pacman: PacmanOperator | None = None) -> bool:
        """Install yay-bin from the AUR if yay is missing.

        Installs base-devel and git with pacman, clones yay-bin into a
        temporary directory and runs ``makepkg -si``.

        Args:
            pacman: Operator used for the build prerequisites.

        Returns:
            True if yay was installed, False if it was already present.

        Raises:
            PreconditionError: If pacman is not available.
            CommandFailedError: If any build step fails.
        """
        if self.is_available():
            return False

        pacman = pacman or PacmanOperator(refresh=True)
        if not pacman.is_available():
            raise PreconditionError("pacman is required to bootstrap yay")

        logger.info("yay not found, installing yay-bin from AUR")
        results = pacman.install(["base-devel", "git"])
        if any(r.failed for r in results):
            raise CommandFailedError(
                ["pacman", "-S", "base-devel", "git"],
                1,
                "Failed to install base-devel/git needed for AUR builds.",
            )

        build_dir = Path(tempfile.mkdtemp(prefix="omarchyctl-yay-"))
        try:
            run_interactive_checked(["git", "clone", YAY_BIN_AUR_URL], cwd=str(build_dir))
            run_interactive_checked(
                ["makepkg", "-si", "--noconfirm"], cwd=str(build_dir / "yay-bin")
            )
        finally:
            shutil.rmtree(build_dir, ignore_errors=True)
        return True
