"""Abstract base class for package operators.

This module defines the Operator interface that all package management
operators must implement.
"""

import logging
from abc import ABC, abstractmethod

from omarchyctl.models.action import Action, ActionResult
from omarchyctl.models.package import PackageSource
from omarchyctl.utils.shell import command_exists, run_command, run_interactive

logger = logging.getLogger(__name__)


class Operator(ABC):
    """Abstract base class for all package operators.

    Operators install packages for a specific package manager. Installs
    are idempotent: already-installed packages are left alone.

    Subclasses describe their command line through :attr:`executable` and
    :meth:`install_command`; the shared :meth:`install` runs it attached to
    the terminal so sudo prompts and build output reach the user.

    Example:
        >>> operator = YayOperator()
        >>> if operator.is_available():
        ...     results = operator.install(["htop", "neovim"])
        ...     for result in results:
        ...         print(f"{result.action.package}: {result.success}")
    """

    @property
    @abstractmethod
    def source(self) -> PackageSource:
        """Return the package source this operator handles."""

    @property
    @abstractmethod
    def executable(self) -> str:
        """Name of the package manager binary looked up on PATH."""

    @abstractmethod
    def install_command(self, packages: list[str], extra_args: list[str]) -> list[str]:
        """Build the command line installing ``packages``.

        Args:
            packages: Package names.
            extra_args: Additional flags supplied by the caller.

        Returns:
            Full argument vector.
        """

    def query_command(self, package: str) -> list[str] | None:
        """Build the command checking whether ``package`` is installed.

        Returns None when the manager has no cheap query.
        """
        return None

    def is_available(self) -> bool:
        """Check if this package manager is available on the system."""
        return command_exists(self.executable)

    def is_installed(self, package: str) -> bool:
        """Check if a package is already installed.

        Returns False when the manager cannot be queried.
        """
        args = self.query_command(package)
        if args is None or not self.is_available():
            return False
        try:
            return run_command(args, timeout=30.0).success
        except OSError as e:
            logger.debug("Query for %s failed: %s", package, e)
            return False

    def install(
        self,
        packages: list[str],
        extra_args: list[str] | None = None,
    ) -> list[ActionResult]:
        """Install one or more packages in a single transaction.

        The whole transaction succeeds or fails together, so every
        package gets the same outcome.

        Args:
            packages: List of package names to install.
            extra_args: Additional flags passed to the package manager.

        Returns:
            List of ActionResult for each package.

        Raises:
            RuntimeError: If the package manager is not available.
        """
        if not self.is_available():
            msg = f"{self.executable} is not available on this system"
            raise RuntimeError(msg)

        if not packages:
            return []

        args = self.install_command(packages, list(extra_args or []))
        logger.info("Installing with %s: %s", self.executable, ", ".join(packages))

        try:
            returncode = run_interactive(args)
        except OSError as e:
            returncode, error = 127, str(e)
        else:
            error = f"{self.executable} exited with code {returncode}"

        results: list[ActionResult] = []
        for package in packages:
            action = Action(package=package, source=self.source)
            if returncode == 0:
                results.append(ActionResult(action=action, success=True, message="Installed"))
            else:
                results.append(ActionResult(action=action, success=False, error=error))
        return results

