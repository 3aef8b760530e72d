"""Action models for package operations.

This module defines data structures for representing package install
requests and their execution results.
"""

from dataclasses import dataclass

from omarchyctl.models.package import PackageSource


@dataclass(frozen=True, slots=True)
class Action:
    """A single package install request.

    Installs are always issued with ``--needed`` semantics, so executing
    the same action twice leaves the system unchanged the second time.

    Attributes:
        package: Name of the package to install.
        source: Package manager that handles this package.
    """

    package: str
    source: PackageSource

    def __post_init__(self) -> None:
        """Validate action data after initialization."""
        if not self.package:
            msg = "Package name cannot be empty"
            raise ValueError(msg)
        if self.package.startswith("-"):
            msg = f"Package name cannot start with '-': {self.package}"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class ActionResult:
    """Result of executing a package action.

    Attributes:
        action: The action that was executed.
        success: Whether the action completed successfully.
        message: Optional success message or additional information.
        error: Optional error message if the action failed.
    """

    action: Action
    success: bool
    message: str | None = None
    error: str | None = None

    @property
    def failed(self) -> bool:
        """Check if the action failed."""
        return not self.success
