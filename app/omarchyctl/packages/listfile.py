"""Package list files.

A package list holds one package per line. ``#`` starts a comment
anywhere on a line and blank lines are ignored::

    # editors
    neovim
    visual-studio-code-bin   # AUR
"""

import logging
from pathlib import Path

from omarchyctl.models.step import StepResult, StepStatus
from omarchyctl.operators.yay import YayOperator
from omarchyctl.utils.textedit import read_text, write_text_atomic

logger = logging.getLogger(__name__)


def parse_package_list(text: str) -> list[str]:
    """Extract package names from package list text.

    Order is preserved and duplicates are dropped.

    Args:
        text: Raw file content.

    Returns:
        Package names in first-seen order.
    """
    packages: list[str] = []
    seen: set[str] = set()
    for raw in text.splitlines():
        line = raw.split("#", 1)[0].strip()
        if not line:
            continue
        for name in line.split():
            if name not in seen:
                seen.add(name)
                packages.append(name)
    return packages


def read_package_list(path: Path) -> list[str]:
    """Read package names from a package list file.

    Args:
        path: Package list file.

    Returns:
        Package names; empty if the file does not exist.
    """
    return parse_package_list(read_text(path))


def add_to_package_list(path: Path, package: str) -> bool:
    """Append a package to the list unless it is already listed.

    Running this twice never duplicates an entry.

    Args:
        path: Package list file (created if missing).
        package: Package name.

    Returns:
        True if the file was modified.
    """
    if package in read_package_list(path):
        return False
    text = read_text(path)
    if text and not text.endswith("\n"):
        text += "\n"
    write_text_atomic(path, f"{text}{package}\n")
    logger.info("Added %s to %s", package, path)
    return True


def install_packages_from_list(
    path: Path,
    extra_args: list[str] | None = None,
    operator: YayOperator | None = None,
) -> StepResult:
    """Install every package named in a package list with yay.

    Args:
        path: Package list file.
        extra_args: Additional yay flags placed before the package names.
        operator: Yay operator to use.

    Returns:
        SKIPPED when the file is missing or empty, UNCHANGED when every
        package is already installed, CHANGED after a successful install,
        FAILED when yay fails.

    Raises:
        PreconditionError: If yay is not installed.
    """
    operator = operator or YayOperator()
    operator.require()

    if not path.is_file():
        return StepResult(
            name="package-list",
            status=StepStatus.SKIPPED,
            message=f"No package list found at {path}",
        )

    packages = read_package_list(path)
    if not packages:
        return StepResult(
            name="package-list",
            status=StepStatus.SKIPPED,
            message=f"No packages listed in {path}",
        )

    missing = [name for name in packages if not operator.is_installed(name)]
    if not missing and not extra_args:
        return StepResult(
            name="package-list",
            status=StepStatus.UNCHANGED,
            message=f"All {len(packages)} package(s) already installed",
        )

    logger.info("Installing packages from %s: %s", path, " ".join(packages))
    results = operator.install(packages, extra_args)
    failed = [r for r in results if r.failed]
    if failed:
        return StepResult(
            name="package-list",
            status=StepStatus.FAILED,
            error=failed[0].error,
        )
    return StepResult(
        name="package-list",
        status=StepStatus.CHANGED,
        message=f"Ensured {len(packages)} package(s) from {path.name}",
    )
