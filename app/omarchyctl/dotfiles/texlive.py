"""TeX Live from the official Arch repositories."""

import logging

from omarchyctl.core.errors import PreconditionError
from omarchyctl.core.settings import TexLiveSettings
from omarchyctl.models.step import StepResult, StepStatus
from omarchyctl.operators import PacmanOperator, YayOperator
from omarchyctl.operators.base import Operator
from omarchyctl.utils.shell import command_exists

logger = logging.getLogger(__name__)

# Same as -Syu
SYSUPGRADE_ARGS = ["--refresh", "--sysupgrade"]

REQUIRED_BINARIES = ["pdflatex", "latexmk"]


def install_texlive(settings: TexLiveSettings, operator: Operator | None = None) -> StepResult:
    """Install the TeX Live split packages with yay, falling back to pacman.

    Raises:
        PreconditionError: If neither yay nor pacman is available.
    """
    if operator is None:
        yay = YayOperator()
        operator = yay if yay.is_available() else PacmanOperator()
    if not operator.is_available():
        raise PreconditionError("TeX Live install requires yay or pacman")

    missing = [name for name in settings.packages if not operator.is_installed(name)]
    if not missing:
        return StepResult.from_changed("texlive", False, "TeX Live packages already installed")

    logger.info("Installing TeX Live from official Arch repositories")
    results = operator.install(settings.packages, SYSUPGRADE_ARGS)
    failed = [r for r in results if r.failed]
    if failed:
        return StepResult(name="texlive", status=StepStatus.FAILED, error=failed[0].error)

    if not all(command_exists(name) for name in REQUIRED_BINARIES):
        logger.warning(
            "TeX Live installed, but binaries not found in PATH. "
            "You may need to log out and back in, or add /usr/bin explicitly to PATH."
        )
        return StepResult.from_changed("texlive", True, "Installed, binaries not on PATH yet")
    return StepResult.from_changed("texlive", True, "TeX Live installation complete")
