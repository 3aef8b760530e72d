"""uv (Python package manager) installation."""

import logging

from omarchyctl.core.errors import PreconditionError
from omarchyctl.models.step import StepResult
from omarchyctl.operators import AptOperator, DnfOperator, PacmanOperator, YayOperator
from omarchyctl.operators.base import Operator
from omarchyctl.utils.environment import import_user_environment, write_environment_file
from omarchyctl.utils.shell import command_exists, run_command, run_interactive_checked

logger = logging.getLogger(__name__)

UV_INSTALL_SCRIPT_URL = "https://astral.sh/uv/install.sh"


def install_uv_from_script() -> None:
    """Run the official astral.sh install script.

    Raises:
        PreconditionError: If curl is missing.
        CommandFailedError: If downloading or running the script fails.
    """
    if not command_exists("curl"):
        raise PreconditionError("curl is required to run the uv install script")
    script = run_command(["curl", "-LsSf", UV_INSTALL_SCRIPT_URL], check=True).stdout
    run_interactive_checked(["sh", "-c", script])


def pick_uv_operator() -> Operator | None:
    """Choose the package manager uv is installed with.

    yay on Arch when available, then pacman, dnf and apt-get.
    """
    candidates: list[Operator] = [
        YayOperator(),
        PacmanOperator(refresh=True),
        DnfOperator(),
        AptOperator(),
    ]
    for operator in candidates:
        if operator.is_available():
            return operator
    return None


def install_uv(operator: Operator | None = None) -> StepResult:
    """Install uv and expose ``~/.cargo/bin`` to GUI sessions.

    Falls back to the install script when the package manager does not
    carry uv. A yay failure is only logged.
    """
    changed = False
    if command_exists("uv"):
        logger.debug("uv already on PATH")
    else:
        operator = operator or pick_uv_operator()
        if operator is None:
            logger.warning("Unknown distro. Installing uv using official script.")
            install_uv_from_script()
        else:
            results = operator.install(["uv"])
            if any(r.failed for r in results):
                if isinstance(operator, YayOperator):
                    logger.warning("yay could not install uv, continuing")
                else:
                    logger.warning(
                        "uv not available from %s; using official install script.",
                        operator.executable,
                    )
                    install_uv_from_script()
        changed = True

    if write_environment_file("uv-path.conf", ["PATH=$HOME/.cargo/bin:$PATH"]):
        import_user_environment("PATH")
        changed = True

    version = run_command(["uv", "--version"]).stdout.strip() if command_exists("uv") else ""
    if not version:
        logger.warning("uv installation may require re-login to update PATH.")
    return StepResult.from_changed(
        "uv", changed, f"uv installed: {version}" if version else "uv installed, re-login to use it"
    )
