"""Shell execution utilities.

Provides safe subprocess execution with proper error handling.
"""

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass

from omarchyctl.core.errors import CommandFailedError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Result of a shell command execution.

    Attributes:
        stdout: Standard output from the command.
        stderr: Standard error from the command.
        returncode: Exit code of the command.
    """

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        """Check if command executed successfully."""
        return self.returncode == 0


def run_command(
    args: list[str],
    *,
    check: bool = False,
    timeout: float | None = 60.0,
    cwd: str | None = None,
    env: dict[str, str] | None = None,
    input_text: str | None = None,
) -> CommandResult:
    """Execute a shell command and return the result.

    Args:
        args: Command and arguments to execute.
        check: If True, raise CommandFailedError on non-zero exit.
        timeout: Maximum time in seconds to wait for command.
        cwd: Working directory for the command. If None, uses current directory.
        env: Additional environment variables (merged with current env).
        input_text: Text passed to the command's standard input.

    Returns:
        CommandResult with stdout, stderr, and returncode.

    Raises:
        CommandFailedError: If check=True and command fails.
        subprocess.TimeoutExpired: If command exceeds timeout.
        FileNotFoundError: If command executable is not found.
    """
    logger.debug("Running: %s", " ".join(args))
    result = subprocess.run(
        args,
        capture_output=True,
        text=True,
        check=False,
        timeout=timeout,
        cwd=cwd,
        env={**os.environ, **env} if env else None,
        input=input_text,
    )
    if check and result.returncode != 0:
        raise CommandFailedError(args, result.returncode, result.stderr)
    return CommandResult(
        stdout=result.stdout,
        stderr=result.stderr,
        returncode=result.returncode,
    )


def run_best_effort(args: list[str], *, timeout: float | None = 60.0) -> bool:
    """Execute a command whose failure must not abort the caller.

    Failures (including a missing executable) are logged as warnings.

    Args:
        args: Command and arguments to execute.
        timeout: Maximum time in seconds to wait for command.

    Returns:
        True if the command ran and exited 0, False otherwise.
    """
    try:
        result = run_command(args, timeout=timeout)
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.warning("Ignoring failure of %s: %s", " ".join(args), e)
        return False
    if not result.success:
        logger.warning(
            "Ignoring failure of %s (exit %d): %s",
            " ".join(args),
            result.returncode,
            result.stderr.strip(),
        )
    return result.success


def command_exists(name: str) -> bool:
    """Check if a command exists in the system PATH.

    Args:
        name: Command name to check.

    Returns:
        True if command exists, False otherwise.
    """
    return shutil.which(name) is not None


def which(name: str) -> str | None:
    """Return the absolute path of a command on PATH, or None."""
    return shutil.which(name)


def run_interactive(
    args: list[str],
    *,
    cwd: str | None = None,
    env: dict[str, str] | None = None,
) -> int:
    """Execute a command interactively, inheriting the terminal.

    Unlike run_command(), this does NOT capture stdout/stderr,
    allowing the subprocess to interact with the user's terminal
    directly. Used for package builds and installers that prompt
    for a sudo password or show progress.

    Args:
        args: Command and arguments to execute.
        cwd: Working directory for the command.
        env: Additional environment variables (merged with current env).

    Returns:
        Exit code of the command.

    Raises:
        FileNotFoundError: If command executable is not found.
        OSError: If command cannot be executed.
    """
    logger.debug("Running interactively: %s", " ".join(args))
    full_env = {**os.environ, **(env or {})}
    result = subprocess.run(
        args,
        check=False,
        cwd=cwd,
        env=full_env,
    )
    return result.returncode


def run_interactive_checked(
    args: list[str],
    *,
    cwd: str | None = None,
    env: dict[str, str] | None = None,
) -> None:
    """Execute a command interactively and raise if it fails.

    Raises:
        CommandFailedError: If the command exits non-zero.
    """
    returncode = run_interactive(args, cwd=cwd, env=env)
    if returncode != 0:
        raise CommandFailedError(args, returncode)
