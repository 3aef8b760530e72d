"""Exception hierarchy for provisioning operations.

Every provisioning module raises one of these; CLI commands catch
:data:`COMMAND_ERRORS`, print the message and exit non-zero.
"""

import subprocess


class ProvisionError(Exception):
    """Base exception for all provisioning errors."""


class PreconditionError(ProvisionError):
    """Raised when a required command, file or device is missing or unsafe."""


class CommandFailedError(ProvisionError):
    """Raised when a required external command exits non-zero.

    Attributes:
        args_: The command that was executed.
        returncode: Exit code of the command.
        stderr: Captured standard error (may be empty).
    """

    def __init__(self, args: list[str], returncode: int, stderr: str = "") -> None:
        self.args_ = list(args)
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip() or f"exit code {returncode}"
        super().__init__(f"Command failed: {' '.join(args)}: {detail}")


class SettingsError(ProvisionError):
    """Raised when the settings file cannot be read or is invalid."""


# Errors a provisioning call may raise besides its own hierarchy: a missing
# binary or unreadable file, and a subprocess that ran past its timeout.
COMMAND_ERRORS = (ProvisionError, OSError, subprocess.TimeoutExpired)
