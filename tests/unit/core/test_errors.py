"""Unit tests for the provisioning exception hierarchy."""

import subprocess

from omarchyctl.core.errors import (
    COMMAND_ERRORS,
    CommandFailedError,
    PreconditionError,
    ProvisionError,
    SettingsError,
)


class TestHierarchy:
    """Every domain error is a ProvisionError."""

    def test_subclasses(self) -> None:
        assert issubclass(PreconditionError, ProvisionError)
        assert issubclass(CommandFailedError, ProvisionError)
        assert issubclass(SettingsError, ProvisionError)

    def test_command_errors_cover_os_and_timeout(self) -> None:
        """Missing binaries and timeouts are handled like domain errors."""
        assert isinstance(FileNotFoundError(2, "gone"), COMMAND_ERRORS)
        assert isinstance(subprocess.TimeoutExpired(["sleep"], 1), COMMAND_ERRORS)
        assert isinstance(SettingsError("bad"), COMMAND_ERRORS)


class TestCommandFailedError:
    """Tests for CommandFailedError."""

    def test_message_includes_stderr(self) -> None:
        """Message names the command and the stripped stderr."""
        error = CommandFailedError(["git", "push"], 128, "fatal: no remote\n")

        assert str(error) == "Command failed: git push: fatal: no remote"
        assert error.returncode == 128
        assert error.args_ == ["git", "push"]

    def test_message_falls_back_to_exit_code(self) -> None:
        """Without stderr the exit code is shown."""
        error = CommandFailedError(["false"], 1)

        assert str(error) == "Command failed: false: exit code 1"
        assert error.stderr == ""
