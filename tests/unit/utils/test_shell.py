"""Unit tests for shell execution utilities."""

import logging
import subprocess
from unittest.mock import MagicMock, patch

import pytest
from omarchyctl.core.errors import CommandFailedError
from omarchyctl.utils.shell import (
    CommandResult,
    command_exists,
    run_best_effort,
    run_command,
    run_interactive,
    run_interactive_checked,
)


class TestRunCommand:
    """Tests for run_command function."""

    @patch("omarchyctl.utils.shell.subprocess.run")
    def test_captures_output(self, mock_run: MagicMock) -> None:
        mock_run.return_value = MagicMock(stdout="out", stderr="", returncode=0)

        result = run_command(["echo", "out"])

        assert result == CommandResult(stdout="out", stderr="", returncode=0)
        assert mock_run.call_args.kwargs["capture_output"] is True
        assert mock_run.call_args.kwargs["env"] is None

    @patch("omarchyctl.utils.shell.subprocess.run")
    def test_check_raises_on_failure(self, mock_run: MagicMock) -> None:
        mock_run.return_value = MagicMock(stdout="", stderr="boom", returncode=2)

        with pytest.raises(CommandFailedError, match="Command failed: false: boom"):
            run_command(["false"], check=True)

    @patch("omarchyctl.utils.shell.subprocess.run")
    def test_no_check_returns_failure(self, mock_run: MagicMock) -> None:
        mock_run.return_value = MagicMock(stdout="", stderr="boom", returncode=2)

        result = run_command(["false"])

        assert result.success is False

    @patch("omarchyctl.utils.shell.subprocess.run")
    def test_passes_input_and_env(self, mock_run: MagicMock) -> None:
        mock_run.return_value = MagicMock(stdout="", stderr="", returncode=0)

        run_command(["tee", "/etc/shells"], input_text="/usr/bin/zsh\n", env={"A": "1"})

        kwargs = mock_run.call_args.kwargs
        assert kwargs["input"] == "/usr/bin/zsh\n"
        assert kwargs["env"]["A"] == "1"
        assert "PATH" in kwargs["env"]


class TestRunBestEffort:
    """Tests for run_best_effort function."""

    @patch("omarchyctl.utils.shell.run_command")
    def test_success(self, mock_run: MagicMock) -> None:
        mock_run.return_value = CommandResult(stdout="", stderr="", returncode=0)

        assert run_best_effort(["hyprctl", "reload"]) is True

    @patch("omarchyctl.utils.shell.run_command")
    def test_failure_is_warning(
        self, mock_run: MagicMock, caplog: pytest.LogCaptureFixture
    ) -> None:
        mock_run.return_value = CommandResult(stdout="", stderr="no process", returncode=1)

        with caplog.at_level(logging.WARNING):
            assert run_best_effort(["pkill", "waybar"]) is False
        assert "Ignoring failure of pkill waybar (exit 1): no process" in caplog.text

    @pytest.mark.parametrize(
        "error", [FileNotFoundError("pkill"), subprocess.TimeoutExpired(["pkill"], 60)]
    )
    @patch("omarchyctl.utils.shell.run_command")
    def test_errors_swallowed(self, mock_run: MagicMock, error: Exception) -> None:
        mock_run.side_effect = error

        assert run_best_effort(["pkill", "waybar"]) is False


class TestCommandExists:
    """Tests for command_exists function."""

    def test_existing(self) -> None:
        with patch("omarchyctl.utils.shell.shutil.which", return_value="/usr/bin/git"):
            assert command_exists("git") is True

    def test_missing(self) -> None:
        with patch("omarchyctl.utils.shell.shutil.which", return_value=None):
            assert command_exists("git") is False


class TestRunInteractive:
    """Tests for run_interactive function."""

    @patch("omarchyctl.utils.shell.subprocess.run")
    def test_returns_exit_code(self, mock_run: MagicMock) -> None:
        """run_interactive returns the subprocess exit code."""
        mock_run.return_value = MagicMock(returncode=1)

        assert run_interactive(["false"]) == 1

    @patch("omarchyctl.utils.shell.subprocess.run")
    def test_does_not_capture_output(self, mock_run: MagicMock) -> None:
        """run_interactive does not capture stdout/stderr (inherits TTY)."""
        mock_run.return_value = MagicMock(returncode=0)

        run_interactive(["echo", "hello"])

        call_kwargs = mock_run.call_args
        assert "capture_output" not in call_kwargs.kwargs
        assert "stdout" not in call_kwargs.kwargs
        assert "stderr" not in call_kwargs.kwargs

    @patch("omarchyctl.utils.shell.subprocess.run")
    def test_merges_env(self, mock_run: MagicMock) -> None:
        mock_run.return_value = MagicMock(returncode=0)

        run_interactive(["sh"], env={"RUNZSH": "no"}, cwd="/tmp")

        assert mock_run.call_args.kwargs["env"]["RUNZSH"] == "no"
        assert mock_run.call_args.kwargs["cwd"] == "/tmp"

    @patch("omarchyctl.utils.shell.run_interactive", return_value=3)
    def test_checked_raises(self, _mock_run: MagicMock) -> None:
        with pytest.raises(CommandFailedError, match="exit code 3"):
            run_interactive_checked(["chsh", "-s", "/usr/bin/zsh"])
