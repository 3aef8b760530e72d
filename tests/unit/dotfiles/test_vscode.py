"""Unit tests for VS Code setup."""

import json
import logging
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from omarchyctl.core.errors import PreconditionError
from omarchyctl.core.settings import VSCodeSettings
from omarchyctl.dotfiles.vscode import (
    find_code_binary,
    install_vscode_extensions,
    install_vscode_with_vim,
    list_extensions,
    merge_vim_settings,
    settings_path,
    setup_vscode_settings,
)
from omarchyctl.models.action import Action, ActionResult
from omarchyctl.models.package import PackageSource
from omarchyctl.models.step import StepStatus
from omarchyctl.utils.shell import CommandResult

HANDLE_KEYS = {"<C-c>": False, "<C-v>": False}


def _ok(stdout: str = "") -> CommandResult:
    return CommandResult(stdout=stdout, stderr="", returncode=0)


def _yay(installed: bool, success: bool = True) -> MagicMock:
    yay = MagicMock()
    yay.bootstrap.return_value = False
    yay.is_installed.return_value = installed
    yay.install.return_value = [
        ActionResult(
            action=Action(package="visual-studio-code-bin", source=PackageSource.YAY),
            success=success,
        )
    ]
    return yay


class TestCodeBinary:
    """Tests for locating the VS Code CLI."""

    def test_prefers_code(self) -> None:
        paths = {"code": "/usr/bin/code", "codium": "/usr/bin/codium"}
        with patch("omarchyctl.dotfiles.vscode.which", side_effect=paths.get):
            assert find_code_binary() == "/usr/bin/code"

    def test_falls_back_to_codium(self) -> None:
        with patch(
            "omarchyctl.dotfiles.vscode.which",
            side_effect={"codium": "/usr/bin/codium"}.get,
        ):
            assert find_code_binary() == "/usr/bin/codium"

    def test_none_found(self) -> None:
        with patch("omarchyctl.dotfiles.vscode.which", return_value=None):
            assert find_code_binary() is None

    def test_list_extensions_lowercases(self) -> None:
        with patch(
            "omarchyctl.dotfiles.vscode.run_command",
            return_value=_ok("VSCodeVim.Vim\nms-python.python\n\n"),
        ):
            assert list_extensions("code") == {"vscodevim.vim", "ms-python.python"}

    def test_list_extensions_failure(self) -> None:
        with patch(
            "omarchyctl.dotfiles.vscode.run_command",
            return_value=CommandResult(stdout="", stderr="boom", returncode=1),
        ):
            assert list_extensions("code") == set()


class TestInstallVSCodeWithVim:
    """Tests for install_vscode_with_vim."""

    def test_not_arch(self) -> None:
        with patch("omarchyctl.dotfiles.vscode.command_exists", return_value=False):
            result = install_vscode_with_vim(VSCodeSettings(), _yay(installed=True))

        assert result.status == StepStatus.SKIPPED

    def test_installs_package_and_extension(self) -> None:
        yay = _yay(installed=False)
        with (
            patch("omarchyctl.dotfiles.vscode.command_exists", return_value=True),
            patch("omarchyctl.dotfiles.vscode.which", return_value="/usr/bin/code"),
            patch(
                "omarchyctl.dotfiles.vscode.run_command",
                side_effect=[_ok(""), _ok("Installed")],
            ) as mock_run,
        ):
            result = install_vscode_with_vim(VSCodeSettings(), yay)

        assert result.status == StepStatus.CHANGED
        yay.bootstrap.assert_called_once_with()
        yay.install.assert_called_once_with(["visual-studio-code-bin"])
        assert mock_run.call_args.args[0] == [
            "/usr/bin/code",
            "--install-extension",
            "vscodevim.vim",
            "--force",
        ]

    def test_already_set_up(self) -> None:
        with (
            patch("omarchyctl.dotfiles.vscode.command_exists", return_value=True),
            patch("omarchyctl.dotfiles.vscode.which", return_value="/usr/bin/code"),
            patch(
                "omarchyctl.dotfiles.vscode.run_command", return_value=_ok("vscodevim.vim\n")
            ) as mock_run,
        ):
            result = install_vscode_with_vim(VSCodeSettings(), _yay(installed=True))

        assert result.status == StepStatus.UNCHANGED
        mock_run.assert_called_once()

    def test_package_install_fails(self) -> None:
        with patch("omarchyctl.dotfiles.vscode.command_exists", return_value=True):
            result = install_vscode_with_vim(
                VSCodeSettings(), _yay(installed=False, success=False)
            )

        assert result.status == StepStatus.FAILED
        assert result.error == "Failed to install visual-studio-code-bin."

    def test_extension_failure_is_a_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        with (
            caplog.at_level(logging.WARNING),
            patch("omarchyctl.dotfiles.vscode.command_exists", return_value=True),
            patch("omarchyctl.dotfiles.vscode.which", return_value="/usr/bin/code"),
            patch(
                "omarchyctl.dotfiles.vscode.run_command",
                side_effect=[_ok(""), CommandResult(stdout="", stderr="no net", returncode=1)],
            ),
        ):
            result = install_vscode_with_vim(VSCodeSettings(), _yay(installed=True))

        assert result.status == StepStatus.UNCHANGED
        assert "Could not install vscodevim.vim" in caplog.text


class TestInstallVSCodeExtensions:
    """Tests for install_vscode_extensions."""

    def test_requires_code(self) -> None:
        with (
            patch("omarchyctl.dotfiles.vscode.which", return_value=None),
            pytest.raises(PreconditionError, match="VS Code not found"),
        ):
            install_vscode_extensions(VSCodeSettings())

    def test_installs_only_missing(self) -> None:
        settings = VSCodeSettings(extensions=["ms-python.python", "James-Yu.latex-workshop"])
        with (
            patch("omarchyctl.dotfiles.vscode.which", return_value="/usr/bin/code"),
            patch(
                "omarchyctl.dotfiles.vscode.run_command",
                side_effect=[_ok("james-yu.latex-workshop\n"), _ok()],
            ) as mock_run,
        ):
            result = install_vscode_extensions(settings)

        assert result.message == "Installed ms-python.python"
        mock_run.assert_called_with(
            ["/usr/bin/code", "--install-extension", "ms-python.python", "--force"],
            check=True,
            timeout=300.0,
        )


class TestVimSettings:
    """Tests for settings.json merging."""

    def test_empty_file(self) -> None:
        merged = merge_vim_settings("", HANDLE_KEYS, "keyCode")

        assert json.loads(merged or "") == {
            "vim.handleKeys": HANDLE_KEYS,
            "keyboard.dispatch": "keyCode",
        }

    def test_keeps_existing_keys(self) -> None:
        merged = merge_vim_settings('{"editor.fontSize": 14}', HANDLE_KEYS, "keyCode")

        data = json.loads(merged or "")
        assert data["editor.fontSize"] == 14
        assert data["keyboard.dispatch"] == "keyCode"

    def test_already_configured(self) -> None:
        text = '{\n  // mine\n  "vim.handleKeys": {}\n}\n'

        assert merge_vim_settings(text, HANDLE_KEYS, "keyCode") is None

    def test_comments_rejected(self) -> None:
        with pytest.raises(PreconditionError, match="not plain JSON"):
            merge_vim_settings('{\n  // theme\n  "a": 1\n}', HANDLE_KEYS, "keyCode")

    def test_non_object_rejected(self) -> None:
        with pytest.raises(PreconditionError, match="JSON object"):
            merge_vim_settings("[1, 2]", HANDLE_KEYS, "keyCode")

    def test_setup_writes_then_leaves_alone(self, home: Path) -> None:
        first = setup_vscode_settings(VSCodeSettings())
        second = setup_vscode_settings(VSCodeSettings())

        assert first.status == StepStatus.CHANGED
        assert second.status == StepStatus.UNCHANGED
        assert settings_path() == home / ".config" / "Code" / "User" / "settings.json"
        assert '"<C-c>": false' in settings_path().read_text()
