"""Unit tests for zsh and Oh My Zsh setup."""

from datetime import datetime
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from omarchyctl.core.errors import PreconditionError
from omarchyctl.core.settings import ZshSettings
from omarchyctl.dotfiles.zsh import (
    configure_zshrc,
    ensure_zshrc,
    install_base_packages,
    install_oh_my_zsh,
    install_plugins,
    make_default_shell,
    ordered_plugins,
    render_zshrc,
)
from omarchyctl.models.action import Action, ActionResult
from omarchyctl.models.package import PackageSource
from omarchyctl.models.step import StepStatus
from omarchyctl.utils.shell import CommandResult

TEMPLATE_ZSHRC = """export ZSH="$HOME/.oh-my-zsh"

ZSH_THEME="robbyrussell"

plugins=(git)

source $ZSH/oh-my-zsh.sh
"""


def _operator(installed: set[str], success: bool = True) -> MagicMock:
    operator = MagicMock()
    operator.executable = "pacman"
    operator.is_installed.side_effect = lambda name: name in installed
    operator.install.side_effect = lambda packages: [
        ActionResult(
            action=Action(package=name, source=PackageSource.PACMAN),
            success=success,
            error=None if success else "pacman exited with code 1",
        )
        for name in packages
    ]
    return operator


class TestInstallBasePackages:
    """Tests for install_base_packages."""

    def test_no_package_manager(self) -> None:
        with patch("omarchyctl.dotfiles.zsh.detect_native_operator", return_value=None):
            result = install_base_packages()

        assert result.status == StepStatus.SKIPPED
        assert "Ensure zsh, git, and curl are installed" in (result.message or "")

    def test_all_present(self) -> None:
        operator = _operator({"zsh", "git", "curl"})

        result = install_base_packages(operator)

        assert result.status == StepStatus.UNCHANGED
        operator.install.assert_not_called()

    def test_installs_missing(self) -> None:
        operator = _operator({"git"})

        result = install_base_packages(operator)

        assert result.status == StepStatus.CHANGED
        assert result.message == "Installed zsh, curl with pacman"
        operator.install.assert_called_once_with(["zsh", "git", "curl"])

    def test_install_failure(self) -> None:
        result = install_base_packages(_operator(set(), success=False))

        assert result.status == StepStatus.FAILED


class TestInstallOhMyZsh:
    """Tests for install_oh_my_zsh."""

    def test_already_installed(self, home: Path) -> None:
        (home / ".oh-my-zsh").mkdir()

        with patch("omarchyctl.dotfiles.zsh.run_command") as mock_run:
            result = install_oh_my_zsh(ZshSettings())

        assert result.status == StepStatus.UNCHANGED
        mock_run.assert_not_called()

    def test_requires_curl(self, home: Path) -> None:
        with (
            patch("omarchyctl.dotfiles.zsh.command_exists", return_value=False),
            pytest.raises(PreconditionError, match="curl"),
        ):
            install_oh_my_zsh(ZshSettings())

    def test_unattended_install(self, home: Path) -> None:
        """The installer runs without starting zsh, changing shell or replacing .zshrc."""
        settings = ZshSettings()
        with (
            patch("omarchyctl.dotfiles.zsh.command_exists", return_value=True),
            patch(
                "omarchyctl.dotfiles.zsh.run_command",
                return_value=CommandResult(stdout="echo install", stderr="", returncode=0),
            ) as mock_curl,
            patch("omarchyctl.dotfiles.zsh.run_interactive_checked") as mock_sh,
        ):
            result = install_oh_my_zsh(settings)

        assert result.status == StepStatus.CHANGED
        assert mock_curl.call_args.args[0] == ["curl", "-fsSL", settings.installer_url]
        mock_sh.assert_called_once_with(
            ["sh", "-c", "echo install"],
            env={"RUNZSH": "no", "CHSH": "no", "KEEP_ZSHRC": "yes"},
        )


class TestEnsureZshrc:
    """Tests for ensure_zshrc."""

    def test_backs_up_existing(self, home: Path) -> None:
        (home / ".zshrc").write_text("alias ll='ls -l'\n")

        result = ensure_zshrc(now=datetime(2026, 2, 3, 4, 5, 6))

        backup = home / ".zshrc.pre-omz-20260203040506.bak"
        assert result.status == StepStatus.CHANGED
        assert backup.read_text() == "alias ll='ls -l'\n"
        assert (home / ".zshrc").exists()

    def test_copies_template(self, home: Path) -> None:
        template = home / ".oh-my-zsh" / "templates" / "zshrc.zsh-template"
        template.parent.mkdir(parents=True)
        template.write_text(TEMPLATE_ZSHRC)

        result = ensure_zshrc()

        assert result.message == "Created new .zshrc from template"
        assert (home / ".zshrc").read_text() == TEMPLATE_ZSHRC

    def test_missing_template(self, home: Path) -> None:
        with pytest.raises(PreconditionError, match="template not found"):
            ensure_zshrc()


class TestInstallPlugins:
    """Tests for install_plugins."""

    def test_clones_missing_plugins(self, home: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("ZSH_CUSTOM", raising=False)
        plugins = home / ".oh-my-zsh" / "custom" / "plugins"
        (plugins / "zsh-autosuggestions").mkdir(parents=True)

        with patch("omarchyctl.dotfiles.zsh.run_command") as mock_run:
            result = install_plugins(ZshSettings())

        assert result.message == "Cloned zsh-syntax-highlighting"
        mock_run.assert_called_once_with(
            [
                "git",
                "clone",
                "https://github.com/zsh-users/zsh-syntax-highlighting",
                str(plugins / "zsh-syntax-highlighting"),
            ],
            check=True,
            timeout=300.0,
        )

    def test_respects_zsh_custom(
        self, home: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        custom = tmp_path / "custom"
        monkeypatch.setenv("ZSH_CUSTOM", str(custom))
        for name in ("zsh-autosuggestions", "zsh-syntax-highlighting"):
            (custom / "plugins" / name).mkdir(parents=True)

        with patch("omarchyctl.dotfiles.zsh.run_command") as mock_run:
            result = install_plugins(ZshSettings())

        assert result.status == StepStatus.UNCHANGED
        mock_run.assert_not_called()


class TestRenderZshrc:
    """Tests for .zshrc rendering."""

    def test_syntax_highlighting_moved_last(self) -> None:
        plugins = ["zsh-syntax-highlighting", "git", "zsh-autosuggestions"]

        assert ordered_plugins(plugins) == [
            "git",
            "zsh-autosuggestions",
            "zsh-syntax-highlighting",
        ]

    def test_ordered_plugins_without_highlighting(self) -> None:
        assert ordered_plugins(["git"]) == ["git"]

    def test_sets_theme_and_plugins(self) -> None:
        text = render_zshrc(TEMPLATE_ZSHRC, "dpoggi", ["git", "zsh-syntax-highlighting"])

        assert 'ZSH_THEME="dpoggi"' in text
        assert "plugins=(git zsh-syntax-highlighting)" in text
        assert 'ZSH_THEME="robbyrussell"' not in text
        assert text.count("source $ZSH/oh-my-zsh.sh") == 1
        assert text.rstrip().endswith("fi")

    def test_adds_source_line_when_missing(self) -> None:
        text = render_zshrc("", "dpoggi", ["git"])

        assert 'export ZSH="$HOME/.oh-my-zsh"\nsource $ZSH/oh-my-zsh.sh' in text

    def test_keeps_blank_lines_around_plugins(self) -> None:
        text = render_zshrc(TEMPLATE_ZSHRC, "dpoggi", ["git"])

        assert '\n\nplugins=(git)\n\n' in text

    def test_idempotent(self) -> None:
        once = render_zshrc(TEMPLATE_ZSHRC, "dpoggi", ["git", "zsh-autosuggestions"])

        assert render_zshrc(once, "dpoggi", ["git", "zsh-autosuggestions"]) == once

    def test_configure_zshrc_unchanged_on_rerun(self, home: Path) -> None:
        (home / ".zshrc").write_text(TEMPLATE_ZSHRC)

        first = configure_zshrc(ZshSettings())
        second = configure_zshrc(ZshSettings())

        assert first.status == StepStatus.CHANGED
        assert second.status == StepStatus.UNCHANGED


class TestMakeDefaultShell:
    """Tests for make_default_shell."""

    def test_zsh_missing(self, tmp_path: Path) -> None:
        with patch("omarchyctl.dotfiles.zsh.which", return_value=None):
            result = make_default_shell(tmp_path / "shells")

        assert result.status == StepStatus.SKIPPED

    def test_registers_and_changes_shell(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        shells = tmp_path / "shells"
        shells.write_text("/bin/sh\n/bin/bash\n")
        monkeypatch.setenv("SHELL", "/bin/bash")

        with (
            patch("omarchyctl.dotfiles.zsh.which", return_value="/usr/bin/zsh"),
            patch("omarchyctl.dotfiles.zsh.run_command") as mock_tee,
            patch("omarchyctl.dotfiles.zsh.run_interactive_checked") as mock_chsh,
        ):
            result = make_default_shell(shells)

        assert result.status == StepStatus.CHANGED
        mock_tee.assert_called_once_with(
            ["sudo", "tee", "-a", str(shells)], check=True, input_text="/usr/bin/zsh\n"
        )
        mock_chsh.assert_called_once_with(["chsh", "-s", "/usr/bin/zsh"])

    def test_already_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        shells = tmp_path / "shells"
        shells.write_text("/bin/bash\n/usr/bin/zsh\n")
        monkeypatch.setenv("SHELL", "/usr/bin/zsh")

        with (
            patch("omarchyctl.dotfiles.zsh.which", return_value="/usr/bin/zsh"),
            patch("omarchyctl.dotfiles.zsh.run_command") as mock_tee,
            patch("omarchyctl.dotfiles.zsh.run_interactive_checked") as mock_chsh,
        ):
            result = make_default_shell(shells)

        assert result.status == StepStatus.UNCHANGED
        mock_tee.assert_not_called()
        mock_chsh.assert_not_called()
