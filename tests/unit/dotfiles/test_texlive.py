"""Unit tests for TeX Live installation."""

from unittest.mock import MagicMock, patch

import pytest
from omarchyctl.core.errors import PreconditionError
from omarchyctl.core.settings import TexLiveSettings
from omarchyctl.dotfiles.texlive import SYSUPGRADE_ARGS, install_texlive
from omarchyctl.models.action import Action, ActionResult
from omarchyctl.models.package import PackageSource
from omarchyctl.models.step import StepStatus
from omarchyctl.operators import PacmanOperator, YayOperator

SETTINGS = TexLiveSettings(packages=["texlive-basic", "texlive-latex"])


def _operator(installed: set[str], success: bool = True) -> MagicMock:
    operator = MagicMock(spec=PacmanOperator)
    operator.is_available.return_value = True
    operator.is_installed.side_effect = lambda name: name in installed
    operator.install.side_effect = lambda packages, extra_args=None: [
        ActionResult(
            action=Action(package=name, source=PackageSource.PACMAN),
            success=success,
            error=None if success else "pacman exited with code 1",
        )
        for name in packages
    ]
    return operator


class TestInstallTexlive:
    """Tests for install_texlive."""

    def test_already_installed(self) -> None:
        operator = _operator({"texlive-basic", "texlive-latex"})

        result = install_texlive(SETTINGS, operator)

        assert result.status == StepStatus.UNCHANGED
        operator.install.assert_not_called()

    def test_installs_with_sysupgrade(self) -> None:
        operator = _operator({"texlive-basic"})
        with patch("omarchyctl.dotfiles.texlive.command_exists", return_value=True):
            result = install_texlive(SETTINGS, operator)

        assert result.status == StepStatus.CHANGED
        assert result.message == "TeX Live installation complete"
        operator.install.assert_called_once_with(
            ["texlive-basic", "texlive-latex"], ["--refresh", "--sysupgrade"]
        )
        assert SYSUPGRADE_ARGS == ["--refresh", "--sysupgrade"]

    def test_binaries_not_on_path(self) -> None:
        with patch("omarchyctl.dotfiles.texlive.command_exists", return_value=False):
            result = install_texlive(SETTINGS, _operator(set()))

        assert result.status == StepStatus.CHANGED
        assert result.message == "Installed, binaries not on PATH yet"

    def test_install_failure(self) -> None:
        result = install_texlive(SETTINGS, _operator(set(), success=False))

        assert result.status == StepStatus.FAILED
        assert result.error == "pacman exited with code 1"

    def test_prefers_yay(self) -> None:
        with (
            patch("omarchyctl.operators.base.command_exists", return_value=True),
            patch.object(YayOperator, "is_installed", return_value=True) as mock_query,
        ):
            result = install_texlive(SETTINGS)

        assert result.status == StepStatus.UNCHANGED
        assert mock_query.call_count == 2

    def test_requires_package_manager(self) -> None:
        with (
            patch("omarchyctl.operators.base.command_exists", return_value=False),
            pytest.raises(PreconditionError, match="yay or pacman"),
        ):
            install_texlive(SETTINGS)
