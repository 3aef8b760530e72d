"""Unit tests for the config commands."""

import tomllib
from pathlib import Path

from omarchyctl.cli.main import app
from typer.testing import CliRunner

runner = CliRunner()


class TestConfigInit:
    """Tests for omarchyctl config init."""

    def test_writes_defaults(self, home: Path) -> None:
        result = runner.invoke(app, ["config", "init"])

        path = home / ".config" / "omarchyctl" / "config.toml"
        assert result.exit_code == 0
        assert "Settings written to" in result.stdout
        data = tomllib.loads(path.read_text())
        assert data["zsh"]["theme"] == "dpoggi"
        assert data["btrfs"]["target"] == "/mnt"

    def test_keeps_existing_file(self, tmp_path: Path) -> None:
        path = tmp_path / "custom.toml"
        path.write_text('[zsh]\ntheme = "agnoster"\n')

        result = runner.invoke(app, ["--config", str(path), "config", "init"])

        assert result.exit_code == 0
        assert "already exist" in result.stdout
        assert path.read_text() == '[zsh]\ntheme = "agnoster"\n'

    def test_force_overwrites(self, tmp_path: Path) -> None:
        path = tmp_path / "custom.toml"
        path.write_text('[zsh]\ntheme = "agnoster"\n')

        result = runner.invoke(app, ["--config", str(path), "config", "init", "--force"])

        assert result.exit_code == 0
        assert tomllib.loads(path.read_text())["zsh"]["theme"] == "dpoggi"


class TestConfigShow:
    """Tests for omarchyctl config show."""

    def test_defaults(self) -> None:
        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        data = tomllib.loads(result.stdout)
        assert data["snapper"]["hourly"] == 5

    def test_overrides_merged_with_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "custom.toml"
        path.write_text('[zsh]\ntheme = "agnoster"\n\n[snapper]\ndaily = 3\n')

        result = runner.invoke(app, ["--config", str(path), "config", "show"])

        data = tomllib.loads(result.stdout)
        assert data["zsh"]["theme"] == "agnoster"
        assert data["zsh"]["plugins"][0] == "git"
        assert data["snapper"]["daily"] == 3
        assert data["snapper"]["hourly"] == 5
