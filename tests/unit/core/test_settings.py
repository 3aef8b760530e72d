"""Unit tests for settings loading and saving."""

import tomllib
from pathlib import Path

import pytest
from omarchyctl.core.errors import SettingsError
from omarchyctl.core.settings import (
    BtrfsSettings,
    Settings,
    SetupRepoSettings,
    SnapperSettings,
    load_settings,
    save_settings,
)


class TestDefaults:
    """Tests for default settings."""

    def test_zsh_plugins_end_with_syntax_highlighting(self) -> None:
        settings = Settings()
        assert settings.zsh.theme == "dpoggi"
        assert settings.zsh.plugins[-1] == "zsh-syntax-highlighting"

    def test_btrfs_defaults(self) -> None:
        settings = Settings()
        assert settings.btrfs.label == "ARCH-BTRFS"
        assert settings.btrfs.efi_label == "BOOT"
        assert settings.btrfs.compress == "zstd:3"
        assert settings.btrfs.target == "/mnt"

    def test_setup_repo_paths_expand_home(self, home: Path) -> None:
        """Repository paths expand ~ to the home directory."""
        setup = SetupRepoSettings()

        assert setup.repo_path == home / "repos" / "omarchy-setup"
        assert setup.setup_script_path == home / "repos" / "omarchy-setup" / "setup-omarchy"
        assert setup.package_list_path == home / "repos" / "omarchy-setup" / "packages.list"


class TestValidation:
    """Tests for settings validation."""

    def test_unknown_section_rejected(self) -> None:
        with pytest.raises(ValueError):
            Settings.model_validate({"unknown": {}})

    def test_negative_retention_rejected(self) -> None:
        with pytest.raises(ValueError):
            SnapperSettings(hourly=-1)

    @pytest.mark.parametrize("target", ["/", "mnt", ""])
    def test_btrfs_target_must_be_absolute_non_root(self, target: str) -> None:
        with pytest.raises(ValueError, match="absolute path"):
            BtrfsSettings(target=target)

    def test_btrfs_target_trailing_slash_stripped(self) -> None:
        assert BtrfsSettings(target="/mnt/").target == "/mnt"

    def test_retention_keys(self) -> None:
        """retention() maps limits onto snapper config keys."""
        retention = SnapperSettings(hourly=3, number_limit=20).retention()

        assert retention["TIMELINE_CREATE"] == "yes"
        assert retention["TIMELINE_LIMIT_HOURLY"] == "3"
        assert retention["TIMELINE_LIMIT_DAILY"] == "7"
        assert retention["NUMBER_LIMIT"] == "20"


class TestLoadSettings:
    """Tests for load_settings."""

    def test_missing_file_returns_defaults(self, tmp_path: Path) -> None:
        assert load_settings(tmp_path / "config.toml") == Settings()

    def test_partial_override(self, tmp_path: Path) -> None:
        """Sections in the file override defaults; the rest stays default."""
        path = tmp_path / "config.toml"
        path.write_text('[zsh]\ntheme = "robbyrussell"\n\n[ghostty.settings]\nfont-size = "12"\n')

        settings = load_settings(path)

        assert settings.zsh.theme == "robbyrussell"
        assert settings.zsh.plugins == Settings().zsh.plugins
        assert settings.ghostty.settings == {"font-size": "12"}

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("[zsh\n")

        with pytest.raises(SettingsError, match="Invalid TOML"):
            load_settings(path)

    def test_invalid_value(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("[snapper]\nhourly = -5\n")

        with pytest.raises(SettingsError, match="Invalid settings"):
            load_settings(path)

    def test_default_path(self, home: Path) -> None:
        """Without a path, settings load from ~/.config/omarchyctl/config.toml."""
        path = home / ".config" / "omarchyctl" / "config.toml"
        path.parent.mkdir(parents=True)
        path.write_text('[sunshine]\nencoder = "vaapi"\n')

        assert load_settings().sunshine.encoder == "vaapi"


class TestSaveSettings:
    """Tests for save_settings."""

    def test_writes_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "config.toml"

        saved = save_settings(Settings(), path)

        assert saved == path
        data = tomllib.loads(path.read_text())
        assert data["btrfs"]["label"] == "ARCH-BTRFS"
        assert data["snapper"]["configs"] == {"root": "/", "home": "/home"}

    def test_saved_file_loads_back(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        settings = Settings.model_validate({"hyprland": {"lines": ["monitor = ,preferred,auto,1"]}})

        save_settings(settings, path)

        assert load_settings(path) == settings

    def test_no_temp_files_left(self, tmp_path: Path) -> None:
        save_settings(Settings(), tmp_path / "config.toml")

        assert [p.name for p in tmp_path.iterdir()] == ["config.toml"]
