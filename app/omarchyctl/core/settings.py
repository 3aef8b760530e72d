"""User settings for provisioning steps.

Every default used by a provisioning step can be overridden in
~/.config/omarchyctl/config.toml. A missing file means "all defaults";
an unreadable or invalid file is an error.

Example::

    [setup]
    repo_dir = "~/repos/omarchy-setup"

    [zsh]
    theme = "robbyrussell"

    [ghostty.settings]
    font-size = "12"
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from omarchyctl.core.errors import SettingsError
from omarchyctl.core.paths import get_settings_path

logger = logging.getLogger(__name__)


def _expand(path: str) -> Path:
    return Path(os.path.expandvars(path)).expanduser()


class SetupRepoSettings(BaseModel):
    """Location of the git repository holding the setup script and package list."""

    model_config = ConfigDict(extra="forbid")

    repo_dir: Annotated[str, Field(description="Setup repository directory")] = (
        "~/repos/omarchy-setup"
    )
    setup_script: Annotated[str, Field(description="Setup script file name")] = "setup-omarchy"
    package_list: Annotated[str, Field(description="Package list file name")] = "packages.list"
    remote: Annotated[str, Field(description="Git remote to push to")] = "origin"

    @property
    def repo_path(self) -> Path:
        """Expanded repository directory."""
        return _expand(self.repo_dir)

    @property
    def setup_script_path(self) -> Path:
        """Absolute path of the setup script."""
        return self.repo_path / self.setup_script

    @property
    def package_list_path(self) -> Path:
        """Absolute path of the package list."""
        return self.repo_path / self.package_list


class ZshSettings(BaseModel):
    """Oh My Zsh theme and plugins."""

    model_config = ConfigDict(extra="forbid")

    theme: str = "dpoggi"
    plugins: Annotated[
        list[str],
        Field(description="Plugins enabled in .zshrc; syntax highlighting must stay last"),
    ] = ["git", "zsh-autosuggestions", "zsh-syntax-highlighting"]
    custom_plugins: Annotated[
        dict[str, str],
        Field(description="Plugin name to git URL, cloned into $ZSH_CUSTOM/plugins"),
    ] = {
        "zsh-autosuggestions": "https://github.com/zsh-users/zsh-autosuggestions",
        "zsh-syntax-highlighting": "https://github.com/zsh-users/zsh-syntax-highlighting",
    }
    installer_url: str = "https://raw.githubusercontent.com/ohmyzsh/ohmyzsh/master/tools/install.sh"


class VSCodeSettings(BaseModel):
    """VS Code package, extensions and Vim key handling."""

    model_config = ConfigDict(extra="forbid")

    package: str = "visual-studio-code-bin"
    vim_extension: str = "vscodevim.vim"
    extensions: list[str] = ["donjayamanne.python-extension-pack", "james-yu.latex-workshop"]
    vim_handle_keys: Annotated[
        dict[str, bool],
        Field(description="Keys VSCodeVim must leave to VS Code"),
    ] = {
        "<C-c>": False,
        "<C-v>": False,
        "<C-a>": False,
        "<C-x>": False,
        "<C-p>": False,
        "<C-f>": False,
        "<C-z>": False,
    }
    keyboard_dispatch: str = "keyCode"


class TexLiveSettings(BaseModel):
    """TeX Live split packages from the official repositories."""

    model_config = ConfigDict(extra="forbid")

    packages: list[str] = [
        "texlive-basic",
        "texlive-latex",
        "texlive-latexrecommended",
        "texlive-latexextra",
        "texlive-bibtexextra",
        "texlive-fontsrecommended",
        "texlive-pictures",
        "texlive-bin",
        "texlive-binextra",
        "dvisvgm",
    ]


class SnapperSettings(BaseModel):
    """Snapper configurations and retention policy."""

    model_config = ConfigDict(extra="forbid")

    configs: Annotated[
        dict[str, str],
        Field(description="Snapper config name to mount point"),
    ] = {"root": "/", "home": "/home"}
    hourly: Annotated[int, Field(ge=0)] = 5
    daily: Annotated[int, Field(ge=0)] = 7
    weekly: Annotated[int, Field(ge=0)] = 0
    monthly: Annotated[int, Field(ge=0)] = 0
    yearly: Annotated[int, Field(ge=0)] = 0
    number_limit: Annotated[int, Field(ge=0)] = 50
    pacman_hooks: Annotated[
        bool,
        Field(description="Install pre/post transaction snapshot hooks"),
    ] = True

    def retention(self) -> dict[str, str]:
        """Snapper config keys enforcing this retention policy."""
        return {
            "TIMELINE_CREATE": "yes",
            "TIMELINE_LIMIT_HOURLY": str(self.hourly),
            "TIMELINE_LIMIT_DAILY": str(self.daily),
            "TIMELINE_LIMIT_WEEKLY": str(self.weekly),
            "TIMELINE_LIMIT_MONTHLY": str(self.monthly),
            "TIMELINE_LIMIT_YEARLY": str(self.yearly),
            "NUMBER_LIMIT": str(self.number_limit),
        }


class BtrfsSettings(BaseModel):
    """Defaults for the Btrfs partition/format/layout commands."""

    model_config = ConfigDict(extra="forbid")

    label: str = "ARCH-BTRFS"
    efi_label: str = "BOOT"
    compress: str = "zstd:3"
    esp_end: Annotated[str, Field(description="End of the EFI partition")] = "20GiB"
    target: Annotated[str, Field(description="Mount root for the new system")] = "/mnt"

    @field_validator("target")
    @classmethod
    def validate_target(cls, v: str) -> str:
        """Require an absolute, non-root mount target."""
        if not v.startswith("/") or v.rstrip("/") == "":
            msg = f"target must be an absolute path other than '/': {v!r}"
            raise ValueError(msg)
        return v.rstrip("/")


class SunshineSettings(BaseModel):
    """Sunshine capture settings."""

    model_config = ConfigDict(extra="forbid")

    capture: str = "kms"
    encoder: str = "nvenc"
    connector_preference: list[str] = ["HDMI-A-", "DP-", "DVI-", "eDP-"]


class HyprlandSettings(BaseModel):
    """Lines kept in a managed block of hyprland.conf."""

    model_config = ConfigDict(extra="forbid")

    lines: list[str] = [
        "# Keep Chromium-based apps on XWayland to survive workspace moves",
        "env = ELECTRON_OZONE_PLATFORM_HINT,x11",
    ]


class GhosttySettings(BaseModel):
    """Ghostty ``key = value`` settings."""

    model_config = ConfigDict(extra="forbid")

    settings: dict[str, str] = {
        "theme": "Kanagawa Wave",
        "font-family": "JetBrainsMono Nerd Font",
    }


class Settings(BaseModel):
    """Complete omarchyctl settings."""

    model_config = ConfigDict(extra="forbid")

    setup: SetupRepoSettings = Field(default_factory=SetupRepoSettings)
    zsh: ZshSettings = Field(default_factory=ZshSettings)
    vscode: VSCodeSettings = Field(default_factory=VSCodeSettings)
    texlive: TexLiveSettings = Field(default_factory=TexLiveSettings)
    snapper: SnapperSettings = Field(default_factory=SnapperSettings)
    btrfs: BtrfsSettings = Field(default_factory=BtrfsSettings)
    sunshine: SunshineSettings = Field(default_factory=SunshineSettings)
    hyprland: HyprlandSettings = Field(default_factory=HyprlandSettings)
    ghostty: GhosttySettings = Field(default_factory=GhosttySettings)


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from a TOML file.

    Args:
        path: Path to the settings file. If None, uses the default path.

    Returns:
        Validated Settings; defaults when the file does not exist.

    Raises:
        SettingsError: If the file cannot be read, parsed or validated.
    """
    settings_path = path or get_settings_path()

    if not settings_path.exists():
        logger.debug("No settings file at %s, using defaults", settings_path)
        return Settings()

    try:
        with open(settings_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise SettingsError(f"Invalid TOML syntax in {settings_path}: {e}") from e
    except OSError as e:
        raise SettingsError(f"Failed to read settings: {e}") from e

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise SettingsError(f"Invalid settings in {settings_path}: {e}") from e


def save_settings(settings: Settings, path: Path | None = None) -> Path:
    """Save settings to a TOML file atomically.

    Args:
        settings: The Settings object to save.
        path: Destination. If None, uses the default path.

    Returns:
        Path where the settings were saved.

    Raises:
        SettingsError: If the file cannot be written.
    """
    settings_path = path or get_settings_path()
    settings_path.parent.mkdir(parents=True, exist_ok=True)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=settings_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(settings.model_dump(mode="json"), f)
        os.replace(str(tmp_path), str(settings_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise SettingsError(f"Failed to write settings: {e}") from e

    return settings_path
