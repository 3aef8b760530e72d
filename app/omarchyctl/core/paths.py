"""XDG-compliant path management for omarchyctl.

This module provides standardized paths following the XDG Base Directory
Specification for configuration and state storage, plus the
well-known user locations that provisioning steps write to.

XDG defaults:
- Config: ~/.config/omarchyctl/
- State: ~/.local/state/omarchyctl/
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "omarchyctl"


def _get_xdg_base(env_var: str, default_subdir: str) -> Path:
    """Get an XDG base directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the XDG base directory (not application-specific).
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base)
    return Path.home() / default_subdir


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get the application-specific XDG directory."""
    return _get_xdg_base(env_var, default_subdir) / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/omarchyctl/ (or XDG_CONFIG_HOME/omarchyctl/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_state_dir() -> Path:
    """Get the state directory path.

    State data includes the history file that should persist between
    runs but is not configuration.

    Returns:
        Path to ~/.local/state/omarchyctl/ (or XDG_STATE_HOME/omarchyctl/).
    """
    return _get_xdg_dir("XDG_STATE_HOME", ".local/state")


def get_settings_path() -> Path:
    """Get the default settings file path.

    Returns:
        Path to ~/.config/omarchyctl/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_theme_path() -> Path:
    """Get the user theme override path.

    Returns:
        Path to ~/.config/omarchyctl/theme.toml.
    """
    return get_config_dir() / "theme.toml"


def _ensure_dir(path: Path, name: str) -> Path:
    """Create directory if it doesn't exist.

    Args:
        path: Directory path to create.
        name: Human-readable name for error messages.

    Returns:
        The created/existing directory path.

    Raises:
        RuntimeError: If directory cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create {name} directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create {name} directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path


def ensure_state_dir() -> Path:
    """Create the state directory if it doesn't exist.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(get_state_dir(), "state")


# =============================================================================
# User locations touched by provisioning steps
# =============================================================================


def get_user_config_home() -> Path:
    """Get the user's XDG config home (``~/.config``).

    Desktop programs (Waybar, Hyprland, Ghostty, Sunshine, VS Code) read
    their configuration from here.
    """
    return _get_xdg_base("XDG_CONFIG_HOME", ".config")


def get_user_bin_dir() -> Path:
    """Get the per-user executable directory (``~/.local/bin``)."""
    return Path.home() / ".local" / "bin"


def get_environment_d_dir() -> Path:
    """Get the systemd user environment directory (``~/.config/environment.d``)."""
    return get_user_config_home() / "environment.d"


def get_omarchy_share_dir() -> Path:
    """Get the Omarchy data directory (``~/.local/share/omarchy``)."""
    return Path.home() / ".local" / "share" / "omarchy"
