"""Ghostty terminal settings."""

from pathlib import Path

from omarchyctl.core.paths import get_user_config_home
from omarchyctl.core.settings import GhosttySettings
from omarchyctl.models.step import StepResult
from omarchyctl.utils.textedit import read_text, upsert_keys, write_if_changed

# Keys that may occur on several lines, each adding an entry.
REPEATABLE_KEYS = frozenset({"config-file", "font-feature", "font-variation", "keybind", "palette"})

# The first line sets the font; later lines are fallbacks.
FONT_FAMILY_KEYS = frozenset(
    {"font-family", "font-family-bold", "font-family-italic", "font-family-bold-italic"}
)


def ghostty_config_path() -> Path:
    """``~/.config/ghostty/config``."""
    return get_user_config_home() / "ghostty" / "config"


def configure_ghostty(settings: GhosttySettings) -> StepResult:
    """Set each configured key in the Ghostty config, keeping everything else.

    A configured ``keybind`` (or other repeatable key) is added next to the
    existing ones. A configured font family replaces the primary font and
    keeps any fallback fonts listed after it.
    """
    path = ghostty_config_path()
    text = upsert_keys(
        read_text(path),
        settings.settings,
        repeatable=REPEATABLE_KEYS,
        first_only=FONT_FAMILY_KEYS,
    )
    changed = write_if_changed(path, text)
    keys = ", ".join(settings.settings)
    return StepResult.from_changed("ghostty-config", changed, f"{keys} in {path}")
