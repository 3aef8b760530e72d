"""Console color theme.

The bundled ``data/theme.toml`` holds the default palette; a user
``theme.toml`` in the config directory may override any subset of it.
Step outcomes (changed, unchanged, skipped, failed) each get a style.
"""

import logging
import tomllib
from importlib import resources
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from rich.theme import Theme

from omarchyctl.core.paths import get_theme_path

logger = logging.getLogger(__name__)

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


class ThemeColors(BaseModel):
    """Palette used by the CLI. Every value is ``#RGB`` or ``#RRGGBB``."""

    model_config = ConfigDict(extra="forbid")

    text: str = "#dcd7ba"
    muted: str = "#727169"
    header: str = "#7e9cd8"
    border: str = "#2a2a37"

    success: str = "#98bb6c"
    warning: str = "#e6c384"
    error: str = "#e82424"
    info: str = "#7fb4ca"

    changed: str = "#7e9cd8"
    unchanged: str = "#727169"
    skipped: str = "#957fb8"

    @field_validator("*", mode="before")
    @classmethod
    def validate_hex_color(cls, v: object, info: Any) -> str:
        if not isinstance(v, str):
            raise ValueError(f"{info.field_name}: color must be a string")
        color = v.strip()
        if not color.startswith("#"):
            raise ValueError(f"{info.field_name}: color must start with '#'")
        digits = color[1:]
        if len(digits) not in (3, 6):
            raise ValueError(f"{info.field_name}: color must be #RGB or #RRGGBB format")
        if not set(digits) <= _HEX_DIGITS:
            raise ValueError(f"{info.field_name}: invalid hex color '{color}'")
        return color


def get_bundled_theme_path() -> Path:
    """Location of the default palette shipped with the package."""
    return Path(str(resources.files("omarchyctl.data").joinpath("theme.toml")))


def _load_toml_colors(path: Path) -> dict[str, str] | None:
    """Read the ``[colors]`` table of a theme file.

    Non-string values are ignored.

    Returns:
        Color names mapped to values, or None when the file is missing,
        unreadable or not valid TOML.
    """
    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError:
        return None
    except tomllib.TOMLDecodeError as e:
        logger.warning("Ignoring theme file %s: %s", path, e)
        return None
    except OSError as e:
        logger.warning("Could not read theme file %s: %s", path, e)
        return None

    table = data.get("colors", {})
    if not isinstance(table, dict):
        logger.warning("Ignoring theme file %s: [colors] is not a table", path)
        return None
    return {key: value for key, value in table.items() if isinstance(value, str)}


def load_theme() -> ThemeColors:
    """Bundled palette with the user's overrides applied on top.

    An override file that fails validation is discarded as a whole and
    the built-in defaults are used.
    """
    colors = _load_toml_colors(get_bundled_theme_path())
    if colors is None:
        logger.error("Bundled theme is missing or unreadable; using built-in colors")
        colors = {}

    overrides = _load_toml_colors(get_theme_path())
    if overrides:
        logger.debug("Applying %d theme override(s)", len(overrides))
        colors = colors | overrides

    try:
        return ThemeColors.model_validate(colors)
    except ValidationError as e:
        logger.warning("Invalid theme colors, using defaults: %s", e)
        return ThemeColors()


def get_rich_theme(colors: ThemeColors | None = None) -> Theme:
    """Build the Rich theme for ``colors`` (loaded from disk when omitted)."""
    colors = colors or load_theme()
    styles = colors.model_dump()
    styles.update(
        {
            "error": f"bold {colors.error}",
            "changed": f"bold {colors.changed}",
            "bold_header": f"bold {colors.header}",
            "dim": colors.muted,
        }
    )
    return Theme(styles)


_cached_theme: Theme | None = None


def get_theme() -> Theme:
    """Rich theme for the process, built on first use."""
    global _cached_theme
    if _cached_theme is None:
        _cached_theme = get_rich_theme()
    return _cached_theme
