"""Color theme shared by the CLI tables and the interactive screen.

The palette starts from the bundled data/theme.toml. A theme.toml in
the config directory may override any subset of it. Values are checked
with Rich's own color parser, so any color Rich understands is allowed.
"""

import logging
import tomllib
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from rich.color import Color, ColorParseError
from rich.theme import Theme

from venvcleaner.core.paths import get_user_theme_path

logger = logging.getLogger(__name__)

# Attributes drawn on top of the configured color
_STYLE_ATTRIBUTES: dict[str, str] = {
    "error": "bold",
    "size_large": "bold",
    "selected": "bold",
    "cursor": "reverse",
}


class ThemeColors(BaseModel):
    """Palette for the age and size buckets, the list and the messages."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    text: str = "#ffffff"
    muted: str = "#b2bec3"
    header: str = "#69B9A1"
    border: str = "#29526d"

    success: str = "#03b971"
    warning: str = "#f5b332"
    error: str = "#f53263"
    info: str = "#0ec1c8"

    age_recent: str = "#03b971"
    age_moderate: str = "#faf870"
    age_old: str = "#f53263"

    size_medium: str = "#f5b332"
    size_large: str = "#f53263"

    selected: str = "#c1ff62"
    cursor: str = "#0e8ac8"

    @field_validator("*", mode="before")
    @classmethod
    def check_color(cls, value: object, info: Any) -> str:
        if not isinstance(value, str):
            msg = f"{info.field_name}: color must be a string"
            raise ValueError(msg)
        color = value.strip()
        try:
            Color.parse(color)
        except ColorParseError as e:
            msg = f"{info.field_name}: {e}"
            raise ValueError(msg) from None
        return color

    def styles(self) -> dict[str, str]:
        """Rich style definitions keyed by style name."""
        styles: dict[str, str] = {}
        for name, color in self.model_dump().items():
            attribute = _STYLE_ATTRIBUTES.get(name)
            styles[name] = f"{attribute} {color}" if attribute else color
        styles["bold_header"] = f"bold {self.header}"
        return styles


def _parse_colors(text: str, source: str) -> dict[str, object]:
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        logger.warning("Ignoring theme %s: %s", source, e)
        return {}
    colors = data.get("colors", {})
    if not isinstance(colors, dict):
        logger.warning("Ignoring theme %s: 'colors' is not a table", source)
        return {}
    return colors


def load_theme(user_path: Path | None = None) -> ThemeColors:
    """Load the bundled palette with the user's overrides applied.

    An unreadable override file is ignored. Invalid colors make the
    whole palette fall back to the defaults.

    Args:
        user_path: Override file. If None, uses the config directory.

    Returns:
        Validated palette.
    """
    bundled = resources.files("venvcleaner.data").joinpath("theme.toml")
    colors = _parse_colors(bundled.read_text(encoding="utf-8"), "bundled theme")

    path = user_path or get_user_theme_path()
    try:
        overrides = _parse_colors(path.read_text(encoding="utf-8"), str(path))
    except FileNotFoundError:
        overrides = {}
    except OSError as e:
        logger.warning("Cannot read theme %s: %s", path, e)
        overrides = {}
    if overrides:
        logger.debug("Applying %d theme overrides from %s", len(overrides), path)

    try:
        return ThemeColors(**{**colors, **overrides})
    except ValidationError as e:
        logger.warning("Invalid theme colors, using defaults: %s", e)
        return ThemeColors()


@lru_cache(maxsize=None)
def get_theme() -> Theme:
    """Rich theme built from the configured palette, loaded once."""
    return Theme(load_theme().styles())
