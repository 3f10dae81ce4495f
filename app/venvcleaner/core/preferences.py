"""User preferences for venvcleaner.

Preferences are optional and only tune presentation: the initial sort
order and the refresh rate of the interactive screen. They are stored
in ~/.config/venvcleaner/config.toml. A missing or broken file never
prevents a run; the defaults are used instead.
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from venvcleaner.catalog.models import SortKey
from venvcleaner.core.errors import VenvIoError
from venvcleaner.core.paths import ensure_config_dir, get_preferences_path

logger = logging.getLogger(__name__)

DEFAULT_TICK_INTERVAL_MS = 250


class Preferences(BaseModel):
    """Persistent presentation preferences.

    Attributes:
        default_sort: Sort order applied when a list is first shown.
        reverse_sort: Whether the initial order is reversed.
        tick_interval_ms: Refresh interval of the interactive screen.
    """

    model_config = ConfigDict(extra="forbid")

    default_sort: Annotated[
        SortKey,
        Field(description="Initial sort order"),
    ] = SortKey.PATH
    reverse_sort: Annotated[
        bool,
        Field(description="Reverse the initial sort order"),
    ] = False
    tick_interval_ms: Annotated[
        int,
        Field(ge=100, le=1000, description="Refresh interval in milliseconds (100-1000)"),
    ] = DEFAULT_TICK_INTERVAL_MS

    @property
    def tick_interval(self) -> float:
        """Refresh interval in seconds."""
        return self.tick_interval_ms / 1000


def load_preferences(path: Path | None = None) -> Preferences:
    """Load preferences from a TOML file.

    Args:
        path: Path to the preferences file. If None, uses the default path.

    Returns:
        Validated Preferences, or the defaults if the file is missing,
        unreadable or invalid.
    """
    prefs_path = path or get_preferences_path()

    if not prefs_path.exists():
        logger.debug("No preferences file at %s, using defaults", prefs_path)
        return Preferences()

    try:
        with open(prefs_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        logger.warning("Invalid TOML syntax in %s, using defaults: %s", prefs_path, e)
        return Preferences()
    except OSError as e:
        logger.warning("Failed to read %s, using defaults: %s", prefs_path, e)
        return Preferences()

    try:
        return Preferences.model_validate(data)
    except ValidationError as e:
        logger.warning("Invalid preferences in %s, using defaults: %s", prefs_path, e)
        return Preferences()


def save_preferences(prefs: Preferences, path: Path | None = None) -> Path:
    """Save preferences to a TOML file.

    The file is written to a temporary file first and then moved into
    place with os.replace().

    Args:
        prefs: Preferences to save.
        path: Destination path in an existing directory. If None, uses the
            default path and creates the config directory.

    Returns:
        Path where the preferences were saved.

    Raises:
        VenvIoError: If the file cannot be written.
    """
    if path is None:
        ensure_config_dir()
    prefs_path = path or get_preferences_path()

    data: dict[str, object] = {
        "default_sort": prefs.default_sort.value,
        "reverse_sort": prefs.reverse_sort,
        "tick_interval_ms": prefs.tick_interval_ms,
    }

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=prefs_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(tmp_path, prefs_path)
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise VenvIoError(f"Failed to write preferences {prefs_path}: {e}") from e

    logger.debug("Saved preferences to %s", prefs_path)
    return prefs_path
