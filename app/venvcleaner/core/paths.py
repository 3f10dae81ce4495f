"""XDG-compliant path management for venvcleaner.

venvcleaner keeps no state between runs, so only the configuration
directory is needed:

- Config: ~/.config/venvcleaner/ (or $XDG_CONFIG_HOME/venvcleaner/)
"""

import os
from pathlib import Path

from venvcleaner.core.errors import VenvIoError

# Application identifier for directory naming
APP_NAME = "venvcleaner"


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/venvcleaner/ (or XDG_CONFIG_HOME/venvcleaner/).
    """
    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / APP_NAME
    return Path.home() / ".config" / APP_NAME


def get_preferences_path() -> Path:
    """Get the user preferences file path.

    Returns:
        Path to ~/.config/venvcleaner/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_user_theme_path() -> Path:
    """Get the user theme override file path.

    Returns:
        Path to ~/.config/venvcleaner/theme.toml.
    """
    return get_config_dir() / "theme.toml"


def ensure_config_dir() -> Path:
    """Create the configuration directory if it doesn't exist.

    Returns:
        Path to the configuration directory.

    Raises:
        VenvIoError: If the directory cannot be created.
    """
    path = get_config_dir()
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        raise VenvIoError(f"Cannot create config directory {path}: Permission denied") from e
    except OSError as e:
        raise VenvIoError(f"Cannot create config directory {path}: {e}") from e
    return path
