"""Shell execution utilities.

Launches the desktop file manager for a directory.
"""

import logging
import shutil
import subprocess
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


def command_exists(name: str) -> bool:
    """Check if a command exists in the system PATH.

    Args:
        name: Command name to check.

    Returns:
        True if command exists, False otherwise.
    """
    return shutil.which(name) is not None


def file_manager_command(path: Path) -> list[str]:
    """Build the platform command that opens a directory.

    Args:
        path: Directory to open.

    Returns:
        Command and arguments for the current platform.
    """
    if sys.platform == "darwin":
        return ["open", str(path)]
    if sys.platform.startswith("win"):
        return ["explorer", str(path)]
    return ["xdg-open", str(path)]


def open_in_file_manager(path: Path) -> None:
    """Open a directory in the platform file manager.

    The launcher runs detached; this call never waits for it.

    Args:
        path: Directory to open.

    Raises:
        FileNotFoundError: If the launcher is not on PATH.
        OSError: If the launcher command cannot be started.
    """
    args = file_manager_command(path)
    if not command_exists(args[0]):
        raise FileNotFoundError(f"File manager launcher not found: {args[0]}")
    logger.debug("Opening file manager: %s", " ".join(args))
    subprocess.Popen(
        args,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
    )
