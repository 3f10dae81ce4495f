"""Run configuration for venvcleaner.

A CleanerConfig is an immutable snapshot of everything the core needs
for one run: where to search, how deep, and how careful to be when
deleting. It is built once from command-line options and handed to the
scanner, the operator and the background workers.
"""

from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from venvcleaner.core.errors import PathError, VenvIoError


class CleanerConfig(BaseModel):
    """Immutable configuration snapshot for a single run.

    Attributes:
        root: Absolute directory to search from.
        recursive: Whether to walk the whole tree below root.
        force: Delete without asking for confirmation.
        dry_run: Report what would be deleted without deleting.
        verbosity: 0 = quiet, 1 = normal, 2+ = verbose.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    root: Path
    recursive: bool = False
    force: bool = False
    dry_run: bool = False
    verbosity: Annotated[int, Field(ge=0, description="Verbosity level")] = 0


def validate_root(directory: Path | None) -> Path:
    """Resolve and validate the root directory for a run.

    Args:
        directory: Directory given by the user, or None for the current directory.

    Returns:
        Absolute path of an existing directory.

    Raises:
        PathError: If the path does not exist or is not a directory.
        VenvIoError: If the current directory cannot be determined.
    """
    if directory is None:
        try:
            directory = Path.cwd()
        except OSError as e:
            raise VenvIoError(str(e)) from e

    root = directory.expanduser().absolute()

    if not root.exists():
        raise PathError(str(root), "Directory does not exist")
    if not root.is_dir():
        raise PathError(str(root), "Path is not a directory")

    return root


def build_config(
    directory: Path | None,
    *,
    recursive: bool = False,
    force: bool = False,
    dry_run: bool = False,
    verbosity: int = 0,
) -> CleanerConfig:
    """Build a validated CleanerConfig from user-supplied options.

    Args:
        directory: Directory to search, None for the current directory.
        recursive: Whether to search recursively.
        force: Skip confirmation prompts.
        dry_run: Simulate deletions.
        verbosity: Verbosity level.

    Returns:
        Validated configuration snapshot.

    Raises:
        PathError: If the directory is missing or not a directory.
    """
    return CleanerConfig(
        root=validate_root(directory),
        recursive=recursive,
        force=force,
        dry_run=dry_run,
        verbosity=verbosity,
    )
