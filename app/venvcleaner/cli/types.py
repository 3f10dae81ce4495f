"""Shared types and utilities for CLI commands.

This module provides common enums and helper functions used across
multiple CLI command modules to avoid code duplication.
"""

from enum import Enum
from pathlib import Path

import typer

from venvcleaner.core.config import CleanerConfig, build_config
from venvcleaner.core.errors import VenvCleanerError
from venvcleaner.utils.formatting import print_error


class OutputFormat(str, Enum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


def get_verbosity(ctx: typer.Context) -> int:
    """Read the global verbosity level stored by the main callback."""
    obj = ctx.obj or {}
    return int(obj.get("verbose", 0))


def is_quiet(ctx: typer.Context) -> bool:
    """Read the global --quiet flag stored by the main callback."""
    obj = ctx.obj or {}
    return bool(obj.get("quiet", False))


def require_config(
    ctx: typer.Context,
    directory: Path | None,
    *,
    recursive: bool = False,
    force: bool = False,
    dry_run: bool = False,
) -> CleanerConfig:
    """Build the run configuration or exit with an error.

    Args:
        ctx: Typer context carrying the global options.
        directory: Directory argument, None for the current directory.
        recursive: Whether to search recursively.
        force: Skip confirmation prompts.
        dry_run: Simulate deletions.

    Returns:
        Validated configuration.

    Raises:
        typer.Exit: With code 1 if the directory is invalid.
    """
    try:
        return build_config(
            directory,
            recursive=recursive,
            force=force,
            dry_run=dry_run,
            verbosity=get_verbosity(ctx),
        )
    except VenvCleanerError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
