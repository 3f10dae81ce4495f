"""Interactive mode command implementation."""

import logging
import sys
from pathlib import Path
from typing import Annotated

import typer

from venvcleaner.cli.types import require_config
from venvcleaner.core.preferences import load_preferences
from venvcleaner.tui.app import TuiMode
from venvcleaner.utils.formatting import print_error

logger = logging.getLogger(__name__)


def run_tui(
    ctx: typer.Context,
    directory: Annotated[
        Path | None,
        typer.Argument(
            help="Directory to search (defaults to the current directory).",
            show_default=False,
        ),
    ] = None,
    no_recursive: Annotated[
        bool,
        typer.Option(
            "--no-recursive",
            help="Only check the directory itself, not its subdirectories.",
        ),
    ] = False,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Delete without a confirmation dialog.",
        ),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Simulate deletions."),
    ] = False,
) -> None:
    """Browse and delete .venv directories interactively.

    Searches recursively by default. Press h inside the interface for
    the list of keys.
    """
    config = require_config(
        ctx,
        directory,
        recursive=not no_recursive,
        force=force,
        dry_run=dry_run,
    )

    if not sys.stdin.isatty() or not sys.stdout.isatty():
        print_error("Interactive mode requires a terminal.")
        raise typer.Exit(code=1)

    preferences = load_preferences()
    logger.debug("Starting interactive mode in %s", config.root)
    TuiMode(config, preferences).run()
