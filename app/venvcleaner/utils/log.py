"""Logging setup for the command-line entry point."""

import logging

from rich.logging import RichHandler

from venvcleaner.utils.formatting import err_console


def level_for(verbosity: int, quiet: bool = False) -> int:
    """Map command-line flags to a logging level.

    Args:
        verbosity: Number of -v flags given.
        quiet: Whether --quiet was given.

    Returns:
        ERROR when quiet, otherwise WARNING, INFO or DEBUG by verbosity.
    """
    if quiet:
        return logging.ERROR
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    return logging.WARNING


def configure_logging(verbosity: int = 0, quiet: bool = False) -> None:
    """Route log records to stderr through Rich.

    Args:
        verbosity: Number of -v flags given.
        quiet: Whether --quiet was given.
    """
    handler = RichHandler(
        console=err_console,
        show_path=verbosity >= 2,
        rich_tracebacks=verbosity >= 2,
    )
    logging.basicConfig(
        level=level_for(verbosity, quiet),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
