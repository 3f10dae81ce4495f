"""CLI package for venvcleaner.

This package contains the Typer application and all subcommands.
"""

from venvcleaner.cli.main import app

__all__ = ["app"]
