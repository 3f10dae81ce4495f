"""CLI commands for venvcleaner.

This package contains all subcommand implementations.
"""

from venvcleaner.cli.commands import clean, config, scan, tui

__all__ = ["clean", "config", "scan", "tui"]
