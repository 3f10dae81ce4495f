"""Rich console formatting utilities.

Provides consistent formatting for CLI and interactive output using Rich.
"""

from __future__ import annotations

import sys
from datetime import datetime
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

from venvcleaner.catalog.models import AgeCategory, SizeCategory
from venvcleaner.core.theme import get_theme

if TYPE_CHECKING:
    from venvcleaner.catalog.models import VenvInfo


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())

_AGE_STYLES: dict[AgeCategory, str] = {
    AgeCategory.RECENT: "age_recent",
    AgeCategory.MODERATE: "age_moderate",
    AgeCategory.OLD: "age_old",
}

_SIZE_STYLES: dict[SizeCategory, str] = {
    SizeCategory.SMALL: "text",
    SizeCategory.MEDIUM: "size_medium",
    SizeCategory.LARGE: "size_large",
}


def age_style(category: AgeCategory) -> str:
    """Theme style name for an age bucket."""
    return _AGE_STYLES[category]


def size_style(category: SizeCategory) -> str:
    """Theme style name for a size bucket."""
    return _SIZE_STYLES[category]


def format_path_for_display(path: str, max_length: int) -> str:
    """Shorten a path so it fits into a column.

    Long paths keep their tail, prefixed with an ellipsis.

    Args:
        path: Path to shorten.
        max_length: Maximum number of characters.

    Returns:
        The path itself if short enough, otherwise "..." plus its tail.
    """
    if len(path) <= max_length:
        return path
    if max_length <= 3:
        return path[-max_length:] if max_length > 0 else ""
    return "..." + path[-(max_length - 3) :]


def create_venv_table(title: str = ".venv Directories") -> Table:
    """Create a pre-configured table for displaying .venv directories.

    Args:
        title: Table title.

    Returns:
        Rich Table configured for .venv display.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
        row_styles=["", "on grey7"],
    )
    table.add_column("Path", style="text", overflow="fold")
    table.add_column("Size", justify="right", no_wrap=True)
    table.add_column("Created", style="muted", no_wrap=True)
    table.add_column("Last Used", no_wrap=True)
    return table


def format_venv_row(entry: VenvInfo, now: datetime | None = None) -> tuple[str, str, str, str]:
    """Format a .venv record as a table row with proper styling.

    Size is colored by size bucket and the last-used date by age bucket.

    Args:
        entry: The record to format.
        now: Reference time for age classification.

    Returns:
        Tuple of (path, size, created, last_used) with Rich markup.
    """
    size_tag = size_style(entry.size_category)
    age_tag = age_style(entry.age_category(now))
    return (
        str(entry.path),
        f"[{size_tag}]{entry.size_formatted}[/]",
        entry.created_formatted,
        f"[{age_tag}]{entry.last_modified_formatted}[/]",
    )


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
