"""Configuration commands.

Shows the effective preferences and writes a default preferences file.
"""

from typing import Annotated

import typer
from rich.table import Table

from venvcleaner.core.errors import VenvCleanerError
from venvcleaner.core.paths import get_preferences_path, get_user_theme_path
from venvcleaner.core.preferences import Preferences, load_preferences, save_preferences
from venvcleaner.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Show or create the preferences file.",
    invoke_without_command=True,
    no_args_is_help=True,
)


@app.command()
def show() -> None:
    """Show the effective preferences."""
    path = get_preferences_path()
    prefs = load_preferences(path)

    table = Table(
        title="Preferences",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Setting", style="info", no_wrap=True)
    table.add_column("Value", style="text")
    table.add_row("default_sort", prefs.default_sort.value)
    table.add_row("reverse_sort", str(prefs.reverse_sort).lower())
    table.add_row("tick_interval_ms", str(prefs.tick_interval_ms))
    console.print(table)

    source = str(path) if path.exists() else f"{path} (not found, using defaults)"
    console.print(f"\n[muted]Preferences file: {source}[/]")
    console.print(f"[muted]Theme overrides: {get_user_theme_path()}[/]")


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing file."),
    ] = False,
) -> None:
    """Write a preferences file with the default settings."""
    path = get_preferences_path()

    if path.exists() and not force:
        print_info(f"Preferences file already exists: {path}")
        print_info("Use --force to overwrite it.")
        return

    try:
        saved = save_preferences(Preferences())
    except VenvCleanerError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Preferences written to {saved}")
