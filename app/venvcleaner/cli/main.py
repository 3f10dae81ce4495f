"""Main CLI application entry point.

Defines the Typer application and global options.
"""

from typing import Annotated

import typer

from venvcleaner import __version__
from venvcleaner.cli.commands import clean, config, scan, tui
from venvcleaner.utils.log import configure_logging

# Create main Typer app
app = typer.Typer(
    name="venvcleaner",
    help="Find and clean up Python .venv directories.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"venvcleaner version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            count=True,
            help="Increase log output (-v info, -vv debug).",
        ),
    ] = 0,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
) -> None:
    """venvcleaner - Find and clean up Python .venv directories.

    Lists virtual environments with their size and age, and deletes
    the ones you no longer need.
    """
    configure_logging(verbose, quiet)

    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


# Register commands
app.command(name="scan")(scan.scan_venvs)
app.command(name="clean")(clean.clean_venvs)
app.command(name="tui")(tui.run_tui)
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
