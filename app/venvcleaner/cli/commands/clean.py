"""Clean command implementation.

Walks through discovered .venv directories and deletes them, asking
for confirmation per directory unless --force is given.
"""

from pathlib import Path
from typing import Annotated

import typer

from venvcleaner.catalog.models import SortKey, VenvInfo, format_size, sort_entries
from venvcleaner.catalog.operator import DeletionOutcome, DeletionReport, VenvOperator
from venvcleaner.catalog.scanner import VenvScanner
from venvcleaner.cli.types import require_config
from venvcleaner.core.errors import NoVenvFoundError, VenvCleanerError
from venvcleaner.utils.formatting import (
    console,
    print_error,
    print_info,
    print_success,
    print_warning,
)


def clean_venvs(
    ctx: typer.Context,
    directory: Annotated[
        Path | None,
        typer.Argument(
            help="Directory to search (defaults to the current directory).",
            show_default=False,
        ),
    ] = None,
    recursive: Annotated[
        bool,
        typer.Option(
            "--recursive",
            "-r",
            help="Search all subdirectories.",
        ),
    ] = False,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Delete without asking for confirmation.",
        ),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would be deleted."),
    ] = False,
) -> None:
    """Delete .venv directories, one confirmation per directory.

    Examples:
        venvcleaner clean                     # Offer ./.venv for deletion
        venvcleaner clean ~/projects -r       # Walk a tree, ask per directory
        venvcleaner clean -r --dry-run        # Show what would be deleted
        venvcleaner clean -r -f               # Delete everything found
    """
    config = require_config(ctx, directory, recursive=recursive, force=force, dry_run=dry_run)

    _print_mode(config.root, config.recursive, config.dry_run, config.force)

    try:
        report = VenvScanner(config.root, recursive=config.recursive).scan()
    except NoVenvFoundError as e:
        print_info(str(e))
        return
    except VenvCleanerError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if report.error_count:
        print_warning(f"{report.error_count} .venv directories could not be analyzed.")
    if report.size_error_count:
        print_warning(
            f"{report.size_error_count} entries inside .venv directories could not be read; "
            "sizes may be understated."
        )

    entries = sort_entries(report.entries, SortKey.PATH)
    if not entries:
        print_info("No .venv directories found.")
        return

    console.print(f"\nFound [info]{len(entries)}[/] .venv directories")

    operator = VenvOperator(dry_run=config.dry_run)
    outcomes: list[DeletionOutcome] = []

    for entry in entries:
        _print_entry(entry)

        if config.force:
            console.print("  [warning]Force mode: deleting...[/]")
        else:
            confirmed = typer.confirm("  Delete this .venv directory?", default=False)
            if not confirmed:
                console.print("  [muted]Skipped[/]")
                continue

        try:
            operator.delete(entry)
        except VenvCleanerError as e:
            print_error(str(e))
            outcomes.append(DeletionOutcome(entry=entry, error=e, simulated=config.dry_run))
            continue

        outcomes.append(DeletionOutcome(entry=entry, simulated=config.dry_run))
        if config.dry_run:
            console.print("  [info]Would be deleted (dry run)[/]")
        else:
            console.print("  [success]Deleted successfully[/]")

    _print_summary(DeletionReport(outcomes=tuple(outcomes), simulated=config.dry_run))


def _print_mode(root: Path, recursive: bool, dry_run: bool, force: bool) -> None:
    """Print where and how the cleanup runs."""
    console.print(f"Searching in: [info]{root}[/]")
    console.print(f"Mode: {'Recursive search' if recursive else 'Current directory only'}")
    if dry_run:
        console.print("[warning]DRY RUN MODE - No files will be deleted[/]")
    if force:
        console.print("[error]FORCE MODE - Will delete without prompting[/]")


def _print_entry(entry: VenvInfo) -> None:
    """Print one directory before asking about it."""
    console.print(f"\n[border]{'─' * 60}[/]")
    console.print(f"[info]{entry.location}[/]")
    console.print(f"  Size: {entry.size_formatted}")
    console.print(
        f"  Last used: [muted]{entry.last_modified_formatted}[/] "
        f"({entry.age_in_days()} days ago)"
    )
    if entry.is_old():
        console.print("  [warning]This .venv hasn't been used in over 90 days[/]")
    elif entry.is_recently_used():
        console.print("  [success]This .venv was used recently[/]")
    if not entry.verified:
        console.print("  [warning]This directory does not look like a virtual environment[/]")


def _print_summary(report: DeletionReport) -> None:
    """Print the cleanup summary."""
    console.print(f"\n[success]{'=' * 60}[/]")
    console.print("[success]Cleanup Summary[/]")
    console.print(f"[success]{'=' * 60}[/]")

    freed = format_size(report.freed_bytes)
    if report.simulated:
        console.print(f"[info]{report.deleted_count}[/] directories would be deleted")
        console.print(f"[info]{freed}[/] would be freed")
    else:
        console.print(f"[success]{report.deleted_count}[/] directories deleted")
        console.print(f"[success]{freed}[/] freed")

    if report.failed_count:
        console.print(f"[error]{report.failed_count}[/] errors occurred:")
        for outcome in report.failures:
            console.print(f"  - [error]{outcome.entry.path}[/]: [muted]{outcome.error}[/]")
    elif report.deleted_count:
        print_success("\nCleanup completed successfully!")
