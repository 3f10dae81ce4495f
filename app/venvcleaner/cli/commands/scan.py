"""Scan command implementation.

Lists .venv directories with their size and age, without deleting anything.
"""

import json
from pathlib import Path
from typing import Annotated

import typer

from venvcleaner.catalog.models import (
    RECOMMEND_SIZE_BYTES,
    SortKey,
    VenvInfo,
    format_size,
    sort_entries,
    summarize,
)
from venvcleaner.catalog.scanner import ScanReport, VenvScanner
from venvcleaner.cli.types import OutputFormat, is_quiet, require_config
from venvcleaner.core.errors import NoVenvFoundError, VenvCleanerError
from venvcleaner.utils.formatting import (
    console,
    create_venv_table,
    format_venv_row,
    print_error,
    print_info,
    print_warning,
)


def scan_venvs(
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
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format: table or json.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
    sort: Annotated[
        SortKey,
        typer.Option(
            "--sort",
            "-s",
            help="Sort order: path, size, created or last_modified.",
            case_sensitive=False,
        ),
    ] = SortKey.SIZE,
    reverse: Annotated[
        bool,
        typer.Option(
            "--reverse",
            help="Reverse the sort order.",
        ),
    ] = False,
) -> None:
    """Show .venv directories with size and age.

    Examples:
        venvcleaner scan                      # Check ./.venv only
        venvcleaner scan ~/projects -r        # Search a whole tree
        venvcleaner scan -r --sort last_modified
        venvcleaner scan -r --format json     # Machine-readable output
    """
    config = require_config(ctx, directory, recursive=recursive)
    quiet = is_quiet(ctx)

    try:
        report = VenvScanner(config.root, recursive=config.recursive).scan()
    except NoVenvFoundError as e:
        if output_format == OutputFormat.JSON:
            console.print_json(json.dumps(_to_json([], config.root)))
        else:
            print_info(str(e))
        return
    except VenvCleanerError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    entries = sort_entries(report.entries, sort, reverse)

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(_to_json(entries, config.root, report)))
        return

    if not entries:
        print_info("No .venv directories found.")
    else:
        table = create_venv_table(title=f".venv Directories in {config.root}")
        for entry in entries:
            table.add_row(*format_venv_row(entry))
        console.print(table)

        stats = summarize(entries)
        console.print(
            f"\n[bold]Summary:[/] [info]{stats.total_count}[/] .venv directories found, "
            f"total size: [info]{format_size(stats.total_size)}[/]"
        )

    if report.error_count:
        print_warning(f"{report.error_count} .venv directories could not be analyzed.")
    if report.size_error_count:
        print_warning(
            f"{report.size_error_count} entries inside .venv directories could not be read; "
            "sizes may be understated."
        )

    if not quiet:
        _print_recommendations(entries)


def _print_recommendations(entries: list[VenvInfo]) -> None:
    """Print cleanup hints for old and large directories."""
    stats = summarize(entries)
    if not stats.old_count and not stats.large_count:
        return

    console.print("\n[warning]Recommendations:[/]")
    if stats.old_count:
        console.print(
            f"  [age_old]{stats.old_count}[/] old .venv directories (>90 days) "
            "could be cleaned up"
        )
    if stats.large_count:
        console.print(
            f"  [size_medium]{stats.large_count}[/] large .venv directories "
            f"(>{format_size(RECOMMEND_SIZE_BYTES)}) are taking significant space"
        )
    if stats.old_count:
        console.print(
            "\n  Consider running [success]venvcleaner clean -r[/] to clean up old directories"
        )


def _to_json(
    entries: list[VenvInfo], root: Path, report: ScanReport | None = None
) -> dict[str, object]:
    """Convert scan results to a JSON-serializable dictionary."""
    return {
        "root": str(root),
        "total_count": len(entries),
        "total_size_bytes": sum(e.size_bytes for e in entries),
        "error_count": report.error_count if report else 0,
        "size_error_count": report.size_error_count if report else 0,
        "entries": [
            {
                "path": str(e.path),
                "project": e.project_name,
                "size_bytes": e.size_bytes,
                "size": e.size_formatted,
                "created": e.created.isoformat(),
                "last_modified": e.last_modified.isoformat(),
                "age_days": e.age_in_days(),
                "age_category": e.age_category().value,
                "verified": e.verified,
                "unreadable_count": e.unreadable_count,
            }
            for e in entries
        ],
    }
