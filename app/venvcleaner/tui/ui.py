"""Rich rendering of the interactive screen.

Renderers turn an AppSnapshot into something Rich can draw. They read
the snapshot only and never change application state.
"""

from datetime import datetime
from pathlib import Path
from typing import Protocol

from rich.align import Align
from rich.console import Group, RenderableType
from rich.layout import Layout
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from venvcleaner.catalog.models import SortKey, format_size, summarize
from venvcleaner.tui.state import AppSnapshot, AppState
from venvcleaner.utils.formatting import age_style, format_path_for_display, size_style

HEADER_HEIGHT = 3
FOOTER_HEIGHT = 3
# Panel borders plus the table header row
LIST_CHROME_HEIGHT = 3

PATH_COLUMN_WIDTH = 60
SIDE_PATH_WIDTH = 32
MAX_LISTED_FAILURES = 3

_HELP_SECTIONS: tuple[tuple[str, tuple[tuple[str, str], ...]], ...] = (
    (
        "Navigation",
        (
            ("Up/Down", "Move cursor up/down"),
            ("Home/End", "Go to first/last item"),
            ("PgUp/PgDn", "Page up/down"),
        ),
    ),
    (
        "Selection",
        (
            ("Space/Enter", "Toggle selection"),
            ("Ctrl+A", "Select all"),
            ("Ctrl+D", "Deselect all"),
        ),
    ),
    (
        "Actions",
        (
            ("x/Del", "Delete selected items"),
            ("s", "Cycle sort order"),
            ("S", "Reverse sort order"),
            ("o", "Open project folder in file manager"),
            ("r", "Refresh list"),
        ),
    ),
    (
        "Other",
        (
            ("h/F1", "Show this help"),
            ("q/Esc", "Quit application"),
            ("Ctrl+Q", "Quit, even while deleting"),
        ),
    ),
)


class Renderer(Protocol):
    """Anything that can draw a snapshot of the application."""

    def render(self, snapshot: AppSnapshot) -> RenderableType: ...


def visible_rows_for(height: int) -> int:
    """Number of list rows that fit into a terminal of the given height."""
    return max(1, height - HEADER_HEIGHT - FOOTER_HEIGHT - LIST_CHROME_HEIGHT)


def _sort_arrow(key: SortKey, reverse: bool) -> str:
    # Path sorts ascending by default; the other keys sort largest/newest first
    descending = key != SortKey.PATH
    if reverse:
        descending = not descending
    return "↓" if descending else "↑"


class RichRenderer:
    """Draws the interactive screen with Rich panels and tables.

    Args:
        root: Directory being scanned (shown in the header).
        recursive: Whether the scan is recursive (shown in the header).
    """

    def __init__(self, root: Path, recursive: bool = True) -> None:
        self._root = root
        self._recursive = recursive

    def render(self, snapshot: AppSnapshot) -> RenderableType:
        """Build the full screen for a snapshot."""
        if snapshot.state == AppState.LOADING:
            return self.render_loading(snapshot)
        if snapshot.state == AppState.ERROR:
            return self.render_error(snapshot)
        if snapshot.state == AppState.HELP:
            return self.render_help()

        layout = Layout(name="root")
        layout.split_column(
            Layout(self.render_header(snapshot), name="header", size=HEADER_HEIGHT),
            Layout(name="body"),
            Layout(self.render_footer(snapshot), name="footer", size=FOOTER_HEIGHT),
        )

        if snapshot.state == AppState.CONFIRMING_DELETION:
            layout["body"].update(self.render_confirmation(snapshot))
        elif snapshot.state == AppState.DELETING:
            layout["body"].update(self.render_deleting(snapshot))
        else:
            layout["body"].split_row(
                Layout(self.render_list(snapshot), name="list", ratio=7),
                Layout(name="side", ratio=3),
            )
            side = [
                Layout(self.render_details(snapshot), name="details"),
                Layout(self.render_summary(snapshot), name="summary"),
            ]
            report = snapshot.last_report
            if report is not None and report.failures:
                shown = min(len(report.failures), MAX_LISTED_FAILURES)
                extra = 1 if len(report.failures) > shown else 0
                side.append(
                    Layout(
                        self.render_failures(snapshot),
                        name="failures",
                        size=2 * shown + extra + 2,
                    )
                )
            layout["side"].split_column(*side)
        return layout

    def render_header(self, snapshot: AppSnapshot) -> RenderableType:
        mode = "Recursive" if self._recursive else "Current Dir"
        title = Text.assemble(
            ("VenvCleaner", "bold_header"),
            f" - {self._root} ({mode})",
        )
        if snapshot.dry_run:
            title.append("  [DRY RUN]", style="warning")
        sort_info = (
            f"Sort: {snapshot.sort_key.display_name} "
            f"{_sort_arrow(snapshot.sort_key, snapshot.reverse)}"
        )

        grid = Table.grid(expand=True)
        grid.add_column(ratio=7)
        grid.add_column(ratio=3, justify="right")
        grid.add_row(title, Text(sort_info, style="info"))
        return Panel(grid, border_style="border")

    def render_list(self, snapshot: AppSnapshot) -> RenderableType:
        now = datetime.now().astimezone()
        table = Table(
            show_header=True,
            header_style="bold_header",
            box=None,
            expand=True,
            pad_edge=False,
        )
        table.add_column("", width=1)
        table.add_column("", width=1)
        table.add_column("Path", no_wrap=True, overflow="ellipsis")
        table.add_column("Size", justify="right", no_wrap=True)
        table.add_column("Last Used", no_wrap=True)

        start, end = snapshot.visible_range
        for index in range(start, end):
            entry = snapshot.entries[index]
            mark = Text("✓", style="selected") if index in snapshot.selected else Text(" ")
            age = Text("●", style=age_style(entry.age_category(now)))
            path = format_path_for_display(str(entry.path), PATH_COLUMN_WIDTH)
            path_style = "selected" if index in snapshot.selected else "text"
            table.add_row(
                mark,
                age,
                Text(path, style=path_style),
                Text(entry.size_formatted, style=size_style(entry.size_category)),
                Text(entry.last_modified_formatted, style="muted"),
                style="cursor" if index == snapshot.cursor else None,
            )

        if not snapshot.entries:
            body: RenderableType = Align.center(
                Text("No .venv directories found.", style="muted"), vertical="middle"
            )
        else:
            body = table

        title = f".venv Directories ({len(snapshot.entries)})"
        return Panel(body, title=title, border_style="border")

    def render_details(self, snapshot: AppSnapshot) -> RenderableType:
        entry = snapshot.current
        if entry is None:
            return Panel(Text("Nothing selected", style="muted"), title="Details")

        lines = Text()
        lines.append("Project: ", style="header")
        lines.append(f"{entry.project_name or 'Unknown'}\n")
        lines.append("Location: ", style="header")
        lines.append(f"{entry.location}\n")
        lines.append("Size: ", style="header")
        lines.append(f"{entry.size_formatted}\n", style=size_style(entry.size_category))
        lines.append("Created: ", style="header")
        lines.append(f"{entry.created_formatted}\n")
        lines.append("Last used: ", style="header")
        lines.append(f"{entry.last_modified_formatted}\n")
        lines.append("Age: ", style="header")
        lines.append(f"{entry.age_in_days()} days\n", style=age_style(entry.age_category()))
        if entry.unreadable_count:
            lines.append(f"{entry.unreadable_count} entries could not be read\n", style="warning")
        if not entry.verified:
            lines.append("Does not look like a virtual environment", style="warning")
        return Panel(lines, title="Details", border_style="border")

    def render_summary(self, snapshot: AppSnapshot) -> RenderableType:
        stats = summarize(snapshot.entries)
        table = Table.grid(padding=(0, 1))
        table.add_column(style="header")
        table.add_column()
        table.add_row("Total:", f"{stats.total_count} directories")
        table.add_row("Selected:", f"{len(snapshot.selected)} directories")
        table.add_row("Total Size:", format_size(stats.total_size))
        table.add_row("Selected Size:", format_size(snapshot.selected_size))
        table.add_row("Recent:", Text(str(stats.recent_count), style="age_recent"))
        table.add_row("Moderate:", Text(str(stats.moderate_count), style="age_moderate"))
        table.add_row("Old:", Text(str(stats.old_count), style="age_old"))
        if snapshot.scan_error_count:
            table.add_row("Errors:", Text(str(snapshot.scan_error_count), style="error"))
        if snapshot.size_error_count:
            table.add_row("Unreadable:", Text(str(snapshot.size_error_count), style="warning"))
        return Panel(table, title="Summary", border_style="border")

    def render_failures(self, snapshot: AppSnapshot) -> RenderableType:
        """List the directories the last deletion batch could not remove."""
        report = snapshot.last_report
        failures = report.failures if report is not None else ()
        lines: list[Text] = []
        for outcome in failures[:MAX_LISTED_FAILURES]:
            path = format_path_for_display(str(outcome.entry.path), SIDE_PATH_WIDTH)
            lines.append(Text(path, style="text", no_wrap=True, overflow="ellipsis"))
            lines.append(
                Text(f"  {outcome.error}", style="error", no_wrap=True, overflow="ellipsis")
            )
        if len(failures) > MAX_LISTED_FAILURES:
            lines.append(
                Text(f"... and {len(failures) - MAX_LISTED_FAILURES} more", style="muted")
            )
        return Panel(
            Group(*lines),
            title=f"Failed Deletions ({len(failures)})",
            border_style="error",
        )

    def render_footer(self, snapshot: AppSnapshot) -> RenderableType:
        if snapshot.state == AppState.CONFIRMING_DELETION:
            shortcuts = "y/Enter:Confirm n/Esc:Cancel"
        elif snapshot.state == AppState.DELETING:
            shortcuts = "Ctrl+Q:Quit"
        elif snapshot.selected:
            shortcuts = "h:Help r:Refresh Space:Toggle x:Delete s:Sort o:Open Ctrl+D:None q:Quit"
        else:
            shortcuts = "h:Help r:Refresh Space:Select s:Sort o:Open Ctrl+A:All q:Quit"

        grid = Table.grid(expand=True)
        grid.add_column(ratio=6, no_wrap=True, overflow="ellipsis")
        grid.add_column(ratio=4, justify="right", no_wrap=True, overflow="ellipsis")
        grid.add_row(Text(snapshot.status, style="text"), Text(shortcuts, style="muted"))
        return Panel(grid, border_style="muted")

    def render_confirmation(self, snapshot: AppSnapshot) -> RenderableType:
        count = len(snapshot.selected)
        verb = "simulate deleting" if snapshot.dry_run else "delete"
        lines = [
            Text(f"Are you sure you want to {verb} {count} .venv directories?", style="bold"),
            Text(f"Total size: {format_size(snapshot.selected_size)}", style="info"),
            Text(""),
        ]
        for entry in snapshot.selected_entries[:5]:
            lines.append(Text(f"  {format_path_for_display(str(entry.path), 70)}", style="muted"))
        if count > 5:
            lines.append(Text(f"  ... and {count - 5} more", style="muted"))
        lines.append(Text(""))
        lines.append(Text("This action cannot be undone!", style="warning"))
        lines.append(Text("Press 'y' to confirm, 'n' to cancel", style="muted"))
        panel = Panel(
            Group(*lines),
            title="Confirm Deletion",
            border_style="warning",
            expand=False,
        )
        return Align.center(panel, vertical="middle")

    def render_deleting(self, snapshot: AppSnapshot) -> RenderableType:
        total = len(snapshot.pending)
        size = format_size(sum(e.size_bytes for e in snapshot.pending))
        dots = "." * snapshot.loading_phase
        panel = Panel(
            Text(f"Deleting {total} directories ({size}){dots}", style="info"),
            title="Deleting",
            border_style="info",
            expand=False,
        )
        return Align.center(panel, vertical="middle")

    def render_loading(self, snapshot: AppSnapshot) -> RenderableType:
        lines = [Text(f"Loading{'.' * snapshot.loading_phase}", style="bold_header")]
        if snapshot.status:
            lines.append(Text(snapshot.status, style="muted"))
        return Align.center(Group(*lines), vertical="middle")

    def render_error(self, snapshot: AppSnapshot) -> RenderableType:
        body = Group(
            Text("Error", style="error"),
            Text(""),
            Text(snapshot.error),
            Text(""),
            Text("Press Enter to continue, 'r' to retry or 'q' to quit", style="muted"),
        )
        panel = Panel(body, title="Error", border_style="error", expand=False)
        return Align.center(panel, vertical="middle")

    def render_help(self) -> RenderableType:
        table = Table.grid(padding=(0, 2))
        table.add_column(style="info", no_wrap=True)
        table.add_column(style="text")
        for title, bindings in _HELP_SECTIONS:
            table.add_row(Text(f"{title}:", style="bold_header"), "")
            for keys, description in bindings:
                table.add_row(f"  {keys}", description)
            table.add_row("", "")
        table.add_row(Text("Colors:", style="bold_header"), "")
        table.add_row(Text("  ●", style="age_recent"), "Recently used (<30 days)")
        table.add_row(Text("  ●", style="age_moderate"), "Moderately used (30-90 days)")
        table.add_row(Text("  ●", style="age_old"), "Old (>90 days)")
        table.add_row(Text("  ✓", style="selected"), "Selected for deletion")
        table.add_row("", "")
        table.add_row(Text("Press any key to return...", style="muted"), "")
        return Panel(table, title="VenvCleaner Help", border_style="border")
