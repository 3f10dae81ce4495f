"""Application state for the interactive screen.

The StateMachine owns every piece of UI-visible state. It reacts to
bus events and user actions by changing state and returning effects
(scan, delete, open folder) for the caller to execute; it never
performs I/O itself.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from venvcleaner.catalog.models import SortKey, VenvInfo, format_size, sort_entries
from venvcleaner.catalog.operator import DeletionReport
from venvcleaner.tui.events import (
    DeletionComplete,
    Event,
    Input,
    ScanComplete,
    ScanFailed,
    Tick,
)
from venvcleaner.tui.keys import Key

logger = logging.getLogger(__name__)

LOADING_PHASES = 4


class AppState(str, Enum):
    """Screens of the interactive application."""

    LOADING = "loading"
    BROWSING = "browsing"
    CONFIRMING_DELETION = "confirming_deletion"
    DELETING = "deleting"
    ERROR = "error"
    HELP = "help"
    QUIT = "quit"


class Action(str, Enum):
    """User requests understood by the state machine."""

    QUIT = "quit"
    HELP = "help"
    REFRESH = "refresh"
    MOVE_UP = "move_up"
    MOVE_DOWN = "move_down"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    HOME = "home"
    END = "end"
    TOGGLE_SELECTION = "toggle_selection"
    SELECT_ALL = "select_all"
    DESELECT_ALL = "deselect_all"
    DELETE = "delete"
    CYCLE_SORT = "cycle_sort"
    REVERSE_SORT = "reverse_sort"
    OPEN_FOLDER = "open_folder"
    CONFIRM = "confirm"
    CANCEL = "cancel"
    ACKNOWLEDGE = "acknowledge"
    DISMISS = "dismiss"


_BROWSING_KEYS: dict[str, Action] = {
    "q": Action.QUIT,
    "escape": Action.QUIT,
    "h": Action.HELP,
    "f1": Action.HELP,
    "r": Action.REFRESH,
    "up": Action.MOVE_UP,
    "down": Action.MOVE_DOWN,
    "pageup": Action.PAGE_UP,
    "pagedown": Action.PAGE_DOWN,
    "home": Action.HOME,
    "end": Action.END,
    "space": Action.TOGGLE_SELECTION,
    "enter": Action.TOGGLE_SELECTION,
    "x": Action.DELETE,
    "delete": Action.DELETE,
    "s": Action.CYCLE_SORT,
    "S": Action.REVERSE_SORT,
    "o": Action.OPEN_FOLDER,
}

_BROWSING_CTRL_KEYS: dict[str, Action] = {
    "a": Action.SELECT_ALL,
    "d": Action.DESELECT_ALL,
}

_CONFIRM_KEYS: dict[str, Action] = {
    "y": Action.CONFIRM,
    "Y": Action.CONFIRM,
    "enter": Action.CONFIRM,
    "n": Action.CANCEL,
    "N": Action.CANCEL,
    "escape": Action.CANCEL,
    "q": Action.QUIT,
}

_ERROR_KEYS: dict[str, Action] = {
    "enter": Action.ACKNOWLEDGE,
    "escape": Action.ACKNOWLEDGE,
    "r": Action.REFRESH,
    "q": Action.QUIT,
}


def action_for(state: AppState, key: Key) -> Action | None:
    """Translate a key press into an action for the given state.

    Ctrl+Q and Ctrl+C quit from every state. While deleting, nothing
    else is accepted.

    Args:
        state: Current application state.
        key: Key that was pressed.

    Returns:
        The requested action, or None if the key means nothing here.
    """
    if key.ctrl and key.name in ("q", "c"):
        return Action.QUIT

    if state == AppState.LOADING:
        return Action.QUIT if key.name in ("q", "escape") and not key.ctrl else None
    if state == AppState.BROWSING:
        if key.ctrl:
            return _BROWSING_CTRL_KEYS.get(key.name)
        return _BROWSING_KEYS.get(key.name)
    if state == AppState.CONFIRMING_DELETION:
        return None if key.ctrl else _CONFIRM_KEYS.get(key.name)
    if state == AppState.ERROR:
        return None if key.ctrl else _ERROR_KEYS.get(key.name)
    if state == AppState.HELP:
        return Action.QUIT if key.name == "q" and not key.ctrl else Action.DISMISS
    return None


@dataclass(frozen=True, slots=True)
class RequestScan:
    """Start a background scan."""


@dataclass(frozen=True, slots=True)
class RequestDeletion:
    """Start a background deletion of the given entries."""

    entries: tuple[VenvInfo, ...]


@dataclass(frozen=True, slots=True)
class OpenFolder:
    """Open a directory in the file manager."""

    path: Path


Effect = RequestScan | RequestDeletion | OpenFolder


class EntrySet:
    """Ordered .venv records with cursor, scroll window and selection.

    Selection is a set of indices into the current order. Replacing the
    records clears it; re-sorting carries it over by path.
    """

    def __init__(
        self,
        sort_key: SortKey = SortKey.PATH,
        reverse: bool = False,
        visible_items: int = 10,
    ) -> None:
        self._entries: list[VenvInfo] = []
        self._selected: set[int] = set()
        self._sort_key = sort_key
        self._reverse = reverse
        self._cursor = 0
        self._scroll_offset = 0
        self._visible_items = max(1, visible_items)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> tuple[VenvInfo, ...]:
        return tuple(self._entries)

    @property
    def selected(self) -> frozenset[int]:
        return frozenset(self._selected)

    @property
    def sort_key(self) -> SortKey:
        return self._sort_key

    @property
    def reverse(self) -> bool:
        return self._reverse

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def scroll_offset(self) -> int:
        return self._scroll_offset

    @property
    def visible_items(self) -> int:
        return self._visible_items

    @property
    def current(self) -> VenvInfo | None:
        """Record under the cursor."""
        if not self._entries:
            return None
        return self._entries[self._cursor]

    def selected_entries(self) -> list[VenvInfo]:
        """Selected records in display order."""
        return [self._entries[i] for i in sorted(self._selected)]

    def replace(self, entries: Iterable[VenvInfo]) -> None:
        """Swap in a new list of records.

        The new records are sorted with the current order, the
        selection is cleared and cursor and scroll are reset.
        """
        self._entries = sort_entries(entries, self._sort_key, self._reverse)
        self._selected.clear()
        self._cursor = 0
        self._scroll_offset = 0

    def set_sort(self, key: SortKey, reverse: bool | None = None) -> None:
        """Re-sort the records, keeping the same records selected."""
        selected_paths = {self._entries[i].path for i in self._selected}
        current = self.current

        self._sort_key = key
        if reverse is not None:
            self._reverse = reverse
        self._entries = sort_entries(self._entries, self._sort_key, self._reverse)

        self._selected = {i for i, e in enumerate(self._entries) if e.path in selected_paths}
        if current is not None:
            self._cursor = next(
                i for i, e in enumerate(self._entries) if e.path == current.path
            )
        self._adjust_scroll()

    def cycle_sort(self) -> SortKey:
        """Switch to the next sort order."""
        self.set_sort(self._sort_key.next())
        return self._sort_key

    def toggle_reverse(self) -> bool:
        """Flip the sort direction."""
        self.set_sort(self._sort_key, not self._reverse)
        return self._reverse

    def toggle(self, index: int | None = None) -> None:
        """Toggle selection of a record (the cursor record by default)."""
        if not self._entries:
            return
        index = self._cursor if index is None else index
        if not 0 <= index < len(self._entries):
            raise IndexError(f"Entry index out of range: {index}")
        if index in self._selected:
            self._selected.remove(index)
        else:
            self._selected.add(index)

    def select_all(self) -> None:
        self._selected = set(range(len(self._entries)))

    def clear_selection(self) -> None:
        self._selected.clear()

    def move_up(self) -> None:
        if self._cursor > 0:
            self._cursor -= 1
            self._adjust_scroll()

    def move_down(self) -> None:
        if self._entries:
            self._cursor = min(self._cursor + 1, len(self._entries) - 1)
            self._adjust_scroll()

    def page_up(self) -> None:
        page = max(1, self._visible_items - 1)
        self._cursor = max(0, self._cursor - page)
        self._adjust_scroll()

    def page_down(self) -> None:
        if self._entries:
            page = max(1, self._visible_items - 1)
            self._cursor = min(self._cursor + page, len(self._entries) - 1)
            self._adjust_scroll()

    def home(self) -> None:
        self._cursor = 0
        self._scroll_offset = 0

    def end(self) -> None:
        if self._entries:
            self._cursor = len(self._entries) - 1
            self._adjust_scroll()

    def set_visible_items(self, count: int) -> None:
        """Set how many rows fit on screen."""
        self._visible_items = max(1, count)
        self._adjust_scroll()

    def visible_range(self) -> tuple[int, int]:
        """Start and end (exclusive) indices of the rows on screen."""
        start = self._scroll_offset
        return start, min(start + self._visible_items, len(self._entries))

    def _adjust_scroll(self) -> None:
        # Keep the cursor row inside the scroll window
        if self._cursor < self._scroll_offset:
            self._scroll_offset = self._cursor
        elif self._cursor >= self._scroll_offset + self._visible_items:
            self._scroll_offset = self._cursor - self._visible_items + 1


@dataclass(frozen=True, slots=True)
class AppSnapshot:
    """Read-only view of the application state for renderers."""

    state: AppState
    entries: tuple[VenvInfo, ...]
    selected: frozenset[int]
    cursor: int
    scroll_offset: int
    visible_items: int
    sort_key: SortKey
    reverse: bool
    status: str
    error: str
    loading_phase: int
    pending: tuple[VenvInfo, ...]
    last_report: DeletionReport | None
    scan_error_count: int
    dry_run: bool
    force: bool

    @property
    def current(self) -> VenvInfo | None:
        if not self.entries:
            return None
        return self.entries[self.cursor]

    @property
    def selected_entries(self) -> list[VenvInfo]:
        return [self.entries[i] for i in sorted(self.selected)]

    @property
    def selected_size(self) -> int:
        return sum(self.entries[i].size_bytes for i in self.selected)

    @property
    def size_error_count(self) -> int:
        return sum(e.unreadable_count for e in self.entries)

    @property
    def visible_range(self) -> tuple[int, int]:
        return self.scroll_offset, min(self.scroll_offset + self.visible_items, len(self.entries))


def deletion_status(report: DeletionReport) -> str:
    """Status line describing a finished deletion batch."""
    freed = format_size(report.freed_bytes)
    if report.simulated:
        return (
            f"Dry run: would delete {report.deleted_count} directories ({freed}). "
            "Nothing was removed."
        )
    if report.failed_count == 0:
        return (
            f"Successfully deleted {report.deleted_count} directories ({freed} freed). "
            "List will refresh automatically."
        )
    return (
        f"Deleted {report.deleted_count} directories ({freed} freed), "
        f"{report.failed_count} failed. Check permissions for failed items."
    )


class StateMachine:
    """Owns the interactive application state and its transitions.

    Args:
        sort_key: Initial sort order.
        reverse: Whether the initial order is reversed.
        force: Delete without a confirmation dialog.
        dry_run: Deletions are simulated (shown in the UI only).
        visible_items: Initial number of list rows on screen.
    """

    def __init__(
        self,
        *,
        sort_key: SortKey = SortKey.PATH,
        reverse: bool = False,
        force: bool = False,
        dry_run: bool = False,
        visible_items: int = 10,
    ) -> None:
        self._state = AppState.LOADING
        self._entries = EntrySet(sort_key=sort_key, reverse=reverse, visible_items=visible_items)
        self._force = force
        self._dry_run = dry_run
        self._status = ""
        self._error = ""
        self._loading_phase = 0
        self._pending: tuple[VenvInfo, ...] = ()
        self._last_report: DeletionReport | None = None
        self._scan_error_count = 0

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def entries(self) -> EntrySet:
        return self._entries

    @property
    def status(self) -> str:
        return self._status

    @property
    def error(self) -> str:
        return self._error

    @property
    def is_done(self) -> bool:
        return self._state == AppState.QUIT

    def start(self) -> list[Effect]:
        """Effects for entering the initial LOADING state."""
        return [RequestScan()]

    def set_visible_items(self, count: int) -> None:
        self._entries.set_visible_items(count)

    def set_status(self, message: str) -> None:
        """Replace the status line (used for effect failures)."""
        self._status = message

    def handle(self, event: Event) -> list[Effect]:
        """Apply a bus event.

        Args:
            event: Event taken from the bus.

        Returns:
            Effects the caller must execute.
        """
        if self._state == AppState.QUIT:
            return []

        if isinstance(event, Tick):
            self._loading_phase = (self._loading_phase + 1) % LOADING_PHASES
            return []
        if isinstance(event, Input):
            action = action_for(self._state, event.key)
            if action is None:
                return []
            return self.dispatch(action)
        if isinstance(event, ScanComplete):
            return self._on_scan_complete(event)
        if isinstance(event, ScanFailed):
            return self._on_scan_failed(event)
        if isinstance(event, DeletionComplete):
            return self._on_deletion_complete(event)

        logger.debug("Ignoring unknown event %r", event)
        return []

    def dispatch(self, action: Action) -> list[Effect]:
        """Apply a user action.

        Args:
            action: Action requested by the user.

        Returns:
            Effects the caller must execute.
        """
        if self._state == AppState.QUIT:
            return []
        if action == Action.QUIT:
            logger.debug("Quit requested in state %s", self._state.value)
            self._state = AppState.QUIT
            return []

        if self._state == AppState.BROWSING:
            return self._browse(action)
        if self._state == AppState.CONFIRMING_DELETION:
            if action == Action.CONFIRM:
                return self._begin_deletion()
            if action == Action.CANCEL:
                self._state = AppState.BROWSING
            return []
        if self._state == AppState.ERROR:
            if action == Action.ACKNOWLEDGE:
                self._error = ""
                self._state = AppState.BROWSING
                return []
            if action == Action.REFRESH:
                self._error = ""
                return self._begin_loading()
            return []
        if self._state == AppState.HELP:
            if action == Action.DISMISS:
                self._state = AppState.BROWSING
            return []
        return []

    def snapshot(self) -> AppSnapshot:
        """Read-only copy of the current state."""
        entries = self._entries
        return AppSnapshot(
            state=self._state,
            entries=entries.entries,
            selected=entries.selected,
            cursor=entries.cursor,
            scroll_offset=entries.scroll_offset,
            visible_items=entries.visible_items,
            sort_key=entries.sort_key,
            reverse=entries.reverse,
            status=self._status,
            error=self._error,
            loading_phase=self._loading_phase,
            pending=self._pending,
            last_report=self._last_report,
            scan_error_count=self._scan_error_count,
            dry_run=self._dry_run,
            force=self._force,
        )

    def _browse(self, action: Action) -> list[Effect]:
        entries = self._entries
        if action == Action.HELP:
            self._state = AppState.HELP
        elif action == Action.REFRESH:
            return self._begin_loading()
        elif action == Action.MOVE_UP:
            entries.move_up()
        elif action == Action.MOVE_DOWN:
            entries.move_down()
        elif action == Action.PAGE_UP:
            entries.page_up()
        elif action == Action.PAGE_DOWN:
            entries.page_down()
        elif action == Action.HOME:
            entries.home()
        elif action == Action.END:
            entries.end()
        elif action == Action.TOGGLE_SELECTION:
            entries.toggle()
        elif action == Action.SELECT_ALL:
            entries.select_all()
        elif action == Action.DESELECT_ALL:
            entries.clear_selection()
        elif action == Action.DELETE:
            if not entries.selected:
                self._status = "No directories selected. Use Space to select."
                return []
            if self._force:
                return self._begin_deletion()
            self._state = AppState.CONFIRMING_DELETION
        elif action == Action.CYCLE_SORT:
            key = entries.cycle_sort()
            self._status = f"Sorted by {key.display_name}"
        elif action == Action.REVERSE_SORT:
            reverse = entries.toggle_reverse()
            direction = "reversed" if reverse else "default"
            self._status = f"Sorted by {entries.sort_key.display_name} ({direction} order)"
        elif action == Action.OPEN_FOLDER:
            current = entries.current
            if current is not None and current.parent_path is not None:
                return [OpenFolder(current.parent_path)]
        return []

    def _begin_loading(self) -> list[Effect]:
        self._status = ""
        self._last_report = None
        self._state = AppState.LOADING
        return [RequestScan()]

    def _begin_deletion(self) -> list[Effect]:
        self._pending = tuple(self._entries.selected_entries())
        self._state = AppState.DELETING
        logger.info("Deleting %d selected directories", len(self._pending))
        return [RequestDeletion(entries=self._pending)]

    def _on_scan_complete(self, event: ScanComplete) -> list[Effect]:
        if self._state != AppState.LOADING:
            logger.debug("Ignoring scan result outside of loading state")
            return []

        self._entries.replace(event.entries)
        self._scan_error_count = event.error_count
        count = len(event.entries)

        if count == 0:
            self._status = "No .venv directories found."
        elif event.error_count:
            self._status = (
                f"Found {count} .venv directories, {event.error_count} could not be analyzed."
            )
        elif not self._status:
            self._status = f"Found {count} .venv directories."

        self._state = AppState.BROWSING
        return []

    def _on_scan_failed(self, event: ScanFailed) -> list[Effect]:
        if self._state != AppState.LOADING:
            logger.debug("Ignoring scan failure outside of loading state")
            return []
        self._error = event.message
        self._state = AppState.ERROR
        return []

    def _on_deletion_complete(self, event: DeletionComplete) -> list[Effect]:
        if self._state != AppState.DELETING:
            logger.debug("Ignoring deletion result outside of deleting state")
            return []

        report = event.report
        self._last_report = report
        self._status = deletion_status(report)
        self._pending = ()
        self._entries.clear_selection()
        self._entries.home()
        self._state = AppState.LOADING
        return [RequestScan()]

