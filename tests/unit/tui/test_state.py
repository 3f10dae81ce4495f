"""Unit tests for the interactive state machine."""

from collections.abc import Callable
from pathlib import Path

import pytest
from venvcleaner.catalog.models import SortKey, VenvInfo
from venvcleaner.catalog.operator import DeletionOutcome, DeletionReport
from venvcleaner.core.errors import PermissionDeniedError
from venvcleaner.tui.events import DeletionComplete, Input, ScanComplete, ScanFailed, Tick
from venvcleaner.tui.keys import Key
from venvcleaner.tui.state import (
    Action,
    AppState,
    EntrySet,
    OpenFolder,
    RequestDeletion,
    RequestScan,
    StateMachine,
    action_for,
    deletion_status,
)

InfoFactory = Callable[..., VenvInfo]


@pytest.fixture
def entries(make_info: InfoFactory) -> list[VenvInfo]:
    """Three records whose size order differs from their path order."""
    return [
        make_info("/w/b/.venv", size=300, age_days=5),
        make_info("/w/a/.venv", size=100, age_days=50),
        make_info("/w/c/.venv", size=200, age_days=120),
    ]


def press(machine: StateMachine, name: str, ctrl: bool = False) -> list[object]:
    return list(machine.handle(Input(Key(name, ctrl=ctrl))))


def browsing(entries: list[VenvInfo], **kwargs: object) -> StateMachine:
    machine = StateMachine(**kwargs)  # type: ignore[arg-type]
    machine.start()
    machine.handle(ScanComplete(entries=tuple(entries)))
    return machine


class TestActionFor:
    """Tests for key to action translation."""

    @pytest.mark.parametrize("state", list(AppState))
    def test_ctrl_q_quits_everywhere(self, state: AppState) -> None:
        assert action_for(state, Key("q", ctrl=True)) == Action.QUIT

    def test_deleting_ignores_other_keys(self) -> None:
        for name in ("q", "escape", "y", "enter", "x"):
            assert action_for(AppState.DELETING, Key(name)) is None

    def test_loading_only_quits(self) -> None:
        assert action_for(AppState.LOADING, Key("q")) == Action.QUIT
        assert action_for(AppState.LOADING, Key("escape")) == Action.QUIT
        assert action_for(AppState.LOADING, Key("x")) is None

    def test_browsing_keys(self) -> None:
        assert action_for(AppState.BROWSING, Key("space")) == Action.TOGGLE_SELECTION
        assert action_for(AppState.BROWSING, Key("delete")) == Action.DELETE
        assert action_for(AppState.BROWSING, Key("a", ctrl=True)) == Action.SELECT_ALL
        assert action_for(AppState.BROWSING, Key("d", ctrl=True)) == Action.DESELECT_ALL
        assert action_for(AppState.BROWSING, Key("S")) == Action.REVERSE_SORT
        assert action_for(AppState.BROWSING, Key("z")) is None

    def test_help_any_key_dismisses(self) -> None:
        assert action_for(AppState.HELP, Key("x")) == Action.DISMISS
        assert action_for(AppState.HELP, Key("q")) == Action.QUIT

    def test_error_keys(self) -> None:
        assert action_for(AppState.ERROR, Key("enter")) == Action.ACKNOWLEDGE
        assert action_for(AppState.ERROR, Key("r")) == Action.REFRESH


class TestEntrySet:
    """Tests for EntrySet ordering, selection and navigation."""

    def test_replace_sorts_and_resets(self, entries: list[VenvInfo]) -> None:
        items = EntrySet()
        items.replace(entries)
        items.toggle(1)
        items.move_down()

        items.replace(entries)

        assert [str(e.path) for e in items.entries] == ["/w/a/.venv", "/w/b/.venv", "/w/c/.venv"]
        assert items.selected == frozenset()
        assert items.cursor == 0

    def test_resort_keeps_selected_records(self, entries: list[VenvInfo]) -> None:
        """Selection follows the records, not the row numbers."""
        items = EntrySet()
        items.replace(entries)
        items.toggle(0)  # /w/a
        items.move_down()  # cursor on /w/b

        items.set_sort(SortKey.SIZE)

        assert [str(e.path) for e in items.selected_entries()] == ["/w/a/.venv"]
        assert items.current is not None
        assert str(items.current.path) == "/w/b/.venv"

    def test_cycle_and_reverse(self, entries: list[VenvInfo]) -> None:
        items = EntrySet()
        items.replace(entries)

        assert items.cycle_sort() == SortKey.SIZE
        assert [e.size_bytes for e in items.entries] == [300, 200, 100]
        assert items.toggle_reverse() is True
        assert [e.size_bytes for e in items.entries] == [100, 200, 300]

    def test_toggle_out_of_range(self, entries: list[VenvInfo]) -> None:
        items = EntrySet()
        items.replace(entries)
        with pytest.raises(IndexError):
            items.toggle(3)

    def test_toggle_empty_is_noop(self) -> None:
        items = EntrySet()
        items.toggle()
        assert items.selected == frozenset()

    def test_select_all_and_clear(self, entries: list[VenvInfo]) -> None:
        items = EntrySet()
        items.replace(entries)
        items.select_all()
        assert items.selected == frozenset({0, 1, 2})
        items.clear_selection()
        assert items.selected == frozenset()

    def test_navigation_bounds(self, entries: list[VenvInfo]) -> None:
        items = EntrySet()
        items.replace(entries)

        items.move_up()
        assert items.cursor == 0
        items.end()
        assert items.cursor == 2
        items.move_down()
        assert items.cursor == 2
        items.home()
        assert items.cursor == 0

    def test_scroll_window_follows_cursor(self, make_info: InfoFactory) -> None:
        items = EntrySet(visible_items=3)
        items.replace(make_info(f"/w/p{i:02d}/.venv") for i in range(10))

        items.page_down()
        assert items.cursor == 2
        assert items.visible_range() == (0, 3)

        items.move_down()
        assert items.cursor == 3
        assert items.visible_range() == (1, 4)

        items.end()
        assert items.visible_range() == (7, 10)

        items.page_up()
        assert items.cursor == 7
        items.home()
        assert items.visible_range() == (0, 3)

    def test_cursor_visible_after_resize(self, make_info: InfoFactory) -> None:
        items = EntrySet(visible_items=10)
        items.replace(make_info(f"/w/p{i:02d}/.venv") for i in range(10))
        items.end()

        items.set_visible_items(4)

        start, end = items.visible_range()
        assert start <= items.cursor < end


class TestStateMachineLoading:
    """Tests for the loading state."""

    def test_start_requests_scan(self) -> None:
        machine = StateMachine()
        assert machine.state == AppState.LOADING
        assert machine.start() == [RequestScan()]

    def test_scan_complete(self, entries: list[VenvInfo]) -> None:
        machine = browsing(entries)
        assert machine.state == AppState.BROWSING
        assert len(machine.entries) == 3
        assert machine.status == "Found 3 .venv directories."

    def test_scan_complete_with_errors(self, entries: list[VenvInfo]) -> None:
        machine = StateMachine()
        machine.handle(ScanComplete(entries=tuple(entries), error_count=2))
        assert machine.status == "Found 3 .venv directories, 2 could not be analyzed."
        assert machine.snapshot().scan_error_count == 2

    def test_empty_scan_is_informational(self) -> None:
        machine = StateMachine()
        machine.handle(ScanComplete(entries=()))
        assert machine.state == AppState.BROWSING
        assert machine.status == "No .venv directories found."

    def test_scan_failed(self) -> None:
        machine = StateMachine()
        machine.handle(ScanFailed("IO error: boom"))
        assert machine.state == AppState.ERROR
        assert machine.error == "IO error: boom"

    def test_initial_sort_from_preferences(self, entries: list[VenvInfo]) -> None:
        machine = browsing(entries, sort_key=SortKey.SIZE, reverse=True)
        assert [e.size_bytes for e in machine.entries.entries] == [100, 200, 300]

    def test_tick_advances_phase(self) -> None:
        machine = StateMachine()
        for _ in range(5):
            machine.handle(Tick())
        assert machine.snapshot().loading_phase == 1

    def test_late_scan_result_ignored(self, entries: list[VenvInfo]) -> None:
        """A scan result outside loading does not replace the list."""
        machine = browsing(entries)
        press(machine, "space")

        machine.handle(ScanComplete(entries=()))

        assert len(machine.entries) == 3
        assert machine.entries.selected == frozenset({0})


class TestStateMachineBrowsing:
    """Tests for browsing actions."""

    def test_delete_without_selection(self, entries: list[VenvInfo]) -> None:
        machine = browsing(entries)
        assert press(machine, "x") == []
        assert machine.state == AppState.BROWSING
        assert machine.status == "No directories selected. Use Space to select."

    def test_delete_asks_for_confirmation(self, entries: list[VenvInfo]) -> None:
        machine = browsing(entries)
        press(machine, "space")
        assert press(machine, "x") == []
        assert machine.state == AppState.CONFIRMING_DELETION

    def test_cancel_keeps_selection(self, entries: list[VenvInfo]) -> None:
        machine = browsing(entries)
        press(machine, "space")
        press(machine, "x")
        press(machine, "n")
        assert machine.state == AppState.BROWSING
        assert machine.entries.selected == frozenset({0})

    def test_confirm_starts_deletion(self, entries: list[VenvInfo]) -> None:
        machine = browsing(entries)
        press(machine, "space")
        press(machine, "down")
        press(machine, "space")
        press(machine, "x")

        effects = press(machine, "y")

        assert machine.state == AppState.DELETING
        assert effects == [RequestDeletion(entries=tuple(machine.entries.entries[:2]))]
        assert machine.snapshot().pending == tuple(machine.entries.entries[:2])

    def test_force_skips_confirmation(self, entries: list[VenvInfo]) -> None:
        machine = browsing(entries, force=True)
        press(machine, "a", ctrl=True)
        effects = press(machine, "x")
        assert machine.state == AppState.DELETING
        assert len(effects) == 1
        assert isinstance(effects[0], RequestDeletion)
        assert len(effects[0].entries) == 3

    def test_sort_status(self, entries: list[VenvInfo]) -> None:
        machine = browsing(entries)
        press(machine, "s")
        assert machine.status == "Sorted by Size"
        press(machine, "S")
        assert machine.status == "Sorted by Size (reversed order)"
        press(machine, "S")
        assert machine.status == "Sorted by Size (default order)"

    def test_open_folder(self, entries: list[VenvInfo]) -> None:
        machine = browsing(entries)
        assert press(machine, "o") == [OpenFolder(Path("/w/a"))]

    def test_open_folder_empty_list(self) -> None:
        machine = StateMachine()
        machine.handle(ScanComplete(entries=()))
        assert press(machine, "o") == []

    def test_refresh(self, entries: list[VenvInfo]) -> None:
        machine = browsing(entries)
        assert press(machine, "r") == [RequestScan()]
        assert machine.state == AppState.LOADING
        assert machine.status == ""

    def test_help_round_trip(self, entries: list[VenvInfo]) -> None:
        machine = browsing(entries)
        press(machine, "h")
        assert machine.state == AppState.HELP
        press(machine, "j")
        assert machine.state == AppState.BROWSING

    def test_quit(self, entries: list[VenvInfo]) -> None:
        machine = browsing(entries)
        press(machine, "q")
        assert machine.is_done


class TestStateMachineDeleting:
    """Tests for the deleting state and its completion."""

    def _deleting(self, entries: list[VenvInfo]) -> StateMachine:
        machine = browsing(entries, force=True)
        press(machine, "space")
        press(machine, "x")
        return machine

    def test_only_ctrl_q_accepted(self, entries: list[VenvInfo]) -> None:
        machine = self._deleting(entries)
        for name in ("q", "escape", "y", "n", "r"):
            assert press(machine, name) == []
            assert machine.state == AppState.DELETING

        press(machine, "q", ctrl=True)
        assert machine.is_done

    def test_completion_rescans(self, entries: list[VenvInfo]) -> None:
        machine = self._deleting(entries)
        target = machine.entries.entries[0]
        report = DeletionReport(outcomes=(DeletionOutcome(entry=target),))

        effects = machine.handle(DeletionComplete(report))

        assert effects == [RequestScan()]
        assert machine.state == AppState.LOADING
        assert machine.entries.selected == frozenset()
        assert machine.snapshot().pending == ()
        assert machine.snapshot().last_report is report
        assert machine.status.startswith("Successfully deleted 1 directories")

    def test_status_survives_rescan(self, entries: list[VenvInfo]) -> None:
        """The deletion message stays visible after the refreshed list arrives."""
        machine = self._deleting(entries)
        report = DeletionReport(outcomes=(DeletionOutcome(entry=machine.entries.entries[0]),))
        machine.handle(DeletionComplete(report))

        machine.handle(ScanComplete(entries=tuple(entries[1:])))

        assert machine.state == AppState.BROWSING
        assert machine.status.startswith("Successfully deleted")

    def test_failures_kept_until_refresh(self, entries: list[VenvInfo]) -> None:
        """Failed outcomes stay on screen after the rescan, a manual refresh drops them."""
        machine = self._deleting(entries)
        target = machine.entries.entries[0]
        report = DeletionReport(
            outcomes=(
                DeletionOutcome(entry=target, error=PermissionDeniedError(str(target.path))),
            )
        )
        machine.handle(DeletionComplete(report))
        machine.handle(ScanComplete(entries=tuple(entries)))

        snapshot = machine.snapshot()
        assert snapshot.last_report is report
        assert snapshot.last_report.failures[0].entry == target
        assert "1 failed" in machine.status

        press(machine, "r")

        assert machine.snapshot().last_report is None

    def test_stale_indices_never_survive_rescan(
        self, entries: list[VenvInfo], make_info: InfoFactory
    ) -> None:
        """Selection is empty after any replacement, whatever the new length."""
        machine = browsing(entries)
        press(machine, "a", ctrl=True)
        press(machine, "r")

        machine.handle(ScanComplete(entries=(make_info("/w/z/.venv"),)))

        assert machine.entries.selected == frozenset()
        assert all(i < len(machine.entries) for i in machine.entries.selected)


class TestStateMachineQuit:
    """Tests for quitting."""

    def test_events_ignored_after_quit(self, entries: list[VenvInfo]) -> None:
        machine = StateMachine()
        machine.start()
        press(machine, "q")

        assert machine.handle(ScanComplete(entries=tuple(entries))) == []
        assert len(machine.entries) == 0
        assert machine.state == AppState.QUIT

    def test_error_state(self) -> None:
        machine = StateMachine()
        machine.handle(ScanFailed("boom"))

        press(machine, "enter")

        assert machine.state == AppState.BROWSING
        assert machine.error == ""


class TestDeletionStatus:
    """Tests for deletion_status messages."""

    def test_success(self, make_info: InfoFactory) -> None:
        report = DeletionReport(outcomes=(DeletionOutcome(entry=make_info("/a/.venv", size=2048)),))
        assert deletion_status(report) == (
            "Successfully deleted 1 directories (2.00 KB freed). List will refresh automatically."
        )

    def test_partial_failure(self, make_info: InfoFactory) -> None:
        report = DeletionReport(
            outcomes=(
                DeletionOutcome(entry=make_info("/a/.venv", size=1024)),
                DeletionOutcome(
                    entry=make_info("/b/.venv"), error=PermissionDeniedError("/b/.venv")
                ),
            )
        )
        assert deletion_status(report) == (
            "Deleted 1 directories (1.00 KB freed), 1 failed. "
            "Check permissions for failed items."
        )

    def test_dry_run(self, make_info: InfoFactory) -> None:
        entry = make_info("/a/.venv", size=10)
        report = DeletionReport(
            outcomes=(DeletionOutcome(entry=entry, simulated=True),), simulated=True
        )
        assert deletion_status(report) == (
            "Dry run: would delete 1 directories (10 bytes). Nothing was removed."
        )
