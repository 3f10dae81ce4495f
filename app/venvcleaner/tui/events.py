"""Event bus and background workers for the interactive screen.

The foreground loop is the only consumer of the bus. Scans and
deletions run on short-lived daemon threads that each publish exactly
one terminal event and exit; they never touch UI state.
"""

import logging
import queue
import threading
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from venvcleaner.catalog.models import VenvInfo
from venvcleaner.catalog.operator import DeletionOutcome, DeletionReport, VenvOperator
from venvcleaner.catalog.scanner import VenvScanner
from venvcleaner.core.errors import NoVenvFoundError, VenvCleanerError, VenvIoError
from venvcleaner.tui.keys import Key

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ScanComplete:
    """A scan finished; entries are in discovery order."""

    entries: tuple[VenvInfo, ...]
    error_count: int = 0


@dataclass(frozen=True, slots=True)
class ScanFailed:
    """A scan could not run at all."""

    message: str


@dataclass(frozen=True, slots=True)
class DeletionComplete:
    """A deletion batch finished."""

    report: DeletionReport


@dataclass(frozen=True, slots=True)
class Tick:
    """Periodic heartbeat for animations."""


@dataclass(frozen=True, slots=True)
class Input:
    """A key press from the user."""

    key: Key


Event = ScanComplete | ScanFailed | DeletionComplete | Tick | Input


class EventBus:
    """Thread-safe, single-consumer event queue.

    Ticks are not queued: drain() synthesizes one whenever the tick
    interval has elapsed since the previous one.

    Args:
        tick_interval: Seconds between ticks.
        clock: Monotonic time source.
    """

    def __init__(
        self,
        tick_interval: float = 0.25,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._queue: queue.Queue[Event] = queue.Queue()
        self._tick_interval = tick_interval
        self._clock = clock
        self._last_tick = clock()

    @property
    def tick_interval(self) -> float:
        """Seconds between ticks."""
        return self._tick_interval

    def publish(self, event: Event) -> None:
        """Queue an event. Safe to call from any thread."""
        self._queue.put(event)

    def time_until_tick(self) -> float:
        """Seconds until the next tick is due (never negative)."""
        return max(0.0, self._last_tick + self._tick_interval - self._clock())

    def drain(self, timeout: float | None = None) -> list[Event]:
        """Take every queued event.

        Args:
            timeout: Seconds to wait for the first event. None waits
                until the next tick is due; 0 does not wait.

        Returns:
            Queued events in publish order, followed by a Tick if one is due.
        """
        if timeout is None:
            timeout = self.time_until_tick()

        events: list[Event] = []
        try:
            if timeout > 0:
                events.append(self._queue.get(timeout=timeout))
            else:
                events.append(self._queue.get_nowait())
        except queue.Empty:
            pass

        while True:
            try:
                events.append(self._queue.get_nowait())
            except queue.Empty:
                break

        now = self._clock()
        if now - self._last_tick >= self._tick_interval:
            self._last_tick = now
            events.append(Tick())

        return events


def run_scan(root: Path, recursive: bool) -> ScanComplete | ScanFailed:
    """Scan for .venv directories and wrap the result as an event.

    Finding nothing is not a failure: it yields an empty ScanComplete.
    """
    try:
        report = VenvScanner(root, recursive=recursive).scan()
    except NoVenvFoundError:
        return ScanComplete(entries=())
    except VenvCleanerError as e:
        logger.warning("Scan failed: %s", e)
        return ScanFailed(message=str(e))
    except Exception as e:
        logger.exception("Unexpected error while scanning %s", root)
        return ScanFailed(message=f"Unexpected error: {e}")
    return ScanComplete(entries=report.entries, error_count=report.error_count)


def run_deletion(entries: Sequence[VenvInfo], dry_run: bool) -> DeletionComplete:
    """Delete entries and wrap the report as an event.

    An unexpected failure marks every entry of the batch as failed.
    """
    try:
        report = VenvOperator(dry_run=dry_run).delete_many(entries)
    except Exception as e:
        logger.exception("Unexpected error while deleting")
        error = VenvIoError(f"Unexpected error: {e}")
        report = DeletionReport(
            outcomes=tuple(
                DeletionOutcome(entry=entry, error=error, simulated=dry_run) for entry in entries
            ),
            simulated=dry_run,
        )
    return DeletionComplete(report=report)


class TaskScheduler:
    """Starts scan and deletion workers that report through an EventBus.

    At most one scan and one deletion are in flight at a time. Running
    workers cannot be cancelled.

    Args:
        bus: Bus that receives the terminal event of every worker.
        root: Directory to scan.
        recursive: Whether scans walk the whole tree.
        dry_run: Whether deletions are simulated.
    """

    def __init__(
        self,
        bus: EventBus,
        root: Path,
        *,
        recursive: bool = True,
        dry_run: bool = False,
    ) -> None:
        self._bus = bus
        self._root = Path(root)
        self._recursive = recursive
        self._dry_run = dry_run
        self._lock = threading.Lock()
        self._scan_running = False
        self._deletion_running = False

    @property
    def scan_in_flight(self) -> bool:
        """Whether a scan worker has not yet reported."""
        with self._lock:
            return self._scan_running

    @property
    def deletion_in_flight(self) -> bool:
        """Whether a deletion worker has not yet reported."""
        with self._lock:
            return self._deletion_running

    def start_scan(self) -> bool:
        """Start a scan worker.

        Returns:
            False if a scan is already in flight.
        """
        with self._lock:
            if self._scan_running:
                logger.debug("Scan already in flight, not starting another")
                return False
            self._scan_running = True

        worker = threading.Thread(
            target=self._scan_worker,
            args=(Path(self._root), self._recursive),
            name="venvcleaner-scan",
            daemon=True,
        )
        worker.start()
        return True

    def start_deletion(self, entries: Sequence[VenvInfo]) -> bool:
        """Start a deletion worker for the given entries.

        Returns:
            False if a deletion is already in flight.
        """
        with self._lock:
            if self._deletion_running:
                logger.debug("Deletion already in flight, not starting another")
                return False
            self._deletion_running = True

        worker = threading.Thread(
            target=self._deletion_worker,
            args=(tuple(entries), self._dry_run),
            name="venvcleaner-delete",
            daemon=True,
        )
        worker.start()
        return True

    def _scan_worker(self, root: Path, recursive: bool) -> None:
        event = run_scan(root, recursive)
        with self._lock:
            self._scan_running = False
        self._bus.publish(event)

    def _deletion_worker(self, entries: tuple[VenvInfo, ...], dry_run: bool) -> None:
        event = run_deletion(entries, dry_run)
        with self._lock:
            self._deletion_running = False
        self._bus.publish(event)
