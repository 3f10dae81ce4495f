"""Interactive full-screen mode.

TuiMode wires the event bus, the background workers, the state
machine and the renderer together and runs the foreground loop.
"""

import logging
import sys
from collections.abc import Callable
from pathlib import Path

from rich.console import Console, RenderableType
from rich.live import Live

from venvcleaner.core.config import CleanerConfig
from venvcleaner.core.preferences import Preferences
from venvcleaner.core.theme import get_theme
from venvcleaner.tui.events import EventBus, Input, TaskScheduler
from venvcleaner.tui.keys import KeyReader, raw_terminal
from venvcleaner.tui.state import (
    Action,
    AppState,
    Effect,
    OpenFolder,
    RequestDeletion,
    RequestScan,
    StateMachine,
)
from venvcleaner.tui.ui import Renderer, RichRenderer, visible_rows_for
from venvcleaner.utils.shell import open_in_file_manager

logger = logging.getLogger(__name__)


class TuiMode:
    """Foreground loop of the interactive application.

    Args:
        config: Run configuration (root, recursion, force, dry-run).
        preferences: Presentation preferences; defaults if None.
        console: Console to draw on.
        renderer: Renderer for snapshots; RichRenderer if None.
        bus: Event bus; built from preferences if None.
        scheduler: Worker scheduler; built from config if None.
        opener: Opens a directory in the file manager.
    """

    def __init__(
        self,
        config: CleanerConfig,
        preferences: Preferences | None = None,
        *,
        console: Console | None = None,
        renderer: Renderer | None = None,
        bus: EventBus | None = None,
        scheduler: TaskScheduler | None = None,
        opener: Callable[[Path], None] = open_in_file_manager,
    ) -> None:
        prefs = preferences or Preferences()
        self._config = config
        self._console = console or Console(theme=get_theme())
        self._bus = bus or EventBus(tick_interval=prefs.tick_interval)
        self._scheduler = scheduler or TaskScheduler(
            self._bus,
            config.root,
            recursive=config.recursive,
            dry_run=config.dry_run,
        )
        self._machine = StateMachine(
            sort_key=prefs.default_sort,
            reverse=prefs.reverse_sort,
            force=config.force,
            dry_run=config.dry_run,
            visible_items=visible_rows_for(self._console.height),
        )
        self._renderer = renderer or RichRenderer(config.root, config.recursive)
        self._opener = opener

    @property
    def machine(self) -> StateMachine:
        return self._machine

    @property
    def bus(self) -> EventBus:
        return self._bus

    def start(self) -> None:
        """Enter the initial loading state and start the first scan."""
        self._execute(self._machine.start())

    def step(self, timeout: float | None = None) -> RenderableType:
        """Process every queued event, then build one frame.

        Args:
            timeout: Seconds to wait for the first event (None waits
                until the next tick).

        Returns:
            The frame for the resulting state.
        """
        for event in self._bus.drain(timeout):
            if self._machine.is_done:
                break
            self._execute(self._machine.handle(event))

        self._machine.set_visible_items(visible_rows_for(self._console.height))
        return self._renderer.render(self._machine.snapshot())

    def run(self) -> AppState:
        """Run until the user quits.

        Workers still in flight are abandoned; their results are never read.

        Returns:
            The final state (always QUIT).
        """
        fd = sys.stdin.fileno()
        reader = KeyReader(fd, lambda key: self._bus.publish(Input(key)))

        try:
            with (
                raw_terminal(fd),
                Live(
                    self._renderer.render(self._machine.snapshot()),
                    console=self._console,
                    screen=True,
                    auto_refresh=False,
                    transient=True,
                ) as live,
            ):
                reader.start()
                self.start()
                while not self._machine.is_done:
                    live.update(self.step(), refresh=True)
        except KeyboardInterrupt:
            logger.debug("Interrupted, quitting")
            self._machine.dispatch(Action.QUIT)
        finally:
            reader.stop(timeout=1.0)

        return self._machine.state

    def _execute(self, effects: list[Effect]) -> None:
        for effect in effects:
            if isinstance(effect, RequestScan):
                if not self._scheduler.start_scan():
                    logger.debug("Scan already running, waiting for its result")
            elif isinstance(effect, RequestDeletion):
                if not self._scheduler.start_deletion(effect.entries):
                    logger.warning("Deletion already running, request ignored")
            elif isinstance(effect, OpenFolder):
                self._open(effect.path)

    def _open(self, path: Path) -> None:
        try:
            self._opener(path)
        except OSError as e:
            logger.warning("Failed to open %s: %s", path, e)
            self._machine.set_status(f"Failed to open folder: {e}")
            return
        self._machine.set_status(f"Opened {path}")
