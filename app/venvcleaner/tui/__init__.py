"""Interactive full-screen mode.

This module exports the event bus, the state machine, the renderer
and the TuiMode loop that ties them together.
"""

from venvcleaner.tui.app import TuiMode
from venvcleaner.tui.events import (
    DeletionComplete,
    EventBus,
    Input,
    ScanComplete,
    ScanFailed,
    TaskScheduler,
    Tick,
)
from venvcleaner.tui.keys import Key, decode_keys
from venvcleaner.tui.state import (
    Action,
    AppSnapshot,
    AppState,
    EntrySet,
    OpenFolder,
    RequestDeletion,
    RequestScan,
    StateMachine,
)
from venvcleaner.tui.ui import Renderer, RichRenderer

__all__ = [
    "Action",
    "AppSnapshot",
    "AppState",
    "DeletionComplete",
    "EntrySet",
    "EventBus",
    "Input",
    "Key",
    "OpenFolder",
    "Renderer",
    "RequestDeletion",
    "RequestScan",
    "RichRenderer",
    "ScanComplete",
    "ScanFailed",
    "StateMachine",
    "TaskScheduler",
    "Tick",
    "TuiMode",
    "decode_keys",
]
