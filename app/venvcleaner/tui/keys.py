"""Keyboard input for the interactive screen.

Raw bytes from the terminal are decoded into Key values. A background
KeyReader thread feeds decoded keys to a callback, so the foreground
loop never blocks on stdin.
"""

import codecs
import logging
import os
import re
import select
import termios
import threading
import tty
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Key:
    """A single decoded key press.

    Attributes:
        name: Printable character ("q", "x") or a named key ("up", "enter").
        ctrl: Whether Ctrl was held (only for letters).
    """

    name: str
    ctrl: bool = False

    def __str__(self) -> str:
        return f"Ctrl+{self.name.upper()}" if self.ctrl else self.name


# CSI (ESC [), Linux console function keys (ESC [ [) and SS3 (ESC O)
_ESCAPE_RE = re.compile(r"\x1b(\[\[[A-E]|\[[0-9;]*[@-~]|O[A-Za-z])")
# Escape sequence cut off at the end of a read
_PARTIAL_ESCAPE_RE = re.compile(r"\x1b(?:\[\[?[0-9;]*|O)?\Z")

_ESCAPE_SEQUENCES: dict[str, str] = {
    "[A": "up",
    "[B": "down",
    "[C": "right",
    "[D": "left",
    "[H": "home",
    "[F": "end",
    "OA": "up",
    "OB": "down",
    "OC": "right",
    "OD": "left",
    "OH": "home",
    "OF": "end",
    "OP": "f1",
    "[[A": "f1",
    "[11~": "f1",
    "[1~": "home",
    "[7~": "home",
    "[4~": "end",
    "[8~": "end",
    "[3~": "delete",
    "[5~": "pageup",
    "[6~": "pagedown",
}

_CONTROL_CHARS: dict[str, str] = {
    "\r": "enter",
    "\n": "enter",
    "\t": "tab",
    "\x7f": "backspace",
    "\x08": "backspace",
    " ": "space",
}


def _decode(text: str, final: bool) -> tuple[list[Key], str]:
    keys: list[Key] = []
    i = 0
    while i < len(text):
        ch = text[i]

        if ch == "\x1b":
            match = _ESCAPE_RE.match(text, i)
            if match is None:
                if not final and _PARTIAL_ESCAPE_RE.match(text, i):
                    return keys, text[i:]
                keys.append(Key("escape"))
                i += 1
                continue
            name = _ESCAPE_SEQUENCES.get(match.group(1))
            if name is None:
                logger.debug("Ignoring unknown escape sequence %r", match.group(0))
            else:
                keys.append(Key(name))
            i = match.end()
            continue

        if ch in _CONTROL_CHARS:
            keys.append(Key(_CONTROL_CHARS[ch]))
        elif "\x01" <= ch <= "\x1a":
            keys.append(Key(chr(ord(ch) + ord("a") - 1), ctrl=True))
        elif ch.isprintable():
            keys.append(Key(ch))
        i += 1

    return keys, ""


def decode_keys(text: str) -> list[Key]:
    """Decode raw terminal input into key presses.

    Unknown escape sequences are dropped. A lone ESC is the escape key.

    Args:
        text: Characters read from the terminal.

    Returns:
        Keys in input order.
    """
    keys, _ = _decode(text, final=True)
    return keys


class KeyDecoder:
    """Decodes terminal input that arrives in arbitrary chunks.

    A multi-byte character or an escape sequence split across two reads
    is held back until the rest arrives. flush() gives up waiting, which
    turns a held-back lone ESC into the escape key.
    """

    def __init__(self) -> None:
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._pending = ""

    def feed(self, data: bytes) -> list[Key]:
        keys, self._pending = _decode(self._pending + self._utf8.decode(data), final=False)
        return keys

    def flush(self) -> list[Key]:
        keys, self._pending = _decode(self._pending, final=True)
        return keys


@contextmanager
def raw_terminal(fd: int) -> Iterator[None]:
    """Put a terminal into cbreak mode for the duration of the block.

    Echo and line buffering are disabled and XON/XOFF flow control is
    turned off so Ctrl+Q reaches the application. Signals stay enabled.

    Args:
        fd: File descriptor of the terminal.
    """
    old_settings = termios.tcgetattr(fd)
    try:
        tty.setcbreak(fd)
        attrs = termios.tcgetattr(fd)
        attrs[0] &= ~termios.IXON
        termios.tcsetattr(fd, termios.TCSADRAIN, attrs)
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)


class KeyReader(threading.Thread):
    """Reads key presses from a file descriptor on a daemon thread.

    Args:
        fd: File descriptor to read from (usually stdin).
        on_key: Called with every decoded key.
        poll_interval: Seconds between checks of the stop flag. Input
            held back by the decoder is flushed after one idle poll.
    """

    def __init__(
        self,
        fd: int,
        on_key: Callable[[Key], None],
        poll_interval: float = 0.1,
    ) -> None:
        super().__init__(name="venvcleaner-keys", daemon=True)
        self._fd = fd
        self._on_key = on_key
        self._poll_interval = poll_interval
        self._stop_event = threading.Event()

    def stop(self, timeout: float | None = None) -> None:
        """Ask the reader to exit and wait for it if it was started.

        Args:
            timeout: Maximum seconds to wait for the thread to finish.
        """
        self._stop_event.set()
        if self.is_alive():
            self.join(timeout)

    def run(self) -> None:
        decoder = KeyDecoder()
        while not self._stop_event.is_set():
            try:
                ready, _, _ = select.select([self._fd], [], [], self._poll_interval)
                data = os.read(self._fd, 64) if ready else None
            except OSError as e:
                logger.warning("Stopped reading keyboard input: %s", e)
                return
            if data is None:
                keys = decoder.flush()
            elif data:
                keys = decoder.feed(data)
            else:
                for key in decoder.flush():
                    self._on_key(key)
                return
            for key in keys:
                self._on_key(key)
