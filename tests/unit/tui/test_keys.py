"""Unit tests for keyboard decoding and the key reader thread."""

import os
import threading
from collections.abc import Iterator

import pytest
from venvcleaner.tui.keys import Key, KeyDecoder, KeyReader, decode_keys


class TestKey:
    """Tests for the Key value type."""

    def test_str_plain(self) -> None:
        assert str(Key("q")) == "q"

    def test_str_ctrl(self) -> None:
        assert str(Key("a", ctrl=True)) == "Ctrl+A"

    def test_equality(self) -> None:
        assert Key("up") == Key("up")
        assert Key("a") != Key("a", ctrl=True)


class TestDecodeKeys:
    """Tests for decode_keys function."""

    def test_printable_characters(self) -> None:
        assert decode_keys("qS") == [Key("q"), Key("S")]

    @pytest.mark.parametrize(
        ("raw", "name"),
        [
            ("\x1b[A", "up"),
            ("\x1b[B", "down"),
            ("\x1bOA", "up"),
            ("\x1b[H", "home"),
            ("\x1b[F", "end"),
            ("\x1b[1~", "home"),
            ("\x1b[4~", "end"),
            ("\x1b[5~", "pageup"),
            ("\x1b[6~", "pagedown"),
            ("\x1b[3~", "delete"),
            ("\x1bOP", "f1"),
            ("\x1b[[A", "f1"),
            ("\x1b[11~", "f1"),
        ],
    )
    def test_escape_sequences(self, raw: str, name: str) -> None:
        assert decode_keys(raw) == [Key(name)]

    @pytest.mark.parametrize(
        ("raw", "name"),
        [("\r", "enter"), ("\n", "enter"), (" ", "space"), ("\t", "tab"), ("\x7f", "backspace")],
    )
    def test_control_characters(self, raw: str, name: str) -> None:
        assert decode_keys(raw) == [Key(name)]

    def test_ctrl_letters(self) -> None:
        """Ctrl+A, Ctrl+D and Ctrl+Q decode as ctrl letters."""
        assert decode_keys("\x01\x04\x11") == [
            Key("a", ctrl=True),
            Key("d", ctrl=True),
            Key("q", ctrl=True),
        ]

    def test_lone_escape(self) -> None:
        assert decode_keys("\x1b") == [Key("escape")]

    def test_escape_followed_by_letter(self) -> None:
        """ESC not starting a sequence is the escape key."""
        assert decode_keys("\x1bq") == [Key("escape"), Key("q")]

    def test_unknown_sequence_dropped(self) -> None:
        assert decode_keys("\x1b[99~x") == [Key("x")]

    def test_mixed_input(self) -> None:
        """Several keys in one read keep their order."""
        assert decode_keys("\x1b[Bx y") == [Key("down"), Key("x"), Key("space"), Key("y")]


class TestKeyDecoder:
    """Tests for KeyDecoder across chunk boundaries."""

    def test_split_escape_sequence(self) -> None:
        decoder = KeyDecoder()
        assert decoder.feed(b"x\x1b[") == [Key("x")]
        assert decoder.feed(b"B") == [Key("down")]

    def test_split_numeric_sequence(self) -> None:
        decoder = KeyDecoder()
        assert decoder.feed(b"\x1b[5") == []
        assert decoder.feed(b"~") == [Key("pageup")]

    def test_split_utf8_character(self) -> None:
        decoder = KeyDecoder()
        encoded = "\u00e4".encode()
        assert decoder.feed(encoded[:1]) == []
        assert decoder.feed(encoded[1:]) == [Key("\u00e4")]

    def test_escape_then_letter_in_one_read(self) -> None:
        assert KeyDecoder().feed(b"\x1bq") == [Key("escape"), Key("q")]

    def test_flush_releases_lone_escape(self) -> None:
        decoder = KeyDecoder()
        assert decoder.feed(b"\x1b") == []
        assert decoder.flush() == [Key("escape")]
        assert decoder.flush() == []

    def test_flush_splits_unfinished_sequence(self) -> None:
        decoder = KeyDecoder()
        decoder.feed(b"\x1b[")
        assert decoder.flush() == [Key("escape"), Key("[")]


class TestKeyReader:
    """Tests for KeyReader thread."""

    @pytest.fixture
    def pipe(self) -> Iterator[tuple[int, int]]:
        read_fd, write_fd = os.pipe()
        yield read_fd, write_fd
        for fd in (read_fd, write_fd):
            try:
                os.close(fd)
            except OSError:
                pass

    def test_reads_until_eof(self, pipe: tuple[int, int]) -> None:
        """Decoded keys are delivered and EOF ends the thread."""
        read_fd, write_fd = pipe
        received: list[Key] = []
        reader = KeyReader(read_fd, received.append, poll_interval=0.05)

        os.write(write_fd, b"q\x1b[A")
        os.close(write_fd)
        reader.start()
        reader.join(timeout=5)

        assert not reader.is_alive()
        assert received == [Key("q"), Key("up")]

    def test_stop(self, pipe: tuple[int, int]) -> None:
        """stop() ends an idle reader."""
        read_fd, _ = pipe
        reader = KeyReader(read_fd, lambda key: None, poll_interval=0.05)
        reader.start()

        reader.stop(timeout=5)

        assert not reader.is_alive()
        assert reader.daemon

    def test_stop_before_start(self, pipe: tuple[int, int]) -> None:
        reader = KeyReader(pipe[0], lambda key: None)
        reader.stop(timeout=1)
        assert not reader.is_alive()

    def test_lone_escape_after_idle_poll(self, pipe: tuple[int, int]) -> None:
        """A held-back ESC is delivered once no more input follows."""
        read_fd, write_fd = pipe
        received: list[Key] = []
        delivered = threading.Event()

        def on_key(key: Key) -> None:
            received.append(key)
            delivered.set()

        reader = KeyReader(read_fd, on_key, poll_interval=0.05)
        reader.start()
        os.write(write_fd, b"\x1b")

        assert delivered.wait(timeout=5)
        reader.stop(timeout=5)
        assert received == [Key("escape")]
