"""Unit tests for logging setup."""

import logging
from collections.abc import Iterator

import pytest
from rich.logging import RichHandler
from venvcleaner.utils.log import configure_logging, level_for


@pytest.fixture
def restore_root_logger() -> Iterator[None]:
    """Put the root logger back the way it was after a test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestLevelFor:
    """Tests for level_for function."""

    @pytest.mark.parametrize(
        ("verbosity", "quiet", "expected"),
        [
            (0, False, logging.WARNING),
            (1, False, logging.INFO),
            (2, False, logging.DEBUG),
            (5, False, logging.DEBUG),
            (2, True, logging.ERROR),
        ],
    )
    def test_levels(self, verbosity: int, quiet: bool, expected: int) -> None:
        assert level_for(verbosity, quiet) == expected


@pytest.mark.usefixtures("restore_root_logger")
class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_installs_rich_handler(self) -> None:
        """A single RichHandler is attached to the root logger."""
        configure_logging(1)

        root = logging.getLogger()
        assert root.level == logging.INFO
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], RichHandler)

    def test_reconfigure_replaces_handler(self) -> None:
        """Calling twice does not stack handlers."""
        configure_logging(0)
        configure_logging(2)

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
