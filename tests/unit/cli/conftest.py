"""Fixtures for CLI command tests."""

from collections.abc import Iterator
from unittest.mock import MagicMock, patch

import pytest
from venvcleaner.utils.formatting import console, err_console


@pytest.fixture(autouse=True)
def wide_consoles(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep Rich from wrapping long temporary paths in command output."""
    monkeypatch.setattr(console, "width", 240)
    monkeypatch.setattr(err_console, "width", 240)


@pytest.fixture(autouse=True)
def logging_setup() -> Iterator[MagicMock]:
    """Keep commands from reconfiguring the root logger."""
    with patch("venvcleaner.cli.main.configure_logging") as mock_configure:
        yield mock_configure
