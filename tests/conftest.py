"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import os
import time
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from venvcleaner.catalog.models import VenvInfo

VenvFactory = Callable[..., Path]


@pytest.fixture(autouse=True)
def isolated_config_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG_CONFIG_HOME at a temporary directory for every test."""
    config_home = tmp_path / "xdg-config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    return config_home


@pytest.fixture
def make_venv() -> VenvFactory:
    """Factory creating a fake virtual environment on disk.

    The created .venv has bin/, lib/ and pyvenv.cfg (zero bytes) plus
    one payload file per entry in ``files`` with exactly that many bytes.
    ``age_days`` sets the directory's modification time.
    """

    def _make(
        project: Path,
        files: tuple[int, ...] = (),
        age_days: float | None = None,
    ) -> Path:
        venv = project / ".venv"
        (venv / "bin").mkdir(parents=True)
        (venv / "lib").mkdir()
        (venv / "pyvenv.cfg").write_bytes(b"")
        for index, size in enumerate(files):
            (venv / "lib" / f"payload_{index}.bin").write_bytes(b"x" * size)
        if age_days is not None:
            stamp = time.time() - age_days * 86400
            os.utime(venv, (stamp, stamp))
        return venv

    return _make


@pytest.fixture
def make_info() -> Callable[..., VenvInfo]:
    """Factory creating VenvInfo records without touching the disk."""
    now = datetime.now(UTC)

    def _make(
        path: str,
        size: int = 0,
        age_days: float = 0,
        created_days: float | None = None,
    ) -> VenvInfo:
        created_age = age_days if created_days is None else created_days
        return VenvInfo(
            path=Path(path),
            size_bytes=size,
            created=now - timedelta(days=created_age),
            last_modified=now - timedelta(days=age_days),
        )

    return _make
