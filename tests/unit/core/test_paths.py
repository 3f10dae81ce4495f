"""Unit tests for XDG path management."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest
from venvcleaner.core.errors import VenvIoError
from venvcleaner.core.paths import (
    APP_NAME,
    ensure_config_dir,
    get_config_dir,
    get_preferences_path,
    get_user_theme_path,
)


class TestGetConfigDir:
    """Tests for get_config_dir function."""

    def test_default_config_dir(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """get_config_dir returns default path when XDG_CONFIG_HOME not set."""
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)

        assert get_config_dir() == Path.home() / ".config" / APP_NAME

    def test_respects_xdg_config_home(self, tmp_path: Path) -> None:
        """get_config_dir respects XDG_CONFIG_HOME environment variable."""
        with patch.dict(os.environ, {"XDG_CONFIG_HOME": str(tmp_path)}):
            result = get_config_dir()

        assert result == tmp_path / APP_NAME


class TestFilePaths:
    """Tests for file path helpers."""

    def test_preferences_and_theme_live_in_config_dir(self, tmp_path: Path) -> None:
        """Both files are inside the config directory."""
        with patch.dict(os.environ, {"XDG_CONFIG_HOME": str(tmp_path)}):
            assert get_preferences_path() == tmp_path / APP_NAME / "config.toml"
            assert get_user_theme_path() == tmp_path / APP_NAME / "theme.toml"


class TestEnsureConfigDir:
    """Tests for ensure_config_dir function."""

    def test_creates_directory(self, tmp_path: Path) -> None:
        """The directory is created when missing."""
        with patch.dict(os.environ, {"XDG_CONFIG_HOME": str(tmp_path / "cfg")}):
            path = ensure_config_dir()

        assert path.is_dir()

    def test_permission_error(self, tmp_path: Path) -> None:
        """Creation failures are reported as VenvIoError."""
        with (
            patch.dict(os.environ, {"XDG_CONFIG_HOME": str(tmp_path)}),
            patch.object(Path, "mkdir", side_effect=PermissionError("denied")),
            pytest.raises(VenvIoError, match="Permission denied"),
        ):
            ensure_config_dir()
