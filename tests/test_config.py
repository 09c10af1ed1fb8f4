"""Tests for Settings loading and validation."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from statusgate.config import Settings, get_settings, reset_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "STATUSGATE_PORT",
        "STATUSGATE_MAX_FILE_MB",
        "STATUSGATE_MAX_FILES",
        "STATUSGATE_ALLOWED_MIME_PREFIXES",
        "STATUSGATE_MANAGER_PASSWORD",
        "STATUSGATE_API_ID",
        "STATUSGATE_API_HASH",
        "STATUSGATE_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


class TestSettingsDefaults:
    """Tests for default values and derived paths."""

    def test_defaults(self, tmp_path: Path) -> None:
        settings = Settings(data_dir=tmp_path)

        assert settings.port == 3000
        assert settings.max_files == 15
        assert settings.max_file_mb == 16
        assert settings.max_file_bytes == 16 * 1024 * 1024
        assert settings.allowed_mime_prefixes == ["image/", "video/"]
        assert settings.broadcast_target == "me"
        assert settings.manager_password == ""

    def test_derived_paths(self, tmp_path: Path) -> None:
        settings = Settings(data_dir=tmp_path)

        assert settings.config_path == tmp_path / "config.json"
        assert settings.session_path.parent == tmp_path / "session"


class TestSettingsFromEnv:
    """Tests for environment variable parsing."""

    def test_port_and_limits(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STATUSGATE_PORT", "8080")
        monkeypatch.setenv("STATUSGATE_MAX_FILE_MB", "4")
        monkeypatch.setenv("STATUSGATE_MAX_FILES", "3")

        settings = Settings(data_dir=tmp_path)

        assert settings.port == 8080
        assert settings.max_file_bytes == 4 * 1024 * 1024
        assert settings.max_files == 3

    def test_mime_prefixes_comma_separated(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("STATUSGATE_ALLOWED_MIME_PREFIXES", "image/, video/mp4 ,")

        settings = Settings(data_dir=tmp_path)

        assert settings.allowed_mime_prefixes == ["image/", "video/mp4"]

    def test_log_level_is_normalized(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("STATUSGATE_LOG_LEVEL", "debug")

        assert Settings(data_dir=tmp_path).log_level == "DEBUG"

    def test_invalid_log_level(self, tmp_path: Path) -> None:
        with pytest.raises(ValidationError, match="Invalid log level"):
            Settings(data_dir=tmp_path, log_level="LOUD")

    def test_invalid_port(self, tmp_path: Path) -> None:
        with pytest.raises(ValidationError):
            Settings(data_dir=tmp_path, port=0)

    def test_get_settings_is_cached(self, monkeypatch: pytest.MonkeyPatch) -> None:
        reset_settings()
        try:
            assert get_settings() is get_settings()
            monkeypatch.setenv("STATUSGATE_PORT", "9000")
            reset_settings()
            assert get_settings().port == 9000
        finally:
            reset_settings()


class TestSettingsValidate:
    """Tests for startup validation."""

    def test_valid(self, tmp_path: Path) -> None:
        settings = Settings(data_dir=tmp_path / "data", api_id=12345, api_hash="abcdef")

        assert settings.validate() == []
        assert (tmp_path / "data").is_dir()

    def test_missing_credentials(self, tmp_path: Path) -> None:
        errors = Settings(data_dir=tmp_path).validate()

        assert len(errors) == 1
        assert "credentials" in errors[0]

    def test_short_initial_password(self, tmp_path: Path) -> None:
        settings = Settings(
            data_dir=tmp_path, api_id=1, api_hash="abcdef", manager_password="abc"
        )

        assert any("at least 6" in error for error in settings.validate())

    def test_empty_mime_prefixes(self, tmp_path: Path) -> None:
        settings = Settings(
            data_dir=tmp_path, api_id=1, api_hash="abcdef", allowed_mime_prefixes=[]
        )

        assert any("ALLOWED_MIME_PREFIXES" in error for error in settings.validate())

    def test_unusable_data_dir(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("file")
        settings = Settings(data_dir=blocker / "data", api_id=1, api_hash="abcdef")

        errors = settings.validate()

        assert len(errors) == 1
        assert "data directory" in errors[0]
