"""
Unit tests for application configuration.
"""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from src.notesync.config import Settings, get_settings


def _isolated(**overrides) -> Settings:
    """Settings built from the given values only, ignoring env and .env."""
    with patch.dict(os.environ, {}, clear=True):
        return Settings(_env_file=None, **overrides)


class TestSettingsDefaults:
    def test_server_and_storage(self):
        settings = _isolated()
        assert settings.app_name == "NoteSync API"
        assert settings.port == 3001
        assert settings.debug is False
        assert settings.database_url.startswith("postgresql+asyncpg://")
        assert settings.encryption_key is None

    def test_note_behaviour(self):
        settings = _isolated()
        assert settings.autosave_delay_seconds == 120.0
        assert settings.note_id_length == 8
        assert settings.preview_length == 100

    def test_cors_follows_frontend_url(self):
        assert _isolated().cors_origins == ["http://localhost:3000"]
        assert _isolated(frontend_url="https://n.example").cors_origins == ["https://n.example"]


class TestSettingsSources:
    def test_environment_variables(self):
        env_vars = {
            "PORT": "4000",
            "ENCRYPTION_KEY": "ab" * 32,
            "FRONTEND_URL": "https://notes.example.com",
            "AUTOSAVE_DELAY_SECONDS": "5",
            "log_level": "DEBUG",
        }
        with patch.dict(os.environ, env_vars, clear=True):
            settings = Settings(_env_file=None)

        assert settings.port == 4000
        assert settings.encryption_key == "ab" * 32
        assert settings.cors_origins == ["https://notes.example.com"]
        assert settings.autosave_delay_seconds == 5.0
        assert settings.log_level == "DEBUG"

    def test_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("PORT=9000\nPREVIEW_LENGTH=40\nUNKNOWN_FIELD=ignored\n")

        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=str(env_file))

        assert settings.port == 9000
        assert settings.preview_length == 40


class TestSettingsValidation:
    def test_bad_port(self):
        with pytest.raises(ValidationError):
            _isolated(port="not-a-number")

    def test_delay_must_be_positive(self):
        with pytest.raises(ValidationError):
            _isolated(autosave_delay_seconds=0)

    def test_id_length_bounds(self):
        with pytest.raises(ValidationError):
            _isolated(note_id_length=2)

    @pytest.mark.parametrize("blank", ["", "   "])
    def test_blank_key_counts_as_unset(self, blank):
        assert _isolated(encryption_key=blank).encryption_key is None


def test_get_settings_returns_singleton():
    assert get_settings() is get_settings()
