"""
Tests pour la configuration pydantic-settings.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from mediastack.config import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Isole les tests des variables MEDIASTACK_ de l'environnement."""
    for name in (
        "MEDIASTACK_TMDB_API_KEY",
        "MEDIASTACK_IGDB_CLIENT_ID",
        "MEDIASTACK_IGDB_CLIENT_SECRET",
        "MEDIASTACK_SUGGESTION_DEBOUNCE_MS",
        "MEDIASTACK_UNDO_WINDOW_SECONDS",
        "MEDIASTACK_PROVIDER_RESULT_LIMIT",
        "MEDIASTACK_BACKUP_DIR",
        "MEDIASTACK_LOG_LEVEL",
        "MEDIASTACK_LOG_FILE",
    ):
        monkeypatch.delenv(name, raising=False)


def _settings(**kwargs) -> Settings:
    return Settings(_env_file=None, **kwargs)


class TestSettings:
    def test_defaults(self):
        settings = _settings()
        assert settings.suggestion_debounce_ms == 650
        assert settings.suggestion_debounce_seconds == pytest.approx(0.65)
        assert settings.undo_window_seconds == 10
        assert settings.provider_result_limit == 10
        assert settings.user_id == "local"

    def test_providers_disabled_without_credentials(self):
        settings = _settings()
        assert settings.tmdb_enabled is False
        assert settings.igdb_enabled is False

    def test_igdb_needs_both_credentials(self):
        assert _settings(igdb_client_id="id").igdb_enabled is False
        assert _settings(igdb_client_id="id", igdb_client_secret="s").igdb_enabled is True

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("MEDIASTACK_TMDB_API_KEY", "abc")
        monkeypatch.setenv("MEDIASTACK_SUGGESTION_DEBOUNCE_MS", "300")

        settings = _settings()

        assert settings.tmdb_enabled is True
        assert settings.suggestion_debounce_seconds == pytest.approx(0.3)

    def test_log_level_is_normalized(self):
        assert _settings(log_level=" debug ").log_level == "DEBUG"

    def test_log_file_can_be_disabled(self):
        assert _settings(log_file="").log_file is None
        assert _settings(log_file="~/mediastack.log").log_file == Path.home() / "mediastack.log"

    def test_paths_are_expanded(self):
        settings = _settings(backup_dir="~/mediastack-backup")
        assert settings.backup_dir == Path.home() / "mediastack-backup"

    @pytest.mark.parametrize(
        "field, value",
        [
            ("provider_result_limit", 0),
            ("provider_result_limit", 51),
            ("undo_window_seconds", 0),
            ("suggestion_debounce_ms", -1),
            ("log_level", "VERBOSE"),
        ],
    )
    def test_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            _settings(**{field: value})
