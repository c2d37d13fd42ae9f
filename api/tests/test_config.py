"""Unit tests for core.config."""

import pytest
from pydantic import ValidationError

from core.config import Settings, clear_settings_cache, get_settings

pytestmark = pytest.mark.unit


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)

        settings = Settings(_env_file=None)

        assert settings.database_url.startswith("postgresql+asyncpg://")
        assert settings.port == 50051
        assert settings.service_name == "blog-service"
        assert settings.is_sqlite is False

    def test_sqlite_url_detected(self):
        settings = Settings(database_url="sqlite+aiosqlite:///:memory:")

        assert settings.is_sqlite is True

    def test_empty_database_url_rejected(self):
        with pytest.raises(ValidationError, match="Database configuration required"):
            Settings(database_url="")

    @pytest.mark.parametrize(
        "field", ["rpc_default_timeout_seconds", "store_connect_timeout_seconds"]
    )
    def test_non_positive_timeouts_rejected(self, field):
        with pytest.raises(ValidationError):
            Settings(**{field: 0})

    def test_settings_are_frozen(self):
        settings = Settings()

        with pytest.raises(ValidationError):
            settings.port = 1


class TestGetSettings:
    def test_cached_until_cleared(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("RPC_DEFAULT_TIMEOUT_SECONDS", "2.5")

        assert get_settings() is first

        clear_settings_cache()
        refreshed = get_settings()

        assert refreshed is not first
        assert refreshed.rpc_default_timeout_seconds == 2.5
