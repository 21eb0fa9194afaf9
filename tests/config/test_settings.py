"""Tests for pactbroker settings."""

from pactbroker.config.settings import Environment, LogLevel, Settings, get_settings


class TestSettings:
    def test_defaults(self, monkeypatch) -> None:
        for name in ("DATABASE_URL", "LOG_LEVEL", "ENVIRONMENT"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings(_env_file=None)
        assert settings.DATABASE_URL.startswith("postgresql+asyncpg://")
        assert settings.LOG_LEVEL == LogLevel.INFO
        assert settings.ENVIRONMENT == Environment.DEV
        assert settings.is_production is False

    def test_reads_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///broker.db")
        monkeypatch.setenv("log_level", "DEBUG")
        monkeypatch.setenv("ENVIRONMENT", "prod")
        settings = Settings(_env_file=None)
        assert settings.DATABASE_URL == "sqlite+aiosqlite:///broker.db"
        assert settings.LOG_LEVEL == LogLevel.DEBUG
        assert settings.is_production is True

    def test_get_settings_returns_fresh_instance(self) -> None:
        assert isinstance(get_settings(), Settings)
        assert get_settings() is not get_settings()
