"""Tests for environment-driven settings."""
from content_core.config import Settings


class TestSettings:
    """Test defaults and environment overrides."""

    def test_defaults(self, monkeypatch):
        for name in ("DATABASE_URL", "DATABASE_PATH", "PORT", "NEXUS_SERVICE_TOKEN", "SERVICE_TOKEN"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings(_env_file=None)
        assert settings.port == 3002
        assert settings.database_url == "sqlite:///content-service.db"
        assert settings.notification_service_url == "http://localhost:3003"
        assert settings.service_token == "nexus-internal-service-token"

    def test_database_path_builds_sqlite_url(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.setenv("DATABASE_PATH", "/data/content.db")
        settings = Settings(_env_file=None)
        assert settings.database_url == "sqlite:////data/content.db"

    def test_database_url_wins_over_path(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://db/content")
        monkeypatch.setenv("DATABASE_PATH", "/data/content.db")
        settings = Settings(_env_file=None)
        assert settings.database_url == "postgresql://db/content"

    def test_service_token_env_name(self, monkeypatch):
        monkeypatch.delenv("SERVICE_TOKEN", raising=False)
        monkeypatch.setenv("NEXUS_SERVICE_TOKEN", "from-env")
        assert Settings(_env_file=None).service_token == "from-env"
