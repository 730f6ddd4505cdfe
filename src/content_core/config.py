"""Content service configuration loaded from environment variables."""
from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Database
    database_url: str = "sqlite:///content-service.db"
    database_path: Optional[str] = None  # Legacy: plain SQLite file path

    # Notification service (fire-and-forget)
    notification_service_url: str = "http://localhost:3003"
    service_token: str = Field(
        "nexus-internal-service-token",
        validation_alias=AliasChoices("NEXUS_SERVICE_TOKEN", "SERVICE_TOKEN"),
    )
    notifications_enabled: bool = True
    notification_timeout_seconds: float = 5.0
    notification_max_workers: int = 4

    # HTTP
    port: int = 3002
    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"

    # Pagination
    default_page_size: int = 20
    max_page_size: int = 100

    @model_validator(mode="after")
    def _apply_database_path(self) -> "Settings":
        # DATABASE_PATH wins only when no explicit URL was configured
        if self.database_path and "database_url" not in self.model_fields_set:
            self.database_url = f"sqlite:///{self.database_path}"
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()
