"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    secret_key: str = Field(
        description="Shared secret used to verify bearer tokens issued upstream",
        min_length=1,
    )
    app_timezone: str = Field(
        default="UTC",
        description="Timezone used to store and compare session timestamps",
    )
    app_base_url: str = Field(
        default="http://localhost:3000",
        description="Public URL of the voting front-end, used in email links",
    )
    log_level: str = Field(default="INFO", description="Root logging level")
    cors_allowed_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        description="Origins allowed to call the API from a browser",
    )
    sendgrid_api_key: str | None = Field(
        default=None,
        description="SendGrid API key used for sending lifecycle emails via the REST API",
    )
    sendgrid_sender: str | None = Field(
        default=None,
        description="Email address that will appear as the sender of lifecycle messages",
        min_length=3,
    )
    lifecycle_poller_enabled: bool = Field(
        default=True,
        description="Run the session lifecycle poller inside the API process",
    )
    lifecycle_poll_interval_seconds: float = Field(
        default=60.0, description="Seconds between two lifecycle passes", gt=0
    )
    lifecycle_poll_initial_delay_seconds: float = Field(
        default=5.0, description="Warm-up delay before the first lifecycle pass", ge=0
    )
    lifecycle_poll_timeout_seconds: float = Field(
        default=50.0,
        description="Wall-clock guard applied to a single lifecycle pass",
        gt=0,
    )
    lifecycle_started_grace_seconds: int = Field(
        default=60,
        description="Minimum age of an un-announced session before 'started' may fire",
        ge=0,
    )
    inbox_default_limit: int = Field(default=40, gt=0)
    inbox_max_limit: int = Field(default=100, gt=0)

    @model_validator(mode="after")
    def _validate_sendgrid_pair(self) -> "Settings":
        if bool(self.sendgrid_api_key) ^ bool(self.sendgrid_sender):
            raise ValueError(
                "SENDGRID_API_KEY and SENDGRID_SENDER must both be provided to enable email"
            )
        if self.sendgrid_sender and "@" not in self.sendgrid_sender:
            raise ValueError("SENDGRID_SENDER must be a valid email address")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
