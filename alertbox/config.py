"""Application configuration settings."""
from __future__ import annotations

import os
from functools import lru_cache

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Runtime toggles -----------------------------------------------------
# Execution environment: "dev" | "staging" | "prod"
ENV = os.getenv("ALERTBOX_ENV", "dev").lower()

# Header carrying the identity resolved by the upstream auth proxy.
ACTOR_HEADER = "X-User-Id"


class Settings(BaseSettings):
    """Environment configuration for the Alertbox backend."""

    app_env: str = Field(default=ENV, validation_alias=AliasChoices("ALERTBOX_ENV", "APP_ENV"))
    database_url: str = "sqlite:///alertbox.db"
    LOG_LEVEL: str = "INFO"
    CORS_ALLOW_ORIGINS: list[str] = [
        "http://localhost:3000",
    ]
    SENTRY_DSN: str | None = None
    PROMETHEUS_ENABLED: bool = True
    ALLOW_DB_CREATE_ALL: bool = False

    # --- Outbound email ------------------------------------------------------
    SMTP_HOST: str | None = None
    SMTP_PORT: int = 587
    SMTP_USERNAME: str | None = None
    SMTP_PASSWORD: str | None = None
    SMTP_FROM_ADDRESS: str = "alerts@alertbox.local"
    SMTP_USE_TLS: bool = True
    SMTP_TIMEOUT_SECONDS: int = 10
    SITE_URL: str = "http://localhost:3000"

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("SMTP_HOST", "SMTP_USERNAME", "SMTP_PASSWORD", "SENTRY_DSN")
    @classmethod
    def _strip_empty(cls, value: str | None) -> str | None:
        """Normalise empty strings to ``None`` so "configured" checks stay simple."""

        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None

    @property
    def email_configured(self) -> bool:
        return self.SMTP_HOST is not None


class AppInfo(BaseModel):
    name: str = "alertbox-backend"
    version: str = "0.1.0"


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()


__all__ = [
    "ENV",
    "ACTOR_HEADER",
    "Settings",
    "AppInfo",
    "get_settings",
]
