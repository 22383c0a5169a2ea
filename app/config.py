"""Application configuration settings."""
from __future__ import annotations

import os
from functools import lru_cache

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Runtime toggles -----------------------------------------------------
# Execution environment: "dev" | "local" | "test" | "staging" | "prod"
ENV = os.getenv("YA_ENV", "dev").lower()

# Legacy shared key (tolerated in DEV only)
DEV_API_KEY = os.getenv("DEV_API_KEY") or os.getenv("API_KEY") or "dev-secret-key"
DEV_API_KEY_ALLOWED = ENV in {"dev", "local", "dev_local"}

# Recognised scopes
API_SCOPES = {"staff", "admin"}


class Settings(BaseSettings):
    """Environment configuration for the back-office API."""

    app_env: str = ENV
    database_url: str = "sqlite:///youngachievers.db"
    SECRET_KEY: str = "change-me"
    DEV_API_KEY: str | None = Field(
        default=DEV_API_KEY,
        validation_alias=AliasChoices("DEV_API_KEY", "API_KEY"),
    )
    CORS_ALLOW_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]
    SENTRY_DSN: str | None = None
    PROMETHEUS_ENABLED: bool = True
    ALLOW_DB_CREATE_ALL: bool = False
    LOG_LEVEL: str = "INFO"

    # --- Attendance ------------------------------------------------------
    # Timezone used to derive the "current server date" for editability and
    # pause-window evaluation.
    APP_TIMEZONE: str = "UTC"
    RECENT_ATTENDANCE_LIMIT: int = 10

    # --- Activity log ----------------------------------------------------
    ACTIVITY_LOG_PAGE_SIZE: int = 15

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("APP_TIMEZONE")
    @classmethod
    def _strip_timezone(cls, value: str) -> str:
        cleaned = value.strip()
        return cleaned or "UTC"


class AppInfo(BaseModel):
    name: str = "youngachievers-backoffice"
    version: str = "0.1.0"


settings = Settings()


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return settings


__all__ = [
    "ENV",
    "DEV_API_KEY",
    "DEV_API_KEY_ALLOWED",
    "API_SCOPES",
    "Settings",
    "AppInfo",
    "settings",
    "get_settings",
]
