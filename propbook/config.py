"""Application configuration settings."""
from __future__ import annotations

import os
from functools import lru_cache

from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Runtime toggles -----------------------------------------------------
# Runtime environment: "dev" | "staging" | "prod"
ENV = os.getenv("PROPBOOK_ENV", "dev").lower()

# Environments where Base.metadata.create_all() may run at startup.
CREATE_ALL_ENVS = {"dev", "local", "test"}


class Settings(BaseSettings):
    """Environment configuration for the booking payments backend."""

    app_env: str = ENV
    database_url: str = "sqlite:///propbook.db"
    LOG_LEVEL: str = "INFO"
    ALLOW_DB_CREATE_ALL: bool = False

    # --- Razorpay ---------------------------------------------------------
    RAZORPAY_KEY_ID: str | None = None
    RAZORPAY_KEY_SECRET: str | None = None

    CORS_ALLOW_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]
    SENTRY_DSN: str | None = None
    PROMETHEUS_ENABLED: bool = False

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("RAZORPAY_KEY_ID", "RAZORPAY_KEY_SECRET")
    @classmethod
    def _strip_empty_credential(cls, value: str | None) -> str | None:
        """Normalise empty gateway credentials to ``None`` for easier validation."""

        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None


class GatewayConfig(BaseModel):
    """Credentials handed to the payment gateway client at construction time."""

    key_id: str | None = None
    key_secret: str | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "GatewayConfig":
        return cls(key_id=settings.RAZORPAY_KEY_ID, key_secret=settings.RAZORPAY_KEY_SECRET)

    @property
    def configured(self) -> bool:
        return bool(self.key_id and self.key_secret)


class AppInfo(BaseModel):
    name: str = "propbook-payments"
    version: str = "0.1.0"


settings = Settings()


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return settings


__all__ = [
    "ENV",
    "CREATE_ALL_ENVS",
    "Settings",
    "GatewayConfig",
    "AppInfo",
    "settings",
    "get_settings",
]
