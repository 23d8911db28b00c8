"""Application configuration settings."""
from __future__ import annotations

import os
from functools import lru_cache

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Runtime toggles -----------------------------------------------------
# Execution environment: "dev" | "test" | "staging" | "prod"
ENV = os.getenv("PAYGATE_ENV", "dev").lower()

PINELABS_API_BASE_URL = "https://api.pluralonline.com"


class RazorpayConfig(BaseModel):
    """Credential bundle handed to the Razorpay adapter."""

    model_config = ConfigDict(frozen=True)

    key_id: str | None = None
    key_secret: str | None = None
    webhook_secret: str | None = None
    timeout_seconds: float = 10.0


class PineLabsConfig(BaseModel):
    """Credential bundle handed to the PineLabs adapter."""

    model_config = ConfigDict(frozen=True)

    merchant_id: str | None = None
    access_code: str | None = None
    secret_key: str | None = None
    api_base_url: str | None = None
    timeout_seconds: float = 10.0


ProviderConfig = RazorpayConfig | PineLabsConfig


class Settings(BaseSettings):
    """Environment configuration for the payment gateway."""

    app_env: str = Field(default=ENV, validation_alias=AliasChoices("PAYGATE_ENV", "APP_ENV"))
    database_url: str = "sqlite:///paygate.db"
    ALLOW_DB_CREATE_ALL: bool = False

    payment_provider: str | None = None
    default_currency: str = "INR"
    provider_timeout_seconds: float = 10.0

    razorpay_key_id: str | None = None
    razorpay_key_secret: str | None = None
    razorpay_webhook_secret: str | None = None

    pinelabs_merchant_id: str | None = None
    pinelabs_access_code: str | None = None
    pinelabs_secret_key: str | None = None
    pinelabs_api_url: str | None = None

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator(
        "payment_provider",
        "razorpay_key_id",
        "razorpay_key_secret",
        "razorpay_webhook_secret",
        "pinelabs_merchant_id",
        "pinelabs_access_code",
        "pinelabs_secret_key",
        "pinelabs_api_url",
    )
    @classmethod
    def _strip_empty(cls, value: str | None) -> str | None:
        """Normalise empty credentials to ``None`` for easier validation."""

        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None

    def razorpay_config(self) -> RazorpayConfig:
        return RazorpayConfig(
            key_id=self.razorpay_key_id,
            key_secret=self.razorpay_key_secret,
            webhook_secret=self.razorpay_webhook_secret,
            timeout_seconds=self.provider_timeout_seconds,
        )

    def pinelabs_config(self) -> PineLabsConfig:
        return PineLabsConfig(
            merchant_id=self.pinelabs_merchant_id,
            access_code=self.pinelabs_access_code,
            secret_key=self.pinelabs_secret_key,
            api_base_url=self.pinelabs_api_url,
            timeout_seconds=self.provider_timeout_seconds,
        )


class AppInfo(BaseModel):
    name: str = "paygate"
    version: str = "0.1.0"


settings = Settings()


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return settings


__all__ = [
    "ENV",
    "PINELABS_API_BASE_URL",
    "RazorpayConfig",
    "PineLabsConfig",
    "ProviderConfig",
    "Settings",
    "AppInfo",
    "settings",
    "get_settings",
]
