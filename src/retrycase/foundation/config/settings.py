"""Environment-based configuration using pydantic-settings.

Supplies the defaults that RetryOptions falls back to, plus logging setup.

Example:
    >>> from retrycase.foundation.config import get_settings
    >>> get_settings().retry.max_retry
    5

    # Or with environment variables:
    # RETRYCASE_RETRY_MAX_RETRY=3
    # RETRYCASE_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, NonNegativeFloat, NonNegativeInt, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RetrySettings(BaseSettings):
    """Default retry configuration. Delays are in milliseconds."""

    model_config = SettingsConfigDict(
        env_prefix="RETRYCASE_RETRY_",
        extra="ignore",
    )

    base_retry_delay: NonNegativeFloat = Field(default=1000.0, description="Delay before the first retry (ms)")
    growth_rate: float = Field(default=1000.0, description="Linear increment (ms) or exponential multiplier")
    growth: str = Field(default="linear", description="Delay growth algorithm")
    max_retry: NonNegativeInt = Field(default=5, description="Retries after the first attempt")
    first_try_delay: NonNegativeFloat = Field(default=0.0, description="Delay before the first attempt (ms)")


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RETRYCASE_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    format: Literal["json", "text"] = "text"

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class RetrycaseSettings(BaseSettings):
    """Root settings, loaded from ``RETRYCASE_`` prefixed environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="RETRYCASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    retry: RetrySettings = Field(default_factory=RetrySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> RetrycaseSettings:
    """Get the global settings instance (cached)."""
    return RetrycaseSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache so the next get_settings() re-reads the environment."""
    get_settings.cache_clear()
