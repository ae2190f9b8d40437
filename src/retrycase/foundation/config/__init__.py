"""Configuration: retry option resolution and environment settings."""

from .options import RetryOptions, Warn, resolve_deadline
from .settings import (
    LoggingSettings,
    RetrycaseSettings,
    RetrySettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "RetryOptions",
    "Warn",
    "resolve_deadline",
    "LoggingSettings",
    "RetrySettings",
    "RetrycaseSettings",
    "clear_settings_cache",
    "get_settings",
]
