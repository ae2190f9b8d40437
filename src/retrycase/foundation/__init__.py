"""Foundation - error taxonomy and configuration for retrycase."""

from __future__ import annotations

from .config import (
    LoggingSettings,
    RetryOptions,
    RetrycaseSettings,
    RetrySettings,
    clear_settings_cache,
    get_settings,
    resolve_deadline,
)
from .errors import RetryError, RetryErrorKind, RetryFailure

__all__ = [
    # Errors
    "RetryError", "RetryErrorKind", "RetryFailure",
    # Config
    "RetryOptions", "resolve_deadline",
    "RetrycaseSettings", "RetrySettings", "LoggingSettings", "get_settings", "clear_settings_cache",
]
