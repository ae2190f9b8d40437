"""Retrycase - conditional retries with backoff and deadlines for async Python.

Wrap a flaky operation, choose a backoff schedule, optionally decide per
failure whether to keep going, and bound the whole sequence by a deadline.

Quick Start:
    >>> from retrycase import Retry, RetryError, RetryErrorKind
    >>>
    >>> retry = Retry(
    ...     base_retry_delay=500,      # ms before the first retry
    ...     growth="exponential",
    ...     growth_rate=2,             # 500 -> 1000 -> 2000 ...
    ...     max_retry=4,
    ...     deadline=10_000,           # ms from now, an ISO string, or a datetime
    ... )
    >>> retry.try_(lambda: api.fetch(order_id)).if_(lambda e: getattr(e, "status", None) == 503)
    >>> try:
    ...     order = await retry.exec()
    ... except RetryError as e:
    ...     match e.kind:
    ...         case RetryErrorKind.MAX_RETRY: ...
    ...         case RetryErrorKind.DEADLINE: ...

Decorator:
    >>> @retrying(max_retry=3, base_retry_delay=100)
    ... async def ping() -> bool: ...
"""

from __future__ import annotations

from .foundation import (
    LoggingSettings,
    RetryError,
    RetryErrorKind,
    RetryFailure,
    RetryOptions,
    RetrycaseSettings,
    RetrySettings,
    clear_settings_cache,
    get_settings,
)
from .runtime import (
    AsyncioTimer,
    Growth,
    Retry,
    RetryState,
    Timer,
    configure_logging,
    exponential_growth,
    grow,
    linear_growth,
    retrying,
)

__version__ = "0.1.0"

__all__ = [
    # Retry
    "Retry", "RetryState", "retrying",
    "Growth", "grow", "linear_growth", "exponential_growth",
    "Timer", "AsyncioTimer",
    # Errors
    "RetryError", "RetryErrorKind", "RetryFailure",
    # Config
    "RetryOptions", "RetrycaseSettings", "RetrySettings", "LoggingSettings",
    "get_settings", "clear_settings_cache",
    # Observability
    "configure_logging",
]
