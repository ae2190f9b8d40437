"""Runtime - retry execution, async primitives and observability."""

from __future__ import annotations

from .concurrency import DEFAULT_TIMER, AsyncioTimer, Settled, SettledStatus, Timer, race, settle
from .observability import JsonFormatter, configure_logging
from .retry import (
    Growth,
    IfFn,
    Retry,
    RetryState,
    TryFn,
    exponential_growth,
    grow,
    guard_deadline,
    linear_growth,
    remaining_ms,
    retrying,
)

__all__ = [
    # Retry
    "Retry", "RetryState", "TryFn", "IfFn", "retrying",
    "Growth", "grow", "linear_growth", "exponential_growth",
    "guard_deadline", "remaining_ms",
    # Concurrency
    "Timer", "AsyncioTimer", "DEFAULT_TIMER", "Settled", "SettledStatus", "settle", "race",
    # Observability
    "JsonFormatter", "configure_logging",
]
