"""Async primitives: timers, settled outcomes and racing.

Pure asyncio, no external dependencies.
"""

from __future__ import annotations

from .timer import DEFAULT_TIMER, AsyncioTimer, Timer
from .wait import Settled, SettledStatus, race, settle

__all__ = [
    "Timer",
    "AsyncioTimer",
    "DEFAULT_TIMER",
    "Settled",
    "SettledStatus",
    "settle",
    "race",
]
