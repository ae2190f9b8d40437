"""Timer primitive used for backoff delays and deadline racing.

A Timer suspends the caller for a number of milliseconds. Abandoning the wait
(cancelling the task awaiting ``after``) must have no side effects, which
asyncio.sleep already guarantees.

Swap in a custom timer to observe or skip delays:

    >>> class RecordingTimer:
    ...     def __init__(self): self.calls = []
    ...     async def after(self, ms: float) -> None:
    ...         self.calls.append(ms)
    >>> retry = Retry({"maxRetry": 3}, timer=RecordingTimer())
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@runtime_checkable
class Timer(Protocol):
    """Protocol for millisecond suspension."""

    async def after(self, ms: float) -> None:
        """Resume after ``ms`` milliseconds."""
        ...


@dataclass(frozen=True, slots=True)
class AsyncioTimer:
    """Event-loop timer backed by asyncio.sleep."""

    async def after(self, ms: float) -> None:
        await asyncio.sleep(max(ms, 0.0) / 1000.0)


DEFAULT_TIMER: Timer = AsyncioTimer()
