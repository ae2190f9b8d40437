"""Deadline guard: bound a whole retry sequence by an absolute instant."""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from datetime import UTC, datetime
from typing import Callable, TypeVar

from retrycase.foundation.errors import RetryError
from retrycase.runtime.concurrency import DEFAULT_TIMER, Timer, race

T = TypeVar("T")

logger = logging.getLogger("retrycase.retry")


def remaining_ms(deadline: datetime, now: datetime | None = None) -> float:
    """Milliseconds until ``deadline`` (negative once it has passed)."""
    return (deadline - (now or datetime.now(UTC))).total_seconds() * 1000.0


async def guard_deadline(
    run: Callable[[], Awaitable[T]],
    deadline: datetime,
    *,
    timer: Timer = DEFAULT_TIMER,
) -> T:
    """Race ``run()`` against a timer firing at ``deadline``.

    ``run`` is only called when the deadline is still ahead. If the timer wins,
    the run is cancelled (best effort: work it already handed off may still
    finish) and its outcome is discarded. If both finish in the same loop
    iteration the run's outcome is kept.

    Raises:
        RetryError: kind DEADLINE, when the deadline is already past or elapses first
    """
    if (ms := remaining_ms(deadline)) <= 0:
        raise RetryError.deadline_error("Deadline is in the past", deadline)

    index, value = await race(run(), timer.after(ms))
    if index == 1:
        logger.warning(f"Deadline {deadline.isoformat()} passed before the retry sequence settled")
        raise RetryError.deadline_error("Deadline has passed", deadline)
    return value  # type: ignore[return-value]
