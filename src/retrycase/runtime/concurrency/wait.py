"""Outcome normalisation and racing for async operations.

    - settle: run a sync or async callable, capture value or exception
    - race: first of several awaitables to finish wins, the rest are cancelled

Example:
    >>> outcome = await settle(fetch_user, 42)
    >>> if outcome.is_rejected:
    ...     log(outcome.error)
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable
from dataclasses import dataclass
from enum import StrEnum
from typing import Callable, Generic, TypeVar

T = TypeVar("T")


class SettledStatus(StrEnum):
    """Status of a settled operation."""
    FULFILLED = "fulfilled"
    REJECTED = "rejected"


@dataclass(slots=True, frozen=True)
class Settled(Generic[T]):
    """Outcome of calling an operation: its value or the exception it raised.

    Attributes:
        status: 'fulfilled' or 'rejected'
        value: Result value if fulfilled
        error: Exception if rejected
    """

    status: SettledStatus
    value: T | None = None
    error: Exception | None = None

    @property
    def is_fulfilled(self) -> bool:
        return self.status == SettledStatus.FULFILLED

    @property
    def is_rejected(self) -> bool:
        return self.status == SettledStatus.REJECTED


def _fulfilled(value: T) -> Settled[T]:
    return Settled(SettledStatus.FULFILLED, value=value)


def _rejected(error: Exception) -> Settled[T]:
    return Settled(SettledStatus.REJECTED, error=error)


async def settle(fn: Callable[..., T | Awaitable[T]], *args: object) -> Settled[T]:
    """Call ``fn`` and await its result if awaitable.

    A synchronous raise and an awaitable that raises produce the same
    rejected outcome. Cancellation and other BaseExceptions propagate, as
    does any exception raised while the calling task is being cancelled.
    """
    try:
        result = fn(*args)
        if inspect.isawaitable(result):
            result = await result
    except Exception as e:
        if (task := asyncio.current_task()) is not None and task.cancelling():
            raise asyncio.CancelledError() from e  # Operation swallowed our cancellation
        return _rejected(e)
    return _fulfilled(result)  # type: ignore[arg-type]


def _discard(task: asyncio.Future[object]) -> None:
    if not task.cancelled():
        task.exception()  # Mark retrieved so the loop does not report it


async def race(*aws: Awaitable[T]) -> tuple[int, T]:
    """Race awaitables - first to complete wins.

    Cancels the others after the first completes without waiting for them to
    unwind; their late outcomes are discarded. When several finish in
    the same loop iteration the lowest index wins. If the winner raised,
    that exception propagates.

    Returns:
        (index of the winner, its result)

    Raises:
        ValueError: If no awaitables provided
    """
    if not aws:
        raise ValueError("race() requires at least one awaitable")

    tasks = [asyncio.ensure_future(a) for a in aws]

    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        for task in tasks:
            task.cancel()
        raise

    for task in pending:
        task.add_done_callback(_discard)
        task.cancel()

    index = next(i for i, t in enumerate(tasks) if t in done)
    return index, tasks[index].result()
