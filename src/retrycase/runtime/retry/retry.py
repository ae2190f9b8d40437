"""Retry controller: re-run a fallible operation on a backoff schedule.

Each ``exec()`` walks this state machine with its own RetryState:

    Idle -> Attempting -> Succeeded
                       -> MaxRetriesExceeded                 (attempt >= max_retry)
                       -> EvaluatingPredicate -> Rejected    (predicate falsy or failing)
                                              -> Delaying -> Attempting

Example:
    >>> retry = (
    ...     Retry({"baseRetryDelay": 200, "growth": "exponential", "growthRate": 2, "maxRetry": 4})
    ...     .try_(lambda: client.get("/health"))
    ...     .if_(lambda e: isinstance(e, ConnectionError))
    ... )
    >>> await retry.exec()
"""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Awaitable, Mapping
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

from retrycase.foundation.config import RetryOptions, Warn
from retrycase.foundation.errors import RetryError
from retrycase.runtime.concurrency import DEFAULT_TIMER, Timer, settle

from .backoff import grow
from .deadline import guard_deadline

T = TypeVar("T")

TryFn = Callable[[], T | Awaitable[T]]
IfFn = Callable[[Exception], object | Awaitable[object]]

logger = logging.getLogger("retrycase.retry")


def _always(_: Exception) -> bool:
    return True


def _is_finite_number(v: object) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v)


@dataclass(slots=True)
class RetryState:
    """Mutable bookkeeping of one execution.

    Attributes:
        attempt: Retries performed so far
        delay: Delay (ms) before the next attempt
    """

    attempt: int
    delay: float


@dataclass(slots=True)
class _Execution(Generic[T]):
    """One run of the state machine. Binds callables at exec() time."""

    options: RetryOptions
    state: RetryState
    try_fn: TryFn[T]
    if_fn: IfFn
    timer: Timer
    name: str

    async def run(self) -> T:
        if self.options.first_try_delay > 0:
            await self.timer.after(self.options.first_try_delay)

        while True:
            outcome = await settle(self.try_fn)
            if outcome.is_fulfilled:
                return outcome.value  # type: ignore[return-value]
            await self._before_retry(outcome.error)  # type: ignore[arg-type]

    async def _before_retry(self, error: Exception) -> None:
        """Decide whether ``error`` is retried; return after the backoff delay or raise."""
        opts, state = self.options, self.state

        if state.attempt >= opts.max_retry:
            logger.warning(f"[{self.name}] Giving up after {state.attempt} retries: {error!r}")
            raise RetryError.max_retry(error, state.attempt)

        state.attempt += 1

        verdict = await settle(self.if_fn, error)
        if verdict.is_rejected:
            raise RetryError.if_function(error, verdict.error)  # type: ignore[arg-type]
        try:
            proceed = bool(verdict.value)
        except Exception as e:
            raise RetryError.if_function(error, e)
        if not proceed:
            logger.debug(f"[{self.name}] Predicate declined retry for {error!r}")
            raise error

        if not _is_finite_number(state.delay):
            raise RetryError(f"Error retrying, expected delay to be a number, instead got {state.delay}", error)

        logger.info(f"[{self.name}] Retry {state.attempt}/{opts.max_retry} after {state.delay:g}ms ({error!r})")
        await self.timer.after(state.delay)

        try:
            state.delay = grow(state.delay, opts.growth, opts.growth_rate)
        except Exception as e:
            raise RetryError(f"Error while incrementing delay, {e}", error)


class Retry(Generic[T]):
    """Configurable retry runner.

    Bind the operation with ``try_`` and optionally a continue/abort
    predicate with ``if_``, then await ``exec()``. A configured instance can
    be executed many times, concurrently too: every execution gets its own
    RetryState.

    Args:
        options: Options mapping or RetryOptions (see RetryOptions for keys)
        warn: Diagnostic sink for deadline warnings
        timer: Timer used for all delays and the deadline
        name: Label used in log messages
        **overrides: Option keys given as keywords

    Raises (from exec):
        RetryError: Tagged with the reason the sequence failed
        Exception: The operation's own failure, when the predicate declines a retry
    """

    __slots__ = ("_options", "_try_fn", "_if_fn", "_timer", "_name")

    def __init__(
        self,
        options: RetryOptions | Mapping[str, object] | None = None,
        *,
        warn: Warn | None = None,
        timer: Timer | None = None,
        name: str = "retry",
        **overrides: object,
    ) -> None:
        self._options = RetryOptions.resolve(options, warn=warn, **overrides)
        self._try_fn: TryFn[T] | None = None
        self._if_fn: IfFn = _always
        self._timer = timer or DEFAULT_TIMER
        self._name = name

    @property
    def options(self) -> RetryOptions:
        return self._options

    def try_(self, fn: TryFn[T]) -> Retry[T]:
        """Bind the operation. It is not called until exec()."""
        self._try_fn = fn
        return self

    def if_(self, fn: IfFn) -> Retry[T]:
        """Bind the continue/abort predicate; it receives the latest failure."""
        self._if_fn = fn
        return self

    async def exec(self) -> T:
        """Run the retry sequence and return the operation's value."""
        if not callable(self._try_fn):
            raise RetryError("No try function was provided")

        execution = _Execution(
            options=self._options,
            state=RetryState(attempt=0, delay=self._options.base_retry_delay),
            try_fn=self._try_fn,
            if_fn=self._if_fn,
            timer=self._timer,
            name=self._name,
        )
        if self._options.deadline is None:
            return await execution.run()
        return await guard_deadline(execution.run, self._options.deadline, timer=self._timer)

    def run_sync(self) -> T:
        """Blocking exec() on a fresh event loop. Not callable from a running loop."""
        return asyncio.run(self.exec())

    def __repr__(self) -> str:
        return f"Retry({self._name!r}, {self._options!r})"
