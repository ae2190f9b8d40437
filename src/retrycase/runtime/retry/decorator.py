"""Decorator form of Retry.

Example:
    >>> @retrying(max_retry=3, base_retry_delay=250, if_=lambda e: isinstance(e, TimeoutError))
    ... async def fetch(url: str) -> bytes:
    ...     return await client.get(url)
    >>> await fetch("https://example.com")
"""

from __future__ import annotations

from collections.abc import Awaitable, Coroutine
from functools import wraps
from typing import Callable, ParamSpec, TypeVar, overload

from retrycase.foundation.config import Warn
from retrycase.runtime.concurrency import Timer

from .retry import IfFn, Retry

P = ParamSpec("P")
T = TypeVar("T")


@overload
def retrying(fn: Callable[P, T | Awaitable[T]], /) -> Callable[P, Coroutine[object, object, T]]: ...
@overload
def retrying(
    fn: None = None, /, *, if_: IfFn | None = None, warn: Warn | None = None,
    timer: Timer | None = None, name: str | None = None, **options: object,
) -> Callable[[Callable[P, T | Awaitable[T]]], Callable[P, Coroutine[object, object, T]]]: ...


def retrying(
    fn: Callable[P, T | Awaitable[T]] | None = None,
    /,
    *,
    if_: IfFn | None = None,
    warn: Warn | None = None,
    timer: Timer | None = None,
    name: str | None = None,
    **options: object,
) -> object:
    """Wrap a sync or async function so every call runs under a Retry.

    Options are resolved on every call, so a numeric deadline is relative to
    the call. The wrapper is always a coroutine function.
    """

    def decorate(func: Callable[P, T | Awaitable[T]]) -> Callable[P, Coroutine[object, object, T]]:
        label = name or getattr(func, "__qualname__", "retry")

        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            retry: Retry[T] = Retry(options, warn=warn, timer=timer, name=label).try_(lambda: func(*args, **kwargs))
            if if_ is not None:
                retry.if_(if_)
            return await retry.exec()

        return wrapper

    return decorate(fn) if fn is not None else decorate
