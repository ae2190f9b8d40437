"""Retry orchestration for fallible operations.

Re-invokes an operation on a linear or exponential backoff schedule until it
succeeds, a predicate vetoes another retry, retries run out, or a deadline
passes.

Example:
    >>> from retrycase.runtime.retry import Retry
    >>>
    >>> retry = Retry({"baseRetryDelay": 100, "growthRate": 100, "maxRetry": 3, "deadline": 5000})
    >>> value = await retry.try_(fetch_quote).if_(lambda e: isinstance(e, TimeoutError)).exec()
"""

from .backoff import Growth, exponential_growth, grow, linear_growth
from .deadline import guard_deadline, remaining_ms
from .decorator import retrying
from .retry import IfFn, Retry, RetryState, TryFn

__all__ = [
    # Growth
    "Growth",
    "grow",
    "linear_growth",
    "exponential_growth",
    # Deadline
    "guard_deadline",
    "remaining_ms",
    # Controller
    "Retry",
    "RetryState",
    "TryFn",
    "IfFn",
    "retrying",
]
