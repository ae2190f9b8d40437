"""Delay growth between retries.

Delays are stateful per execution: each failed attempt feeds the current
delay through ``grow`` to get the next one.
- linear: delay + rate (1000 -> 2000 -> 3000 with rate 1000)
- exponential: delay * rate (1000 -> 2000 -> 4000 with rate 2)
"""

from __future__ import annotations

from enum import StrEnum

from retrycase.foundation.errors import RetryError


class Growth(StrEnum):
    """Known growth algorithms."""
    LINEAR = "linear"
    EXPONENTIAL = "exponential"


def linear_growth(delay: float, rate: float) -> float:
    return delay + rate


def exponential_growth(delay: float, rate: float) -> float:
    return delay * rate


def grow(delay: float, growth: str, rate: float) -> float:
    """Compute the next delay.

    Raises:
        RetryError: If ``growth`` names no known algorithm
    """
    match growth:
        case Growth.LINEAR:
            return linear_growth(delay, rate)
        case Growth.EXPONENTIAL:
            return exponential_growth(delay, rate)
    raise RetryError(f"Unknown growth algorithm, {growth}")
