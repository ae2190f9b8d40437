"""Retry options: resolution of a loose options bag into a frozen model.

Resolution never fails. Invalid values fall back to the defaults from
RetrySettings; an unusable deadline is dropped after a warning on the
diagnostic channel.

Both snake_case and camelCase keys are accepted:

    >>> RetryOptions.resolve({"initialDelay": 100, "growthRate": 2, "growth": "exponential"})
    RetryOptions(base_retry_delay=100.0, growth_rate=2.0, growth='exponential', max_retry=5, ...)
    >>> RetryOptions.resolve(max_retry=1.2).max_retry
    5
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from typing import Callable

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator
from pydantic_core import PydanticUseDefault

from .settings import get_settings

logger = logging.getLogger("retrycase.config")

Warn = Callable[[str], None]

# camelCase spellings accepted for compatibility with option bags written for other clients
_KEY_ALIASES: dict[str, str] = {
    "baseRetryDelay": "base_retry_delay",
    "initialDelay": "initial_delay",
    "growthRate": "growth_rate",
    "maxRetry": "max_retry",
    "firstTryDelay": "first_try_delay",
}


def _is_number(v: object) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def _is_delay(v: object) -> bool:
    """Non-negative number that is not NaN (infinity passes)."""
    return _is_number(v) and not math.isnan(v) and v >= 0  # type: ignore[arg-type,operator]


def _as_aware(dt: datetime) -> datetime:
    return dt if dt.tzinfo is not None else dt.astimezone()  # Naive means local time


def resolve_deadline(value: object, warn: Warn, *, now: datetime | None = None) -> datetime | None:
    """Turn a deadline value into an aware datetime, or warn and return None.

    Accepts a datetime, an ISO-8601 string, a millisecond offset from now,
    or a timedelta offset from now.
    """
    now = now or datetime.now(UTC)
    try:
        match value:
            case None:
                return None
            case datetime():
                return _as_aware(value)
            case timedelta():
                return now + value
            case bool():
                pass
            case int() | float() if math.isfinite(value):
                return now + timedelta(milliseconds=value)
            case int() | float():
                warn(f"deadline must be a finite Number of milliseconds, got {value!r}; ignoring deadline")
                return None
            case str():
                try:
                    return _as_aware(datetime.fromisoformat(value.strip()))
                except ValueError:
                    warn(f"deadline must be an ISO Date string (ISO-8601), got {value!r}; ignoring deadline")
                    return None
    except (OverflowError, OSError) as e:
        warn(f"deadline {value!r} is out of range ({e}); ignoring deadline")
        return None
    warn(
        f"deadline must be a datetime, an ISO Date string or a Number of milliseconds, "
        f"got {type(value).__name__}; ignoring deadline"
    )
    return None


class RetryOptions(BaseModel):
    """Canonical, immutable retry configuration. Delays are in milliseconds.

    Attributes:
        base_retry_delay: Delay before the first retry (alias: initial_delay)
        growth_rate: Linear increment or exponential multiplier
        growth: Growth algorithm name; unknown names fail on first growth
        max_retry: Retries allowed after the first attempt
        deadline: Absolute instant after which the sequence is abandoned
        first_try_delay: Delay before the very first attempt
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        json_schema_extra={
            "title": "Retry Options",
            "description": "Backoff schedule and limits for a retry sequence",
            "examples": [{
                "base_retry_delay": 1000,
                "growth_rate": 1000,
                "growth": "linear",
                "max_retry": 5,
            }],
        },
    )

    base_retry_delay: float = Field(default_factory=lambda: get_settings().retry.base_retry_delay)
    growth_rate: float = Field(default_factory=lambda: get_settings().retry.growth_rate)
    growth: str = Field(default_factory=lambda: get_settings().retry.growth)
    max_retry: int = Field(default_factory=lambda: get_settings().retry.max_retry)
    deadline: datetime | None = None
    first_try_delay: float = Field(default_factory=lambda: get_settings().retry.first_try_delay)

    @model_validator(mode="before")
    @classmethod
    def _normalize_keys(cls, data: object) -> object:
        """Map camelCase keys and fold the initial_delay alias into base_retry_delay."""
        if not isinstance(data, Mapping):
            return data
        out = {_KEY_ALIASES.get(k, k): v for k, v in data.items()}
        alias = out.pop("initial_delay", None)
        if _is_delay(alias) and not _is_delay(out.get("base_retry_delay")):
            out["base_retry_delay"] = alias
        return out

    @field_validator("base_retry_delay", mode="before")
    @classmethod
    def _check_delay(cls, v: object) -> object:
        if not _is_delay(v):
            raise PydanticUseDefault()
        return v

    @field_validator("growth_rate", mode="before")
    @classmethod
    def _check_rate(cls, v: object) -> object:
        if not _is_number(v) or math.isnan(v):  # type: ignore[arg-type]
            raise PydanticUseDefault()
        return v

    @field_validator("growth", mode="before")
    @classmethod
    def _check_growth(cls, v: object) -> str:
        if not v:
            raise PydanticUseDefault()
        return v if isinstance(v, str) else str(v)

    @field_validator("max_retry", mode="before")
    @classmethod
    def _check_max_retry(cls, v: object) -> int:
        if isinstance(v, float) and v.is_integer() and v >= 0:
            return int(v)
        if isinstance(v, int) and not isinstance(v, bool) and v >= 0:
            return v
        raise PydanticUseDefault()

    @field_validator("first_try_delay", mode="before")
    @classmethod
    def _check_first_try_delay(cls, v: object) -> object:
        if not _is_number(v) or not math.isfinite(v) or v < 0:  # type: ignore[arg-type,operator]
            raise PydanticUseDefault()
        return v

    @field_validator("deadline", mode="before")
    @classmethod
    def _resolve_deadline(cls, v: object, info: ValidationInfo) -> datetime | None:
        warn: Warn = (info.context or {}).get("warn") or logger.warning
        return resolve_deadline(v, warn)

    @property
    def initial_delay(self) -> float:
        """Alias of base_retry_delay."""
        return self.base_retry_delay

    @classmethod
    def resolve(
        cls,
        options: RetryOptions | Mapping[str, object] | None = None,
        *,
        warn: Warn | None = None,
        **overrides: object,
    ) -> RetryOptions:
        """Build options from a mapping, an existing RetryOptions, or keywords.

        Keyword overrides win over keys of ``options``. ``warn`` receives
        deadline diagnostics (default: the ``retrycase.config`` logger).
        """
        if isinstance(options, RetryOptions):
            if not overrides:
                return options
            data: dict[str, object] = options.model_dump()
        elif isinstance(options, Mapping):
            data = dict(options)
        else:
            if options is not None:
                (warn or logger.warning)(f"options must be a mapping, got {type(options).__name__}; using defaults")
            data = {}
        return cls.model_validate({**data, **overrides}, context={"warn": warn})
