"""Failure taxonomy for retry sequences.

Every internally detected failure is a RetryError tagged with a RetryErrorKind.
Callers discriminate on ``kind`` instead of the exception type:

    >>> try:
    ...     await retry.exec()
    ... except RetryError as e:
    ...     match e.kind:
    ...         case RetryErrorKind.MAX_RETRY: print(f"gave up after {e.retries}")
    ...         case RetryErrorKind.DEADLINE: print(f"out of time at {e.deadline}")
    ...         case _: raise

Each error may wrap exactly one inner cause (the operation failure), which is
also attached as ``__cause__`` so tracebacks render the full chain.
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime
from enum import StrEnum
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, computed_field


class RetryErrorKind(StrEnum):
    """Why a retry sequence ultimately failed."""
    RETRY = "RetryError"                # Generic failure: missing operation, bad delay, bad growth
    MAX_RETRY = "MaxRetryError"         # Retries exhausted
    IF_FUNCTION = "IfFunctionError"     # The continue/abort predicate itself failed
    DEADLINE = "RetryDeadlineError"     # Deadline elapsed before success


def _describe(exc: BaseException | None) -> str | None:
    return None if exc is None else f"{type(exc).__name__}: {exc}"


class RetryFailure(BaseModel):
    """Serializable snapshot of a RetryError.

    Inner failures are flattened to ``"Type: message"`` strings so the
    snapshot can be logged or shipped as JSON.
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "title": "Retry Failure",
            "description": "Structured description of a failed retry sequence",
            "examples": [{
                "kind": "MaxRetryError",
                "message": "Reached max number of retries",
                "retries": 5,
                "inner_error": "ConnectionError: refused",
            }],
        },
    )

    kind: RetryErrorKind = Field(description="Failure discriminant")
    message: str = Field(default="", description="Human-readable message")
    inner_error: str | None = Field(default=None, description="Operation failure that caused this error")
    retries: int | None = Field(default=None, ge=0, description="Retries performed (MaxRetryError)")
    if_function_error: str | None = Field(default=None, description="Predicate failure (IfFunctionError)")
    deadline: datetime | None = Field(default=None, description="Configured deadline (RetryDeadlineError)")

    @computed_field
    @property
    def is_terminal_by_budget(self) -> bool:
        """Whether the sequence ran out of retries or time rather than hitting a hard error."""
        return self.kind in (RetryErrorKind.MAX_RETRY, RetryErrorKind.DEADLINE)


class RetryError(Exception):
    """Tagged retry failure.

    Attributes:
        kind: Failure discriminant
        inner_error: Operation failure that caused this error, if any
        retries: Retries performed (MAX_RETRY only)
        if_function_error: The predicate's own failure (IF_FUNCTION only)
        deadline: The configured deadline (DEADLINE only)
    """

    __slots__ = ("kind", "inner_error", "retries", "if_function_error", "deadline")

    def __init__(
        self,
        message: str = "",
        inner_error: BaseException | None = None,
        *,
        kind: RetryErrorKind = RetryErrorKind.RETRY,
        retries: int | None = None,
        if_function_error: BaseException | None = None,
        deadline: datetime | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.inner_error = inner_error
        self.retries = retries
        self.if_function_error = if_function_error
        self.deadline = deadline
        self.__cause__ = inner_error

    @classmethod
    def max_retry(cls, inner_error: BaseException, retries: int) -> Self:
        return cls("Reached max number of retries", inner_error, kind=RetryErrorKind.MAX_RETRY, retries=retries)

    @classmethod
    def if_function(cls, inner_error: BaseException, if_function_error: BaseException) -> Self:
        return cls(
            f"Continue predicate failed: {if_function_error}",
            inner_error,
            kind=RetryErrorKind.IF_FUNCTION,
            if_function_error=if_function_error,
        )

    @classmethod
    def deadline_error(cls, message: str, deadline: datetime, inner_error: BaseException | None = None) -> Self:
        return cls(message, inner_error, kind=RetryErrorKind.DEADLINE, deadline=deadline)

    @property
    def message(self) -> str:
        return str(self)

    @property
    def info(self) -> RetryFailure:
        """Serializable snapshot of this error."""
        return RetryFailure(
            kind=self.kind,
            message=self.message,
            inner_error=_describe(self.inner_error),
            retries=self.retries,
            if_function_error=_describe(self.if_function_error),
            deadline=self.deadline,
        )

    def chain(self) -> Iterator[BaseException]:
        """Walk the cause chain, starting with this error."""
        seen: set[int] = set()
        exc: BaseException | None = self
        while exc is not None and id(exc) not in seen:
            seen.add(id(exc))
            yield exc
            exc = exc.inner_error if isinstance(exc, RetryError) else exc.__cause__

    def root_cause(self) -> BaseException:
        """Innermost error of the chain."""
        *_, last = self.chain()
        return last

    def __repr__(self) -> str:
        return f"RetryError(kind={self.kind.value!r}, message={self.message!r}, inner_error={self.inner_error!r})"
