"""Test doubles shared across the retrycase test suite."""

from __future__ import annotations

import asyncio


class RecordingTimer:
    """Timer that records requested delays and only yields to the loop."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def after(self, ms: float) -> None:
        self.calls.append(ms)
        await asyncio.sleep(0)


class Flaky:
    """Operation that raises on its first ``failures`` calls, then returns ``value``.

    Every failure is a distinct exception object, kept in ``errors``.
    """

    def __init__(self, failures: int = 0, value: object = "ok", exc_type: type[Exception] = ValueError) -> None:
        self.failures = failures
        self.value = value
        self.exc_type = exc_type
        self.calls = 0
        self.errors: list[Exception] = []

    def __call__(self) -> object:
        self.calls += 1
        if self.calls <= self.failures:
            err = self.exc_type(f"failure {self.calls}")
            self.errors.append(err)
            raise err
        return self.value


class Predicate:
    """Continue/abort predicate returning scripted answers and recording its arguments."""

    def __init__(self, *answers: object, default: object = True) -> None:
        self.answers = list(answers)
        self.default = default
        self.seen: list[Exception] = []

    def __call__(self, error: Exception) -> object:
        self.seen.append(error)
        return self.answers.pop(0) if self.answers else self.default
