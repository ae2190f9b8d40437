"""Tests for the retry controller."""

from __future__ import annotations

import asyncio
import logging
import time

import pytest

from retrycase import Retry, RetryError, RetryErrorKind
from retrycase.runtime.retry import retry as retry_module

from .support import Flaky, Predicate, RecordingTimer


def make_retry(timer: RecordingTimer, **options: object) -> Retry:
    return Retry({"initialDelay": 100, "growthRate": 100, "growth": "linear", **options}, timer=timer)


# ═════════════════════════════════════════════════════════════════════════════
# Binding & success path
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_exec_without_try_fn_fails(timer: RecordingTimer) -> None:
    with pytest.raises(RetryError) as exc_info:
        await make_retry(timer).exec()
    assert exc_info.value.kind is RetryErrorKind.RETRY
    assert exc_info.value.message == "No try function was provided"
    assert timer.calls == []


@pytest.mark.asyncio
async def test_binding_does_not_invoke(timer: RecordingTimer) -> None:
    op = Flaky(value=0.42)
    retry = make_retry(timer).try_(op)
    assert op.calls == 0

    assert await retry.exec() == 0.42
    assert op.calls == 1


def test_binding_is_chainable(timer: RecordingTimer) -> None:
    retry = make_retry(timer)
    assert retry.try_(Flaky()) is retry
    assert retry.if_(Predicate()) is retry


@pytest.mark.asyncio
async def test_retries_after_sync_raise(timer: RecordingTimer) -> None:
    op, pred = Flaky(failures=1, value="second"), Predicate()

    assert await make_retry(timer).try_(op).if_(pred).exec() == "second"
    assert op.calls == 2
    assert len(pred.seen) == 1
    assert timer.calls == [100]


@pytest.mark.asyncio
async def test_try_fn_may_return_awaitable(timer: RecordingTimer) -> None:
    pred = Predicate()

    async def op() -> str:
        await asyncio.sleep(0.01)
        return "async value"

    assert await make_retry(timer).try_(op).if_(pred).exec() == "async value"
    assert pred.seen == []


@pytest.mark.asyncio
async def test_retries_after_async_rejection(timer: RecordingTimer) -> None:
    calls = 0

    async def op() -> str:
        nonlocal calls
        calls += 1
        await asyncio.sleep(0.01)
        if calls == 1:
            raise ConnectionError("reset")
        return "recovered"

    pred = Predicate()
    assert await make_retry(timer).try_(op).if_(pred).exec() == "recovered"
    assert calls == 2
    assert isinstance(pred.seen[0], ConnectionError)


# ═════════════════════════════════════════════════════════════════════════════
# Predicate
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_falsy_predicate_reraises_latest_failure(timer: RecordingTimer) -> None:
    op, pred = Flaky(failures=100), Predicate(True, True, False)

    with pytest.raises(ValueError) as exc_info:
        await make_retry(timer).try_(op).if_(pred).exec()

    assert op.calls == 3
    assert len(pred.seen) == 3
    assert exc_info.value is op.errors[-1]
    assert not isinstance(exc_info.value, RetryError)


@pytest.mark.asyncio
async def test_predicate_may_return_awaitable(timer: RecordingTimer) -> None:
    answers = [True, False]

    async def pred(error: Exception) -> bool:
        await asyncio.sleep(0.01)
        return answers.pop(0)

    op = Flaky(failures=100)
    with pytest.raises(ValueError, match="failure 2"):
        await make_retry(timer).try_(op).if_(pred).exec()
    assert op.calls == 2


@pytest.mark.asyncio
async def test_predicate_raising_gives_if_function_error(timer: RecordingTimer) -> None:
    predicate_error = RuntimeError("predicate broke")

    def pred(error: Exception) -> bool:
        raise predicate_error

    op = Flaky(failures=100)
    with pytest.raises(RetryError) as exc_info:
        await make_retry(timer).try_(op).if_(pred).exec()

    err = exc_info.value
    assert err.kind is RetryErrorKind.IF_FUNCTION
    assert err.inner_error is op.errors[0]
    assert err.if_function_error is predicate_error
    assert op.calls == 1


@pytest.mark.asyncio
async def test_predicate_rejecting_gives_if_function_error(timer: RecordingTimer) -> None:
    async def pred(error: Exception) -> bool:
        await asyncio.sleep(0.01)
        raise KeyError("lookup")

    op = Flaky(failures=100)
    with pytest.raises(RetryError) as exc_info:
        await make_retry(timer).try_(op).if_(pred).exec()

    assert exc_info.value.kind is RetryErrorKind.IF_FUNCTION
    assert isinstance(exc_info.value.if_function_error, KeyError)
    assert exc_info.value.inner_error is op.errors[0]


class _Ambiguous:
    def __bool__(self) -> bool:
        raise ValueError("ambiguous truth value")


@pytest.mark.asyncio
async def test_predicate_result_without_truth_value_gives_if_function_error(timer: RecordingTimer) -> None:
    op = Flaky(failures=100)
    with pytest.raises(RetryError) as exc_info:
        await make_retry(timer).try_(op).if_(lambda e: _Ambiguous()).exec()

    err = exc_info.value
    assert err.kind is RetryErrorKind.IF_FUNCTION
    assert isinstance(err.if_function_error, ValueError)
    assert err.inner_error is op.errors[0]
    assert op.calls == 1
    assert timer.calls == []


@pytest.mark.asyncio
async def test_predicate_receives_latest_failure(timer: RecordingTimer) -> None:
    op, pred = Flaky(failures=3, value="done"), Predicate()

    assert await make_retry(timer).try_(op).if_(pred).exec() == "done"
    assert pred.seen == op.errors


@pytest.mark.asyncio
async def test_conditional_retry_on_status(timer: RecordingTimer) -> None:
    class HttpError(Exception):
        def __init__(self, status: int) -> None:
            super().__init__(f"status {status}")
            self.status = status

    def retry_forbidden(error: Exception) -> bool:
        return isinstance(error, HttpError) and error.status == 403

    outcomes: list[object] = [HttpError(403), "payload"]

    def op() -> object:
        item = outcomes.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    retry = make_retry(timer).if_(retry_forbidden)
    assert await retry.try_(op).exec() == "payload"

    outcomes[:] = [HttpError(500), "payload"]
    with pytest.raises(HttpError, match="status 500"):
        await retry.try_(op).exec()


# ═════════════════════════════════════════════════════════════════════════════
# Max retries
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_max_retry_error_after_exhausting(timer: RecordingTimer) -> None:
    op, pred = Flaky(failures=100), Predicate()

    with pytest.raises(RetryError) as exc_info:
        await make_retry(timer, maxRetry=2).try_(op).if_(pred).exec()

    err = exc_info.value
    assert err.kind is RetryErrorKind.MAX_RETRY
    assert err.retries == 2
    assert err.inner_error is op.errors[-1]
    assert op.calls == 3
    assert len(pred.seen) == 2


@pytest.mark.asyncio
async def test_zero_max_retry_attempts_once(timer: RecordingTimer) -> None:
    op, pred = Flaky(failures=100), Predicate()

    with pytest.raises(RetryError) as exc_info:
        await make_retry(timer, maxRetry=0).try_(op).if_(pred).exec()

    assert exc_info.value.retries == 0
    assert op.calls == 1
    assert pred.seen == []
    assert timer.calls == []


# ═════════════════════════════════════════════════════════════════════════════
# Delays & growth
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_linear_delay_schedule(timer: RecordingTimer) -> None:
    with pytest.raises(RetryError):
        await make_retry(timer, maxRetry=3).try_(Flaky(failures=100)).exec()
    assert timer.calls == [100, 200, 300]


@pytest.mark.asyncio
async def test_exponential_delay_schedule(timer: RecordingTimer) -> None:
    retry = Retry(growth="exponential", initial_delay=100, growth_rate=2, max_retry=4, timer=timer)
    with pytest.raises(RetryError):
        await retry.try_(Flaky(failures=100)).exec()
    assert timer.calls == [100, 200, 400, 800]


@pytest.mark.asyncio
async def test_unknown_growth_fails_on_first_retry(timer: RecordingTimer) -> None:
    op = Flaky(failures=100)
    retry = make_retry(timer, growth="super").try_(op)

    with pytest.raises(RetryError) as exc_info:
        await retry.exec()

    err = exc_info.value
    assert err.kind is RetryErrorKind.RETRY
    assert "Unknown growth algorithm" in err.message
    assert err.inner_error is op.errors[0]
    assert op.calls == 1


@pytest.mark.asyncio
async def test_growth_failure_wraps_operation_error(timer: RecordingTimer, monkeypatch: pytest.MonkeyPatch) -> None:
    def broken_grow(delay: float, growth: str, rate: float) -> float:
        raise ArithmeticError("boom")

    monkeypatch.setattr(retry_module, "grow", broken_grow)
    op = Flaky(failures=100)

    with pytest.raises(RetryError) as exc_info:
        await make_retry(timer).try_(op).exec()

    assert "Error while incrementing delay" in exc_info.value.message
    assert exc_info.value.inner_error is op.errors[0]


@pytest.mark.asyncio
async def test_non_numeric_delay_fails(timer: RecordingTimer, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(retry_module, "grow", lambda delay, growth, rate: None)
    op = Flaky(failures=100)

    with pytest.raises(RetryError) as exc_info:
        await make_retry(timer).try_(op).exec()

    assert "Error retrying, expected delay to be a number" in exc_info.value.message
    assert exc_info.value.inner_error is op.errors[1]
    assert op.calls == 2


@pytest.mark.asyncio
async def test_infinite_delay_fails_before_sleeping(timer: RecordingTimer) -> None:
    op = Flaky(failures=100)
    with pytest.raises(RetryError, match="expected delay to be a number, instead got inf"):
        await Retry(base_retry_delay=float("inf"), timer=timer).try_(op).exec()
    assert timer.calls == []


# ═════════════════════════════════════════════════════════════════════════════
# First try delay
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_first_try_delay_precedes_backoff(timer: RecordingTimer) -> None:
    op = Flaky(failures=1)
    assert await make_retry(timer, firstTryDelay=50).try_(op).exec() == "ok"
    assert timer.calls == [50, 100]


@pytest.mark.asyncio
async def test_first_try_delay_waits_before_first_attempt() -> None:
    started = time.monotonic()
    first_try: list[float] = []

    retry = Retry(first_try_delay=100).try_(lambda: first_try.append(time.monotonic()))
    await retry.exec()

    assert first_try[0] - started >= 0.095


# ═════════════════════════════════════════════════════════════════════════════
# Concurrency & misc
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_concurrent_execs_keep_separate_state(timer: RecordingTimer) -> None:
    def always_fails() -> None:
        raise TimeoutError("slow")

    retry = make_retry(timer, maxRetry=2).try_(always_fails)
    results = await asyncio.gather(retry.exec(), retry.exec(), return_exceptions=True)

    assert all(isinstance(r, RetryError) and r.retries == 2 for r in results)
    assert sorted(timer.calls) == [100, 100, 200, 200]


@pytest.mark.asyncio
async def test_cancellation_is_not_treated_as_failure(timer: RecordingTimer) -> None:
    pred = Predicate()

    async def op() -> None:
        await asyncio.sleep(10)

    task = asyncio.ensure_future(make_retry(timer).try_(op).if_(pred).exec())
    await asyncio.sleep(0.01)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert pred.seen == []


@pytest.mark.asyncio
async def test_retry_is_logged(timer: RecordingTimer, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="retrycase.retry")
    retry = Retry(initial_delay=100, timer=timer, name="quotes").try_(Flaky(failures=1))

    await retry.exec()

    assert "[quotes] Retry 1/5 after 100ms" in caplog.text


def test_run_sync(timer: RecordingTimer) -> None:
    assert make_retry(timer).try_(Flaky(failures=2, value=7)).run_sync() == 7
