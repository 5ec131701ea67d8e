"""Tests for retry_with_backoff."""

import pytest

from eunoia.errors import InvalidDataError, NetworkError
from eunoia.sync.retry import retry_with_backoff


class _Flaky:
    def __init__(self, failures: int, exc: Exception | None = None):
        self.failures = failures
        self.exc = exc or NetworkError()
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.exc
        return "ok"


@pytest.mark.asyncio
async def test_succeeds_first_try(fake_sleep) -> None:
    op = _Flaky(0)

    assert await retry_with_backoff(op, sleep=fake_sleep) == "ok"
    assert op.calls == 1
    assert fake_sleep.delays == []


@pytest.mark.asyncio
async def test_exponential_delays(fake_sleep) -> None:
    op = _Flaky(2)

    assert await retry_with_backoff(op, max_attempts=3, base_delay_s=2.0, sleep=fake_sleep) == "ok"
    assert fake_sleep.delays == [2.0, 4.0]


@pytest.mark.asyncio
async def test_raises_last_error_when_exhausted(fake_sleep) -> None:
    op = _Flaky(5)

    with pytest.raises(NetworkError):
        await retry_with_backoff(op, max_attempts=3, sleep=fake_sleep)
    assert op.calls == 3


@pytest.mark.asyncio
async def test_non_retryable_error_propagates_immediately(fake_sleep) -> None:
    op = _Flaky(5, InvalidDataError())

    with pytest.raises(InvalidDataError):
        await retry_with_backoff(op, retry_on=(NetworkError,), sleep=fake_sleep)
    assert op.calls == 1
    assert fake_sleep.delays == []
