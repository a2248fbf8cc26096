"""Tests for mb_common.retry: bounded polling and retry."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from src.mb_common.retry import call_with_retry, poll_until


@pytest.fixture
def sleeps(monkeypatch: pytest.MonkeyPatch) -> AsyncMock:
    fake = AsyncMock()
    monkeypatch.setattr(asyncio, "sleep", fake)
    return fake


class TestPollUntil:
    async def test_exactly_max_attempts_when_never_done(self, sleeps: AsyncMock) -> None:
        fetch = AsyncMock(return_value="pending")

        result = await poll_until(fetch, lambda v: False, max_attempts=4, interval=3.0)

        assert fetch.await_count == 4
        assert result.done is False
        assert result.attempts == 4
        assert result.value == "pending"
        # no sleep after the last attempt
        assert sleeps.await_count == 3
        sleeps.assert_awaited_with(3.0)

    async def test_stops_when_done(self, sleeps: AsyncMock) -> None:
        fetch = AsyncMock(side_effect=["pending", "mined", "never"])

        result = await poll_until(fetch, lambda v: v == "mined", max_attempts=5, interval=1)

        assert result.done is True
        assert result.attempts == 2
        assert fetch.await_count == 2

    async def test_terminal_value_aborts(self, sleeps: AsyncMock) -> None:
        fetch = AsyncMock(side_effect=["pending", "errored"])

        result = await poll_until(
            fetch,
            lambda v: v == "mined",
            is_terminal=lambda v: v == "errored",
            max_attempts=10,
            interval=1,
        )

        assert result.terminal is True
        assert result.done is False
        assert result.value == "errored"
        assert fetch.await_count == 2

    async def test_transient_error_counts_as_attempt(self, sleeps: AsyncMock) -> None:
        fetch = AsyncMock(side_effect=[ConnectionError("reset"), "mined"])

        result = await poll_until(
            fetch,
            lambda v: v == "mined",
            max_attempts=3,
            interval=0,
            transient=(ConnectionError,),
        )

        assert result.done is True
        assert result.attempts == 2

    async def test_all_transient_gives_no_value(self, sleeps: AsyncMock) -> None:
        fetch = AsyncMock(side_effect=ConnectionError("down"))

        result = await poll_until(
            fetch, lambda v: True, max_attempts=3, interval=0, transient=(ConnectionError,)
        )

        assert result.value is None
        assert fetch.await_count == 3

    async def test_other_errors_propagate(self, sleeps: AsyncMock) -> None:
        fetch = AsyncMock(side_effect=KeyError("bug"))

        with pytest.raises(KeyError):
            await poll_until(
                fetch, lambda v: True, max_attempts=3, interval=0, transient=(ConnectionError,)
            )

    async def test_rejects_zero_attempts(self) -> None:
        with pytest.raises(ValueError):
            await poll_until(AsyncMock(), lambda v: True, max_attempts=0, interval=0)


class TestCallWithRetry:
    async def test_retries_listed_errors(self, sleeps: AsyncMock) -> None:
        call = AsyncMock(side_effect=[ConnectionError("refused"), "ok"])

        result = await call_with_retry(call, retries=2, delay=0.5, retry_on=(ConnectionError,))

        assert result == "ok"
        assert call.await_count == 2
        sleeps.assert_awaited_once_with(0.5)

    async def test_gives_up_after_retries(self, sleeps: AsyncMock) -> None:
        call = AsyncMock(side_effect=ConnectionError("refused"))

        with pytest.raises(ConnectionError):
            await call_with_retry(call, retries=1, delay=0, retry_on=(ConnectionError,))
        assert call.await_count == 2

    async def test_other_errors_not_retried(self, sleeps: AsyncMock) -> None:
        call = AsyncMock(side_effect=TimeoutError("read timeout"))

        with pytest.raises(TimeoutError):
            await call_with_retry(call, retries=3, delay=0, retry_on=(ConnectionError,))
        assert call.await_count == 1

    async def test_lambda_returning_coroutine_is_awaited(self, sleeps: AsyncMock) -> None:
        # the HTTP clients pass `lambda: http.post(...)`, not an async def
        inner = AsyncMock(side_effect=[ConnectionError("refused"), "response"])

        result = await call_with_retry(
            lambda: inner(), retries=1, delay=0, retry_on=(ConnectionError,)
        )

        assert result == "response"
        assert inner.await_count == 2
