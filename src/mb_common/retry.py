"""Bounded fixed-delay retry and polling helpers on top of tenacity.

No exponential backoff and no jitter: callers get a predictable ceiling of
max_attempts * interval seconds. Transient errors (the exception types passed
in `transient` / `retry_on`) are logged and retried; anything else propagates.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    retry_if_not_result,
    stop_after_attempt,
    wait_fixed,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _sleep(seconds: float) -> None:
    await asyncio.sleep(seconds)


@dataclass
class PollResult(Generic[T]):
    value: T | None
    attempts: int
    done: bool
    terminal: bool = False


async def poll_until(
    fetch: Callable[[], Awaitable[T]],
    is_done: Callable[[T], bool],
    *,
    max_attempts: int,
    interval: float,
    is_terminal: Callable[[T], bool] | None = None,
    transient: tuple[type[BaseException], ...] = (),
    description: str = "poll",
) -> PollResult[T]:
    """Call `fetch` until `is_done`, a terminal value, or `max_attempts` is reached.

    Exactly `max_attempts` fetches happen when the value never settles. A
    transient exception counts as an attempt that observed nothing.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")

    observed: list[T] = []
    attempts = 0

    async def _fetch() -> T:
        nonlocal attempts
        attempts += 1
        value = await fetch()
        observed.append(value)
        return value

    def _settled(value: T) -> bool:
        return is_done(value) or (is_terminal is not None and is_terminal(value))

    def _log_transient(state: RetryCallState) -> None:
        if state.outcome is not None and state.outcome.failed:
            logger.warning(
                "%s attempt %d/%d failed transiently: %s",
                description, state.attempt_number, max_attempts, state.outcome.exception(),
            )

    def _give_up(state: RetryCallState) -> None:
        logger.info("%s gave up after %d attempts", description, state.attempt_number)

    await AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_fixed(interval),
        retry=retry_if_exception_type(transient) | retry_if_not_result(_settled),
        after=_log_transient,
        retry_error_callback=_give_up,
        sleep=_sleep,
    )(_fetch)

    # a settled value always ends polling, so only the latest one can be settled
    last = observed[-1] if observed else None
    done = bool(observed) and is_done(observed[-1])
    terminal = bool(observed) and not done and is_terminal is not None and is_terminal(observed[-1])
    return PollResult(value=last, attempts=attempts, done=done, terminal=terminal)


async def call_with_retry(
    call: Callable[[], Awaitable[T]],
    *,
    retries: int,
    delay: float,
    retry_on: tuple[type[BaseException], ...],
    description: str = "call",
) -> T:
    """Run `call`, retrying up to `retries` extra times on `retry_on` errors only."""

    def _log_retry(state: RetryCallState) -> None:
        exc = state.outcome.exception() if state.outcome is not None else None
        logger.warning(
            "%s failed (%s), retry %d/%d in %.1fs",
            description, exc, state.attempt_number, retries, delay,
        )

    async def _attempt() -> T:
        # `call` may be a lambda returning a coroutine; tenacity only awaits async defs
        return await call()

    return await AsyncRetrying(
        stop=stop_after_attempt(retries + 1),
        wait=wait_fixed(delay),
        retry=retry_if_exception_type(retry_on),
        before_sleep=_log_retry,
        reraise=True,
        sleep=_sleep,
    )(_attempt)
