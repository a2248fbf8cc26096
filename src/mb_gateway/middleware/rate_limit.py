"""Fixed-window rate limiting on Redis.

Used by the faucet (/claimToken): a wallet may claim FAUCET_RATE_LIMIT
times per FAUCET_RATE_WINDOW_SECONDS.

Redis logic:
    count = INCR key
    if count == 1: EXPIRE key window
    if count > limit: raise RateLimitError (with the key's remaining TTL)
    release: DECR key (a counted request that was not served)

Key pattern: "ratelimit:{scope}:{subject}".
"""

import logging
from typing import Protocol

from src.mb_common.errors import RateLimitError

logger = logging.getLogger(__name__)


class CounterStore(Protocol):
    async def incr(self, name: str) -> int: ...

    async def expire(self, name: str, time: int) -> bool: ...

    async def ttl(self, name: str) -> int: ...

    async def decr(self, name: str) -> int: ...

    async def delete(self, *names: str) -> int: ...


class FixedWindowRateLimiter:
    def __init__(self, store: CounterStore, scope: str, limit: int, window_seconds: int) -> None:
        self._store = store
        self._scope = scope
        self._limit = limit
        self._window = window_seconds

    def _key(self, subject: str) -> str:
        return f"ratelimit:{self._scope}:{subject.lower()}"

    async def hit(self, subject: str) -> int:
        """Count one request for `subject`; raise RateLimitError past the limit."""
        key = self._key(subject)
        count = await self._store.incr(key)
        if count == 1:
            await self._store.expire(key, self._window)
        if count > self._limit:
            retry_after = await self._store.ttl(key)
            logger.warning("Rate limit hit: %s (%d/%d)", key, count, self._limit)
            raise RateLimitError(retry_after if retry_after > 0 else None)
        return count

    async def release(self, subject: str) -> None:
        """Give back one hit, for a request that was counted but not served."""
        key = self._key(subject)
        if await self._store.decr(key) < 0:
            # window expired in between; DECR recreated the key without a TTL
            await self._store.delete(key)
