"""Process-wide Redis client, backing the faucet rate limiter.

Deposits, mints and withdrawals are PostgreSQL-only. Redis holds nothing
but per-wallet claim counters, which expire on their own.
"""

import logging

import redis.asyncio as aioredis

from config.settings import settings

logger = logging.getLogger(__name__)

_client: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    global _client  # noqa: PLW0603
    if _client is None:
        _client = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=settings.HTTP_TIMEOUT_SECONDS,
            health_check_interval=30,
        )
    return _client


async def check_redis() -> None:
    """Startup probe; raises redis.exceptions.ConnectionError when unreachable."""
    client = await get_redis()
    await client.ping()
    kwargs = client.connection_pool.connection_kwargs
    logger.info("Redis up at %s:%s db=%s", kwargs.get("host"), kwargs.get("port"), kwargs.get("db"))


async def close_redis() -> None:
    global _client  # noqa: PLW0603
    if _client is not None:
        await _client.aclose()
        _client = None
