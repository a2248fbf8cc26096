"""FastAPI dependencies wiring the token engine stack per request.

Building EngineConfig raises ConfigurationError (HTTP 500) when the engine
secrets are absent, before any handler code runs.

Tests override `get_engine_client` (or `get_token_gateway`) via
app.dependency_overrides.
"""

from typing import Annotated

from fastapi import Depends

from config.settings import EngineConfig, settings
from src.mb_chain.application.faucet import FaucetService
from src.mb_chain.application.gateway import TokenEngineProtocol, TokenGateway
from src.mb_chain.domain.poller import TransactionPoller
from src.mb_chain.infrastructure.engine_client import EngineClient
from src.mb_common.http_client import get_http_client
from src.mb_common.redis_client import get_redis
from src.mb_gateway.middleware.rate_limit import FixedWindowRateLimiter


def get_engine_config() -> EngineConfig:
    return settings.engine_config()


def get_engine_client(
    config: Annotated[EngineConfig, Depends(get_engine_config)],
) -> TokenEngineProtocol:
    return EngineClient(config, get_http_client())


def get_poller(
    engine: Annotated[TokenEngineProtocol, Depends(get_engine_client)],
    config: Annotated[EngineConfig, Depends(get_engine_config)],
) -> TransactionPoller:
    return TransactionPoller(
        engine,
        max_attempts=config.poll_max_attempts,
        interval=config.poll_interval_seconds,
    )


def get_token_gateway(
    engine: Annotated[TokenEngineProtocol, Depends(get_engine_client)],
    poller: Annotated[TransactionPoller, Depends(get_poller)],
) -> TokenGateway:
    return TokenGateway(engine, poller)


async def get_faucet_limiter() -> FixedWindowRateLimiter | None:
    if settings.FAUCET_RATE_LIMIT <= 0:
        return None
    return FixedWindowRateLimiter(
        await get_redis(),
        scope="faucet",
        limit=settings.FAUCET_RATE_LIMIT,
        window_seconds=settings.FAUCET_RATE_WINDOW_SECONDS,
    )


def get_faucet_service(
    gateway: Annotated[TokenGateway, Depends(get_token_gateway)],
    limiter: Annotated[FixedWindowRateLimiter | None, Depends(get_faucet_limiter)],
) -> FaucetService:
    return FaucetService(gateway, limiter, settings.FAUCET_AMOUNT)
