"""Shared outbound httpx client for the payment provider and token engine.

One pooled AsyncClient per process with an explicit, bounded timeout.
Closed by the app lifespan on shutdown.
"""

import httpx

from config.settings import settings

_http_client: httpx.AsyncClient | None = None

# Failures where the request provably never reached the server: safe to
# retry even for non-idempotent writes.
CONNECT_ERRORS: tuple[type[BaseException], ...] = (httpx.ConnectError, httpx.ConnectTimeout)

# Any transport-level failure: safe to retry for reads only.
TRANSPORT_ERRORS: tuple[type[BaseException], ...] = (httpx.TransportError,)


def get_http_client() -> httpx.AsyncClient:
    """Get or create the shared AsyncClient."""
    global _http_client  # noqa: PLW0603
    if _http_client is None or _http_client.is_closed:
        _http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(settings.HTTP_TIMEOUT_SECONDS),
        )
    return _http_client


async def close_http_client() -> None:
    global _http_client  # noqa: PLW0603
    if _http_client is not None:
        await _http_client.aclose()
        _http_client = None
