"""thirdweb Engine REST client.

Endpoints used:
  POST {ENGINE_URL}/contract/{chain}/{token}/erc20/mint-to
  POST {ENGINE_URL}/contract/{chain}/{token}/erc20/transfer
  GET  {ENGINE_URL}/transaction/status/{queueId}

Writes are retried only on connect errors (the request never left this
host), so a submitted mint is never sent twice. Status reads are plain GETs
and are left to the poller's own retry loop.
"""

import logging

import httpx

from config.settings import EngineConfig, settings
from src.mb_chain.domain.models import TokenRequest, TransactionStatus, tx_state_from_engine
from src.mb_common.http_client import CONNECT_ERRORS
from src.mb_common.retry import call_with_retry

logger = logging.getLogger(__name__)


class EngineResponseError(ValueError):
    """The engine answered 2xx but the body is not what the contract promises."""


class EngineClient:
    def __init__(
        self,
        config: EngineConfig,
        http: httpx.AsyncClient,
        max_retries: int | None = None,
        retry_delay: float | None = None,
    ) -> None:
        self._config = config
        self._http = http
        self._max_retries = settings.HTTP_MAX_RETRIES if max_retries is None else max_retries
        self._retry_delay = (
            settings.HTTP_RETRY_DELAY_SECONDS if retry_delay is None else retry_delay
        )

    @property
    def operator_wallet(self) -> str:
        return self._config.backend_wallet_address

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._config.secret_key}"}

    def _erc20_url(self, endpoint: str) -> str:
        return (
            f"{self._config.base_url}/contract/{self._config.chain_id}"
            f"/{self._config.token_address}/erc20/{endpoint}"
        )

    async def submit(self, request: TokenRequest) -> httpx.Response:
        """POST a mint-to/transfer instruction. Returns the raw response, any status."""
        url = self._erc20_url(request.endpoint)
        headers = {
            **self._auth_headers(),
            "Content-Type": "application/json",
            "x-backend-wallet-address": request.acting_wallet(self.operator_wallet),
        }
        body = {"toAddress": request.destination, "amount": str(request.amount)}
        logger.info(
            "Engine %s: %s tokens -> %s", request.endpoint, request.amount, request.destination
        )
        return await call_with_retry(
            lambda: self._http.post(url, json=body, headers=headers),
            retries=self._max_retries,
            delay=self._retry_delay,
            retry_on=CONNECT_ERRORS,
            description=f"engine {request.endpoint}",
        )

    async def get_transaction_status(self, queue_id: str) -> TransactionStatus:
        """Fetch one status snapshot. Raises httpx.HTTPError / EngineResponseError."""
        response = await self._http.get(
            f"{self._config.base_url}/transaction/status/{queue_id}",
            headers=self._auth_headers(),
        )
        response.raise_for_status()
        payload = response.json()
        result = payload.get("result") if isinstance(payload, dict) else None
        if not isinstance(result, dict):
            raise EngineResponseError(f"status response for {queue_id} has no result")
        raw_status = result.get("status")
        return TransactionStatus(
            queue_id=queue_id,
            state=tx_state_from_engine(raw_status),
            raw_status=raw_status,
            error=result.get("errorMessage"),
        )


def parse_queue_id(response: httpx.Response) -> str:
    """Extract result.queueId from a successful write response."""
    try:
        queue_id = response.json()["result"]["queueId"]
    except (ValueError, KeyError, TypeError) as exc:
        raise EngineResponseError(f"engine response has no queueId: {response.text}") from exc
    if not queue_id:
        raise EngineResponseError(f"engine response has empty queueId: {response.text}")
    return str(queue_id)
