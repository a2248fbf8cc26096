"""TokenGateway: mint and burn instructions against the credit token.

Mint is signed by the platform's operator wallet; burn is a transfer to the
null address acting as the user's wallet. Both return a queue id right away
and, when asked to, wait on the shared TransactionPoller.

Upstream failures are not raised: they come back as
TokenTransferResult(success=False, error=<engine text>) so each API handler
decides the HTTP status. Missing engine configuration is raised earlier, when
the EngineConfig is built.
"""

import logging
from typing import Protocol

import httpx

from src.mb_chain.domain.models import (
    BurnRequest,
    MintRequest,
    TokenRequest,
    TokenTransferResult,
    TransactionStatus,
)
from src.mb_chain.domain.poller import TransactionPoller
from src.mb_chain.infrastructure.engine_client import EngineResponseError, parse_queue_id
from src.mb_common.enums import TxState
from src.mb_common.errors import MissingFieldError, ValidationError

logger = logging.getLogger(__name__)


class TokenEngineProtocol(Protocol):
    async def submit(self, request: TokenRequest) -> httpx.Response: ...

    async def get_transaction_status(self, queue_id: str) -> TransactionStatus: ...


def _validate_amount(amount: int | str) -> int:
    """Whole, non-negative token amount. No upper bound here: burns rely on caller checks."""
    if isinstance(amount, bool):
        raise ValidationError(f"Token amount must be a non-negative integer, got {amount!r}")
    if isinstance(amount, str):
        if not amount.strip().isdigit():
            raise ValidationError(
                f"Token amount must be a non-negative integer, got {amount!r}"
            )
        return int(amount.strip())
    if not isinstance(amount, int) or amount < 0:
        raise ValidationError(f"Token amount must be a non-negative integer, got {amount!r}")
    return amount


class TokenGateway:
    def __init__(self, engine: TokenEngineProtocol, poller: TransactionPoller) -> None:
        self._engine = engine
        self._poller = poller

    async def mint(
        self, to_address: str, amount: int | str, wait_for_confirmation: bool = False
    ) -> TokenTransferResult:
        if not to_address:
            raise MissingFieldError("address")
        request = MintRequest(
            to_address=to_address,
            amount=_validate_amount(amount),
            wait_for_confirmation=wait_for_confirmation,
        )
        return await self._submit(request)

    async def burn(
        self, from_address: str, amount: int | str, wait_for_confirmation: bool = False
    ) -> TokenTransferResult:
        if not from_address:
            raise MissingFieldError("fromAddress")
        request = BurnRequest(
            from_address=from_address,
            amount=_validate_amount(amount),
            wait_for_confirmation=wait_for_confirmation,
        )
        return await self._submit(request)

    async def await_confirmation(self, queue_id: str) -> TransactionStatus:
        """Wait on an already-submitted transaction (e.g. a client-side burn)."""
        return await self._poller.wait_for_status(queue_id)

    async def _submit(self, request: TokenRequest) -> TokenTransferResult:
        try:
            response = await self._engine.submit(request)
        except httpx.HTTPError as exc:
            logger.error("Engine %s request failed: %s", request.endpoint, exc)
            return TokenTransferResult.failed(str(exc) or exc.__class__.__name__)

        if not response.is_success:
            error_text = response.text
            logger.error(
                "Engine %s rejected (%d): %s",
                request.endpoint, response.status_code, error_text,
            )
            return TokenTransferResult.failed(error_text)

        try:
            queue_id = parse_queue_id(response)
        except EngineResponseError as exc:
            logger.error("Engine %s: %s", request.endpoint, exc)
            return TokenTransferResult.failed(str(exc))

        if not request.wait_for_confirmation:
            return TokenTransferResult(success=True, queue_id=queue_id, is_mined=None)

        status = await self._poller.wait_for_status(queue_id)
        if status.state is TxState.FAILED:
            return TokenTransferResult(
                success=False,
                queue_id=queue_id,
                is_mined=False,
                error=status.error or f"transaction {queue_id} failed on-chain",
            )
        return TokenTransferResult(
            success=True, queue_id=queue_id, is_mined=status.state is TxState.MINED
        )
