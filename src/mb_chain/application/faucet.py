"""FaucetService: the fixed 100-token grant behind /claimToken.

Waits for on-chain confirmation. Three outcomes:
  mined       -> ClaimTokenResponse
  unconfirmed -> ConfirmationTimeoutError (408), caller may keep polling
  failed      -> TokenEngineError with the engine's text

The wallet's rate-limit hit is taken before minting and given back when
the engine rejects the mint. An unconfirmed claim keeps it: the tokens may
still arrive.
"""

import logging

from src.mb_chain.application.gateway import TokenGateway
from src.mb_chain.application.schemas import ClaimTokenResponse
from src.mb_common.errors import ConfirmationTimeoutError, MissingFieldError, TokenEngineError
from src.mb_gateway.middleware.rate_limit import FixedWindowRateLimiter

logger = logging.getLogger(__name__)


class FaucetService:
    def __init__(
        self,
        gateway: TokenGateway,
        limiter: FixedWindowRateLimiter | None,
        amount: int,
    ) -> None:
        self._gateway = gateway
        self._limiter = limiter
        self._amount = amount

    async def claim(self, address: str) -> ClaimTokenResponse:
        if not address:
            raise MissingFieldError("address")
        if self._limiter is not None:
            await self._limiter.hit(address)

        try:
            result = await self._gateway.mint(address, self._amount, wait_for_confirmation=True)
        except Exception:
            await self._release(address)
            raise
        if not result.success:
            await self._release(address)
            raise TokenEngineError("Failed to initiate transaction", details=result.error)
        if not result.is_mined:
            logger.info("Faucet claim %s for %s not mined yet", result.queue_id, address)
            raise ConfirmationTimeoutError(str(result.queue_id))

        logger.info("Faucet granted %d tokens to %s (%s)", self._amount, address, result.queue_id)
        return ClaimTokenResponse(
            message="Transaction mined successfully!",
            queue_id=str(result.queue_id),
            amount=self._amount,
        )

    async def _release(self, address: str) -> None:
        if self._limiter is not None:
            await self._limiter.release(address)
