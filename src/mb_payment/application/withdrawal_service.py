"""WithdrawalService: turn tokens back into a PIX payout request.

Order of operations is burn, confirm, then record. Nothing is queued for
payout until the burn is mined, so an unconfirmed or failed burn never
produces a payout. The burn queue id is UNIQUE on withdrawals: one burn
pays out at most once.

Payout execution is done by a back-office job draining PAYOUT_PENDING rows.
"""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.mb_chain.application.gateway import TokenGateway
from src.mb_common.centavos import (
    CENTAVOS_PER_TOKEN,
    centavos_to_brl_string,
    centavos_to_display,
    parse_brl,
    tokens_from_centavos,
    validate_deposit_amount,
)
from src.mb_common.enums import TxState
from src.mb_common.errors import (
    ConfirmationTimeoutError,
    DuplicateWithdrawalError,
    InvalidAmountError,
    MissingFieldError,
    TokenEngineError,
    ValidationError,
)
from src.mb_payment.application.schemas import WithdrawalResponse
from src.mb_payment.domain.pix_key import classify_pix_key
from src.mb_payment.domain.repository import WithdrawalRepositoryProtocol
from src.mb_payment.infrastructure.persistence import WithdrawalRepository

logger = logging.getLogger(__name__)


class WithdrawalService:
    def __init__(
        self,
        gateway: TokenGateway,
        repo: WithdrawalRepositoryProtocol | None = None,
    ) -> None:
        self._gateway = gateway
        self._repo: WithdrawalRepositoryProtocol = repo or WithdrawalRepository()

    async def request_withdrawal(
        self,
        db: AsyncSession,
        amount: Any,
        user_address: str,
        pix_key: str,
        burn_queue_id: str | None = None,
    ) -> WithdrawalResponse:
        if amount in (None, ""):
            raise MissingFieldError("amount")
        if not user_address:
            raise MissingFieldError("userAddress")
        if not pix_key or not pix_key.strip():
            raise MissingFieldError("pixKey")
        try:
            amount_cents = parse_brl(amount)
            validate_deposit_amount(amount_cents)
        except ValueError as exc:
            raise InvalidAmountError(amount) from exc

        pix_key = pix_key.strip()
        key_type = classify_pix_key(pix_key)
        if key_type is None:
            raise ValidationError(
                "Invalid PIX key: expected CPF, CNPJ, e-mail, +55 phone or random key"
            )

        tokens = tokens_from_centavos(amount_cents)
        if tokens == 0:
            raise ValidationError("Withdrawals are made in whole tokens; minimum is R$ 1,00")

        logger.info(
            "Withdrawal of %d tokens for %s via %s PIX key", tokens, user_address, key_type.value
        )
        queue_id = await self._confirmed_burn(user_address, tokens, burn_queue_id)

        payout_cents = tokens * CENTAVOS_PER_TOKEN
        try:
            withdrawal = await self._repo.create(
                db,
                user_address=user_address,
                amount_cents=payout_cents,
                token_amount=tokens,
                pix_key=pix_key,
                pix_key_type=key_type.value,
                burn_queue_id=queue_id,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        if withdrawal is None:
            logger.warning("Burn %s was already used for a withdrawal", queue_id)
            raise DuplicateWithdrawalError(queue_id)

        logger.info(
            "Withdrawal %d queued: %s to %s (burn %s)",
            withdrawal.id, centavos_to_display(payout_cents), key_type.value, queue_id,
        )
        return WithdrawalResponse(
            message="Withdrawal accepted. The PIX will be sent shortly.",
            amount=centavos_to_brl_string(payout_cents),
            user_address=user_address,
            pix_key=pix_key,
            pix_key_type=key_type.value,
            withdrawal_id=withdrawal.id,
            burn_queue_id=queue_id,
        )

    async def _confirmed_burn(
        self, user_address: str, tokens: int, burn_queue_id: str | None
    ) -> str:
        """Queue id of a mined burn; raises when the burn failed or is still pending."""
        if burn_queue_id:
            status = await self._gateway.await_confirmation(burn_queue_id)
            if status.state is TxState.FAILED:
                raise TokenEngineError("Burn transaction failed", details=status.error)
            if status.state is not TxState.MINED:
                raise ConfirmationTimeoutError(burn_queue_id)
            return burn_queue_id

        result = await self._gateway.burn(user_address, tokens, wait_for_confirmation=True)
        if not result.success:
            logger.error("Burn for %s failed: %s", user_address, result.error)
            raise TokenEngineError("Failed to burn tokens", details=result.error)
        if not result.is_mined:
            raise ConfirmationTimeoutError(str(result.queue_id))
        return str(result.queue_id)
