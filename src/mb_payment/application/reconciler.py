"""PaymentReconciler: settles approved PIX payments into minted tokens.

Per payment: pending -> approved -> minted, or pending -> rejected.

Exactly-once minting goes through the payment_mints claim row:
  1. claim (or re-claim a FAILED row) and COMMIT before talking to the engine
  2. mint without waiting for confirmation
  3. MINTED + queue id on success; FAILED + error otherwise, raised as 502
     so the provider redelivers and the next delivery re-claims
A delivery that loses the claim never mints.
"""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.mb_chain.application.gateway import TokenGateway
from src.mb_common.centavos import centavos_to_brl_string, parse_brl, tokens_from_centavos
from src.mb_common.enums import IntentStatus, MintStatus
from src.mb_common.errors import MissingPaymentMetadataError, TokenEngineError
from src.mb_payment.application.schemas import WebhookAck
from src.mb_payment.domain.models import PaymentMint, ProviderPayment, intent_status_from_provider
from src.mb_payment.domain.repository import (
    PaymentIntentRepositoryProtocol,
    PaymentMintRepositoryProtocol,
    PaymentProviderProtocol,
)
from src.mb_payment.infrastructure.persistence import (
    PaymentIntentRepository,
    PaymentMintRepository,
)

logger = logging.getLogger(__name__)


def extract_notification(payload: dict[str, Any]) -> tuple[str | None, str | None]:
    """(type, resource id) from a webhook body.

    Webhooks send {"type": "payment", "data": {"id": ...}}; the legacy IPN
    shape is {"topic": "payment", "id": ...}.
    """
    kind = payload.get("type") or payload.get("topic")
    data = payload.get("data")
    resource_id = data.get("id") if isinstance(data, dict) else None
    if resource_id in (None, ""):
        resource_id = payload.get("id")
    return (
        str(kind) if kind else None,
        str(resource_id) if resource_id not in (None, "") else None,
    )


class PaymentReconciler:
    def __init__(
        self,
        provider: PaymentProviderProtocol,
        gateway: TokenGateway,
        intent_repo: PaymentIntentRepositoryProtocol | None = None,
        mint_repo: PaymentMintRepositoryProtocol | None = None,
    ) -> None:
        self._provider = provider
        self._gateway = gateway
        self._intent_repo: PaymentIntentRepositoryProtocol = intent_repo or PaymentIntentRepository()
        self._mint_repo: PaymentMintRepositoryProtocol = mint_repo or PaymentMintRepository()

    async def handle_notification(
        self, db: AsyncSession, payload: dict[str, Any]
    ) -> WebhookAck:
        kind, payment_id = extract_notification(payload)
        if kind != "payment" or not payment_id:
            logger.info("Ignoring %s notification (id=%s)", kind, payment_id)
            return WebhookAck(
                message="Notification received", type=kind, action=payload.get("action")
            )

        # PaymentLookupError propagates as 502: the provider retries the delivery
        payment = await self._provider.get_payment(payment_id)
        return await self.reconcile_payment(db, payment)

    async def reconcile_payment(self, db: AsyncSession, payment: ProviderPayment) -> WebhookAck:
        if payment.status != "approved":
            await self._record_status(db, payment)
            logger.info("Payment %s is %s, nothing to mint", payment.id, payment.status)
            return WebhookAck(
                message="Payment received but not approved yet", status=payment.status
            )

        recipient = payment.recipient_address
        if not recipient:
            logger.error("Approved payment %s has no recipient_address in metadata", payment.id)
            raise MissingPaymentMetadataError(payment.id, "recipient_address")
        try:
            amount_cents = parse_brl(payment.amount_brl)
        except ValueError as exc:
            logger.error("Approved payment %s has no usable amount: %r", payment.id, payment.amount_brl)
            raise MissingPaymentMetadataError(payment.id, "amount_brl") from exc
        tokens = tokens_from_centavos(amount_cents)
        amount_brl = centavos_to_brl_string(amount_cents)

        claim = await self._claim(db, payment, recipient, tokens)
        if claim is None:
            return await self._already_handled(db, payment.id, amount_brl)

        logger.info(
            "Converting %s BRL to %d tokens for %s (payment %s, attempt %d)",
            amount_brl, claim.token_amount, claim.recipient_address, payment.id, claim.attempts,
        )
        if claim.token_amount == 0:
            await self._mark_minted(db, payment.id, None)
            return WebhookAck(
                message="Deposit below 1 BRL, no tokens minted",
                status=payment.status,
                amount_brl=amount_brl,
                token_amount="0",
            )

        try:
            result = await self._gateway.mint(
                claim.recipient_address, claim.token_amount, wait_for_confirmation=False
            )
        except Exception as exc:
            await self._mark_failed(db, payment.id, str(exc) or exc.__class__.__name__)
            raise

        if not result.success:
            logger.error("Mint for payment %s failed: %s", payment.id, result.error)
            await self._mark_failed(db, payment.id, result.error or "mint failed")
            raise TokenEngineError("Failed to send tokens", details=result.error)

        await self._mark_minted(db, payment.id, result.queue_id)
        logger.info("Tokens sent for payment %s, queue id %s", payment.id, result.queue_id)
        return WebhookAck(
            message="Tokens sent successfully",
            queue_id=result.queue_id,
            status=payment.status,
            amount_brl=amount_brl,
            token_amount=str(claim.token_amount),
        )

    async def _claim(
        self, db: AsyncSession, payment: ProviderPayment, recipient: str, tokens: int
    ) -> PaymentMint | None:
        try:
            await self._intent_repo.update_status(db, payment.id, IntentStatus.APPROVED.value)
            claim = await self._mint_repo.try_claim(db, payment.id, recipient, tokens)
            if claim is None:
                claim = await self._mint_repo.reclaim_failed(db, payment.id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return claim

    async def _already_handled(
        self, db: AsyncSession, payment_id: str, amount_brl: str
    ) -> WebhookAck:
        existing = await self._mint_repo.get(db, payment_id)
        if existing is not None and existing.status == MintStatus.MINTED.value:
            logger.info("Duplicate delivery for payment %s, already minted", payment_id)
            return WebhookAck(
                message="Payment already credited",
                queue_id=existing.queue_id,
                status="approved",
                amount_brl=amount_brl,
                token_amount=str(existing.token_amount),
            )
        logger.info("Payment %s is being minted by another delivery", payment_id)
        return WebhookAck(message="Payment is already being processed", status="approved")

    async def _record_status(self, db: AsyncSession, payment: ProviderPayment) -> None:
        status = intent_status_from_provider(payment.status)
        if status is IntentStatus.PENDING:
            return
        try:
            await self._intent_repo.update_status(db, payment.id, status.value)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    async def _mark_minted(self, db: AsyncSession, payment_id: str, queue_id: str | None) -> None:
        try:
            await self._mint_repo.mark_minted(db, payment_id, queue_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    async def _mark_failed(self, db: AsyncSession, payment_id: str, error: str) -> None:
        try:
            await self._mint_repo.mark_failed(db, payment_id, error)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
