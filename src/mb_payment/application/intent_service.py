"""PaymentIntentService: creates PIX charges and reports their status.

Idempotency key = sha256(recipient | amount_cents | request_id). It is sent
to Mercado Pago as X-Idempotency-Key and stored on the intent, so a repeated
create with the same key returns the stored intent without a provider call.
Clients that send no requestId get a random nonce (every call is new).
"""

import hashlib
import logging
import secrets
from typing import Any
from urllib.parse import urlsplit

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import PaymentProviderConfig
from src.mb_common.centavos import centavos_to_brl_string, parse_brl, validate_deposit_amount
from src.mb_common.enums import IntentStatus
from src.mb_common.errors import (
    InvalidAmountError,
    InvalidNotificationUrlError,
    MissingFieldError,
    PaymentCodeMissingError,
)
from src.mb_payment.application.reconciler import PaymentReconciler
from src.mb_payment.application.schemas import CreatedIntent, IntentStatusResponse
from src.mb_payment.domain.models import (
    PaymentIntent,
    ProviderPayment,
    intent_status_from_provider,
)
from src.mb_payment.domain.repository import (
    PaymentIntentRepositoryProtocol,
    PaymentProviderProtocol,
)
from src.mb_payment.infrastructure.persistence import PaymentIntentRepository

logger = logging.getLogger(__name__)

WEBHOOK_PATH = "/api/pix/webhook"


def idempotency_key(recipient_address: str, amount_cents: int, request_id: str) -> str:
    raw = f"{recipient_address}|{amount_cents}|{request_id}"
    return hashlib.sha256(raw.encode()).hexdigest()


def build_notification_url(public_base_url: str) -> str:
    """Webhook URL under PUBLIC_BASE_URL; InvalidNotificationUrlError if not absolute http(s)."""
    url = f"{public_base_url.rstrip('/')}{WEBHOOK_PATH}"
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or not parts.hostname:
        raise InvalidNotificationUrlError(url)
    return url


def accepts_webhook(url: str) -> bool:
    # Mercado Pago rejects plain-http local URLs; those clients poll instead.
    return url.startswith("https://") or "ngrok" in url


class PaymentIntentService:
    def __init__(
        self,
        config: PaymentProviderConfig,
        provider: PaymentProviderProtocol,
        reconciler: PaymentReconciler | None = None,
        repo: PaymentIntentRepositoryProtocol | None = None,
    ) -> None:
        self._config = config
        self._provider = provider
        self._reconciler = reconciler
        self._repo: PaymentIntentRepositoryProtocol = repo or PaymentIntentRepository()

    async def create_intent(
        self,
        db: AsyncSession,
        amount: Any,
        recipient_address: str,
        request_id: str | None = None,
    ) -> CreatedIntent:
        if amount in (None, ""):
            raise MissingFieldError("amount")
        if not recipient_address:
            raise MissingFieldError("recipientAddress")
        try:
            amount_cents = parse_brl(amount)
            validate_deposit_amount(amount_cents)
        except ValueError as exc:
            raise InvalidAmountError(amount) from exc

        notification_url = build_notification_url(self._config.public_base_url)
        key = idempotency_key(
            recipient_address, amount_cents, request_id or secrets.token_hex(16)
        )

        existing = await self._repo.get_by_idempotency_key(db, key)
        if existing is not None:
            logger.info("Replaying intent %s for key %s", existing.id, key[:12])
            return self._to_created(existing)

        payload = self._build_payload(amount_cents, recipient_address, key)
        if accepts_webhook(notification_url):
            payload["notification_url"] = notification_url
        else:
            logger.info("Local base URL %s: webhook omitted, client must poll", notification_url)

        payment = await self._provider.create_payment(payload, key)
        if not payment.qr_code and not payment.qr_code_base64:
            logger.error("Payment %s came back without a PIX code", payment.id)
            raise PaymentCodeMissingError(payment.id)

        intent = PaymentIntent(
            id=payment.id,
            idempotency_key=key,
            recipient_address=recipient_address,
            amount_cents=amount_cents,
            status=intent_status_from_provider(payment.status).value,
            notification_url=payload.get("notification_url"),
            qr_code=payment.qr_code,
            qr_code_base64=payment.qr_code_base64,
        )
        try:
            stored = await self._repo.insert(db, intent)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info(
            "Created PIX intent %s: %s BRL for %s",
            stored.id, centavos_to_brl_string(amount_cents), recipient_address,
        )
        return self._to_created(stored)

    async def query_intent(self, db: AsyncSession, payment_id: str) -> IntentStatusResponse:
        if not payment_id:
            raise MissingFieldError("preferenceId")

        payment = await self._provider.find_payment(payment_id)
        if payment is None:
            stored = await self._repo.get_by_id(db, payment_id)
            reference = stored.idempotency_key if stored is not None else payment_id
            payment = await self._provider.search_by_reference(reference)
        if payment is None:
            return IntentStatusResponse(status=IntentStatus.PENDING.value, payment_id=payment_id)

        queue_id = None
        if payment.status == "approved" and self._reconciler is not None:
            ack = await self._reconciler.reconcile_payment(db, payment)
            queue_id = ack.queue_id
        else:
            await self._record_status(db, payment)

        return IntentStatusResponse(
            status=payment.status,
            payment_id=payment.id,
            status_detail=payment.status_detail,
            queue_id=queue_id,
        )

    def _build_payload(self, amount_cents: int, recipient_address: str, key: str) -> dict[str, Any]:
        amount_brl = centavos_to_brl_string(amount_cents)
        return {
            "transaction_amount": amount_cents / 100,
            "description": self._config.description,
            "payment_method_id": "pix",
            "payer": {"email": self._config.payer_email},
            "external_reference": key,
            "metadata": {
                "recipient_address": recipient_address,
                "amount_brl": amount_brl,
                "conversion_rate": "1",
            },
        }

    async def _record_status(self, db: AsyncSession, payment: ProviderPayment) -> None:
        status = intent_status_from_provider(payment.status)
        if status is IntentStatus.PENDING:
            return
        try:
            await self._repo.update_status(db, payment.id, status.value)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    @staticmethod
    def _to_created(intent: PaymentIntent) -> CreatedIntent:
        return CreatedIntent(
            qr_code=intent.qr_code,
            qr_code_base64=intent.qr_code_base64,
            payment_id=intent.id,
            preference_id=intent.id,
            amount=centavos_to_brl_string(intent.amount_cents),
            amount_cents=intent.amount_cents,
            recipient_address=intent.recipient_address,
            status=intent.status,
        )
