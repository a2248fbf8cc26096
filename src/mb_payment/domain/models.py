"""Domain models for mb_payment: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from src.mb_common.enums import PROVIDER_REJECTED_STATUSES, IntentStatus


def intent_status_from_provider(status: str) -> IntentStatus:
    """Collapse a Mercado Pago payment status onto pending/approved/rejected."""
    if status == "approved":
        return IntentStatus.APPROVED
    if status in PROVIDER_REJECTED_STATUSES:
        return IntentStatus.REJECTED
    return IntentStatus.PENDING


@dataclass
class PaymentIntent:
    id: str                          # provider-assigned payment id
    idempotency_key: str
    recipient_address: str
    amount_cents: int                # centavos
    status: str                      # IntentStatus value
    notification_url: str | None = None
    qr_code: str | None = None
    qr_code_base64: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class ProviderPayment:
    """Snapshot of a Mercado Pago payment as returned by /v1/payments."""

    id: str
    status: str
    status_detail: str | None = None
    transaction_amount: Any = None
    external_reference: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    qr_code: str | None = None
    qr_code_base64: str | None = None

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "ProviderPayment":
        poi = payload.get("point_of_interaction") or {}
        transaction_data = poi.get("transaction_data") or {}
        metadata = payload.get("metadata")
        return cls(
            id=str(payload.get("id", "")),
            status=str(payload.get("status") or "pending"),
            status_detail=payload.get("status_detail"),
            transaction_amount=payload.get("transaction_amount"),
            external_reference=payload.get("external_reference"),
            metadata=metadata if isinstance(metadata, dict) else {},
            qr_code=transaction_data.get("qr_code"),
            qr_code_base64=transaction_data.get("qr_code_base64"),
        )

    @property
    def recipient_address(self) -> str | None:
        value = self.metadata.get("recipient_address")
        return str(value) if value else None

    @property
    def amount_brl(self) -> Any:
        """Deposit amount attached at creation time, falling back to the charged amount."""
        value = self.metadata.get("amount_brl")
        return value if value not in (None, "") else self.transaction_amount


@dataclass
class PaymentMint:
    """Exactly-once record: one row per provider payment id."""

    payment_id: str
    recipient_address: str
    token_amount: int
    status: str                      # MintStatus value
    queue_id: str | None = None
    attempts: int = 1
    last_error: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class Withdrawal:
    id: int                          # BIGSERIAL
    user_address: str
    amount_cents: int                # payout in centavos (whole tokens x 100)
    token_amount: int
    pix_key: str
    pix_key_type: str
    burn_queue_id: str
    status: str                      # WithdrawalStatus value
    created_at: datetime | None = None
