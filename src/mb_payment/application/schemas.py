"""Pydantic schemas for mb_payment API requests and responses."""

from typing import Any

from src.mb_common.schemas import CamelModel


class CreatePaymentRequest(CamelModel):
    # str or number on the wire; parsed to centavos by the service
    amount: Any = None
    recipient_address: str = ""
    request_id: str | None = None


class CreatedIntent(CamelModel):
    qr_code: str | None = None
    qr_code_base64: str | None = None
    payment_id: str
    # legacy alias kept for clients that poll with ?preferenceId=
    preference_id: str
    amount: str
    amount_cents: int
    recipient_address: str
    status: str


class IntentStatusResponse(CamelModel):
    status: str
    payment_id: str
    status_detail: str | None = None
    queue_id: str | None = None


class WebhookAck(CamelModel):
    success: bool = True
    message: str
    queue_id: str | None = None
    status: str | None = None
    amount_brl: str | None = None
    token_amount: str | None = None
    type: str | None = None
    action: str | None = None


class WithdrawRequest(CamelModel):
    amount: Any = None
    user_address: str = ""
    pix_key: str = ""
    burn_queue_id: str | None = None


class WithdrawalResponse(CamelModel):
    success: bool = True
    message: str
    amount: str
    user_address: str
    pix_key: str
    pix_key_type: str
    withdrawal_id: int
    burn_queue_id: str
