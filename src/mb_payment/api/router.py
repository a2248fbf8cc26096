"""mb_payment REST API: PIX deposit intents and the Mercado Pago webhook."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.mb_common.database import get_db_session
from src.mb_common.errors import ValidationError
from src.mb_common.response import ApiResponse, success_response, utc_timestamp
from src.mb_payment.api.dependencies import (
    get_intent_service,
    get_polling_intent_service,
    get_reconciler,
)
from src.mb_payment.application.intent_service import PaymentIntentService
from src.mb_payment.application.reconciler import PaymentReconciler
from src.mb_payment.application.schemas import CreatePaymentRequest

router = APIRouter(prefix="/pix", tags=["pix"])

# IPN deliveries may carry the notification in the query string only
_WEBHOOK_QUERY_KEYS = ("type", "topic", "id", "action")


@router.post("/create-payment")
async def create_payment(
    body: CreatePaymentRequest,
    service: Annotated[PaymentIntentService, Depends(get_intent_service)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await service.create_intent(db, body.amount, body.recipient_address, body.request_id)
    resp = success_response(data.to_wire())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/create-payment")
async def get_payment_status(
    service: Annotated[PaymentIntentService, Depends(get_polling_intent_service)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    preference_id: Annotated[str, Query(alias="preferenceId")] = "",
) -> ApiResponse:
    data = await service.query_intent(db, preference_id)
    resp = success_response(data.to_wire())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/webhook")
async def payment_webhook(
    reconciler: Annotated[PaymentReconciler, Depends(get_reconciler)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    payload = await _notification_payload(request)
    ack = await reconciler.handle_notification(db, payload)
    resp = success_response(ack.to_wire(), message=ack.message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/webhook")
async def webhook_liveness(request: Request) -> ApiResponse:
    resp = success_response(
        {"message": "PIX webhook is up", "timestamp": utc_timestamp()}
    )
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


async def _notification_payload(request: Request) -> dict[str, Any]:
    body = await request.body()
    payload: Any = {}
    if body:
        try:
            payload = await request.json()
        except ValueError as exc:
            raise ValidationError("Webhook body is not valid JSON") from exc
    if not isinstance(payload, dict):
        raise ValidationError("Webhook body must be a JSON object")

    params = request.query_params
    for key in _WEBHOOK_QUERY_KEYS:
        if key not in payload and params.get(key):
            payload[key] = params[key]
    if params.get("data.id") and not isinstance(payload.get("data"), dict):
        payload["data"] = {"id": params["data.id"]}
    return payload
