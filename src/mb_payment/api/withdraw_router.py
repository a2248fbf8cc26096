"""mb_payment REST API: token withdrawal to a PIX key."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.mb_common.database import get_db_session
from src.mb_common.response import ApiResponse, success_response
from src.mb_payment.api.dependencies import get_withdrawal_service
from src.mb_payment.application.schemas import WithdrawRequest
from src.mb_payment.application.withdrawal_service import WithdrawalService

router = APIRouter(tags=["withdrawals"])


@router.post("/withdraw")
async def withdraw(
    body: WithdrawRequest,
    service: Annotated[WithdrawalService, Depends(get_withdrawal_service)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await service.request_withdrawal(
        db, body.amount, body.user_address, body.pix_key, body.burn_queue_id
    )
    resp = success_response(data.to_wire(), message=data.message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
