"""mb_chain REST API: faucet claim."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.mb_chain.api.dependencies import get_faucet_service
from src.mb_chain.application.faucet import FaucetService
from src.mb_chain.application.schemas import ClaimTokenRequest
from src.mb_common.response import ApiResponse, success_response

router = APIRouter(tags=["tokens"])


@router.post("/claimToken")
async def claim_token(
    body: ClaimTokenRequest,
    service: Annotated[FaucetService, Depends(get_faucet_service)],
    request: Request,
) -> ApiResponse:
    data = await service.claim(body.address)
    resp = success_response(data.to_wire(), message=data.message)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
