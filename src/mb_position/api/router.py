"""mb_position REST API: position valuation and portfolio statistics.

Stateless: the caller passes the market and share balances read from the
contract.
"""

from fastapi import APIRouter, Request

from src.mb_common.response import ApiResponse, success_response
from src.mb_position.application.schemas import EvaluatePositionRequest, PortfolioRequest
from src.mb_position.application.service import PositionApplicationService

router = APIRouter(prefix="/positions", tags=["positions"])

_service = PositionApplicationService()


@router.post("/evaluate")
async def evaluate_position(body: EvaluatePositionRequest, request: Request) -> ApiResponse:
    data = _service.evaluate(body)
    resp = success_response(data.to_wire())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("/portfolio")
async def portfolio(body: PortfolioRequest, request: Request) -> ApiResponse:
    data = _service.portfolio(body)
    resp = success_response(data.to_wire())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
