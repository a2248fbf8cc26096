"""Pydantic schemas for mb_chain API."""

from src.mb_common.schemas import CamelModel


class ClaimTokenRequest(CamelModel):
    address: str = ""


class ClaimTokenResponse(CamelModel):
    message: str
    queue_id: str
    amount: int
