"""Pydantic schemas for mb_position.

Share amounts are 18-decimal integers. They travel as JSON integers or
digit strings on the way in and as strings on the way out, since JS
clients cannot hold them in a Number.
"""

from typing import Any

from pydantic import Field, field_validator

from src.mb_common.enums import MarketOutcome
from src.mb_common.schemas import CamelModel
from src.mb_position.domain.models import Market, SharesBalance, outcome_from_contract


class MarketIn(CamelModel):
    question: str = ""
    option_a: str = ""
    option_b: str = ""
    end_time: int = 0
    outcome: MarketOutcome = MarketOutcome.UNRESOLVED
    total_option_a_shares: int = Field(ge=0)
    total_option_b_shares: int = Field(ge=0)
    resolved: bool = False

    @field_validator("outcome", mode="before")
    @classmethod
    def _parse_outcome(cls, value: Any) -> MarketOutcome:
        return outcome_from_contract(value)

    def to_domain(self) -> Market:
        return Market(
            total_option_a_shares=self.total_option_a_shares,
            total_option_b_shares=self.total_option_b_shares,
            resolved=self.resolved,
            outcome=self.outcome,
            question=self.question,
            option_a=self.option_a,
            option_b=self.option_b,
            end_time=self.end_time,
        )


class SharesIn(CamelModel):
    option_a_shares: int = Field(default=0, ge=0)
    option_b_shares: int = Field(default=0, ge=0)

    def to_domain(self) -> SharesBalance:
        return SharesBalance(
            option_a_shares=self.option_a_shares, option_b_shares=self.option_b_shares
        )


class EvaluatePositionRequest(CamelModel):
    market_id: int = Field(ge=0)
    market: MarketIn
    shares: SharesIn


class PortfolioRequest(CamelModel):
    positions: list[EvaluatePositionRequest] = Field(default_factory=list)


class PositionResponse(CamelModel):
    market_id: int
    resolved: bool
    invested: str
    invested_wei: str
    potential_winnings: str
    potential_winnings_wei: str
    is_winner: bool | None = None
    profit: str
    payout_if_option_a: str
    payout_if_option_b: str


class PortfolioResponse(CamelModel):
    total_invested: str
    total_potential_winnings: str
    active_markets: int
    resolved_markets: int
    won_markets: int
    lost_markets: int
    win_rate: str
    roi: str
    biggest_win: str
    total_gains: str
    total_losses: str
    net_result: str
