"""PositionApplicationService: schema <-> domain mapping around the calculator."""

from src.mb_position.application.schemas import (
    EvaluatePositionRequest,
    PortfolioRequest,
    PortfolioResponse,
    PositionResponse,
)
from src.mb_position.domain.calculator import PositionSummary, summarize_position
from src.mb_position.domain.portfolio import summarize_portfolio
from src.mb_position.domain.units import format_token


def _summarize(item: EvaluatePositionRequest) -> PositionSummary:
    return summarize_position(item.market_id, item.market.to_domain(), item.shares.to_domain())


class PositionApplicationService:
    def evaluate(self, body: EvaluatePositionRequest) -> PositionResponse:
        summary = _summarize(body)
        return PositionResponse(
            market_id=summary.market_id,
            resolved=summary.resolved,
            invested=format_token(summary.invested_wei),
            invested_wei=str(summary.invested_wei),
            potential_winnings=format_token(summary.winnings.amount_wei),
            potential_winnings_wei=str(summary.winnings.amount_wei),
            is_winner=summary.is_winner,
            profit=format_token(summary.profit_wei),
            payout_if_option_a=format_token(summary.payouts.option_a_wei),
            payout_if_option_b=format_token(summary.payouts.option_b_wei),
        )

    def portfolio(self, body: PortfolioRequest) -> PortfolioResponse:
        stats = summarize_portfolio(_summarize(item) for item in body.positions)
        return PortfolioResponse(
            total_invested=format_token(stats.total_invested_wei),
            total_potential_winnings=format_token(stats.total_potential_winnings_wei),
            active_markets=stats.active_markets,
            resolved_markets=stats.resolved_markets,
            won_markets=stats.won_markets,
            lost_markets=stats.lost_markets,
            win_rate=str(stats.win_rate),
            roi=str(stats.roi),
            biggest_win=format_token(stats.biggest_win_wei),
            total_gains=format_token(stats.total_gains_wei),
            total_losses=format_token(stats.total_losses_wei),
            net_result=format_token(stats.net_wei),
        )
