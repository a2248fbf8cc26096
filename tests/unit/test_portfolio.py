"""Tests for portfolio statistics."""

from decimal import Decimal

from src.mb_common.enums import MarketOutcome
from src.mb_position.domain.calculator import summarize_position
from src.mb_position.domain.models import Market, SharesBalance
from src.mb_position.domain.portfolio import summarize_portfolio

RESOLVED_A = Market(
    total_option_a_shares=700, total_option_b_shares=300,
    resolved=True, outcome=MarketOutcome.OPTION_A,
)
ACTIVE = Market(total_option_a_shares=500, total_option_b_shares=500)


def _positions() -> list:  # type: ignore[type-arg]
    return [
        summarize_position(1, RESOLVED_A, SharesBalance(option_a_shares=70)),   # won 100
        summarize_position(2, RESOLVED_A, SharesBalance(option_b_shares=50)),   # lost 50
        summarize_position(3, ACTIVE, SharesBalance(option_a_shares=100)),      # potential 200
        summarize_position(4, ACTIVE, SharesBalance()),                         # no shares
    ]


class TestSummarizePortfolio:
    def test_counts(self) -> None:
        stats = summarize_portfolio(_positions())
        assert stats.active_markets == 1
        assert stats.resolved_markets == 2
        assert stats.won_markets == 1
        assert stats.lost_markets == 1

    def test_totals(self) -> None:
        stats = summarize_portfolio(_positions())
        assert stats.total_invested_wei == 220
        assert stats.total_potential_winnings_wei == 300
        assert stats.total_gains_wei == 100
        assert stats.total_losses_wei == 50
        assert stats.net_wei == 50
        assert stats.biggest_win_wei == 100

    def test_rates(self) -> None:
        stats = summarize_portfolio(_positions())
        assert stats.win_rate == Decimal("50.00")
        # (300 - 220) / 220 = 36.3636...
        assert stats.roi == Decimal("36.36")

    def test_empty(self) -> None:
        stats = summarize_portfolio([])
        assert stats.total_invested_wei == 0
        assert stats.win_rate == Decimal("0")
        assert stats.roi == Decimal("0")

    def test_accepts_generator(self) -> None:
        stats = summarize_portfolio(p for p in _positions())
        assert stats.resolved_markets == 2
