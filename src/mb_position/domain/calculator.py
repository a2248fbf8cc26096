"""Position value and settlement payouts for binary markets.

Parimutuel payout: the whole pool (A + B shares) goes to the winning side,
split in proportion to each holder's winning shares:

    payout = total_pool * user_shares // option_total

Everything is integer base units (wei). Flooring means the sum over all
winners never exceeds the pool; the shortfall is at most one wei per holder.
Decimal appears only in the display properties.
"""

from dataclasses import dataclass
from decimal import Decimal

from src.mb_common.enums import MarketOutcome
from src.mb_position.domain.models import Market, SharesBalance
from src.mb_position.domain.units import to_token_decimal

_OPTIONS = (MarketOutcome.OPTION_A, MarketOutcome.OPTION_B)


@dataclass(frozen=True)
class Winnings:
    amount_wei: int
    is_winner: bool | None  # None while the market is unresolved

    @property
    def amount(self) -> Decimal:
        return to_token_decimal(self.amount_wei)


@dataclass(frozen=True)
class OptionPayouts:
    """What the user receives if A wins and if B wins."""

    option_a_wei: int
    option_b_wei: int

    @property
    def option_a(self) -> Decimal:
        return to_token_decimal(self.option_a_wei)

    @property
    def option_b(self) -> Decimal:
        return to_token_decimal(self.option_b_wei)


@dataclass(frozen=True)
class PositionSummary:
    market_id: int
    resolved: bool
    invested_wei: int
    winnings: Winnings
    payouts: OptionPayouts

    @property
    def has_shares(self) -> bool:
        return self.invested_wei > 0

    @property
    def is_winner(self) -> bool | None:
        return self.winnings.is_winner

    @property
    def profit_wei(self) -> int:
        return self.winnings.amount_wei - self.invested_wei

    @property
    def invested(self) -> Decimal:
        return to_token_decimal(self.invested_wei)

    @property
    def profit(self) -> Decimal:
        return to_token_decimal(self.profit_wei)


def candidate_payout(total_pool: int, user_shares: int, option_total: int) -> int:
    """Payout if this option wins. 0 for no shares or an empty option pool."""
    if user_shares <= 0 or option_total <= 0:
        return 0
    return total_pool * user_shares // option_total


def compute_invested_wei(shares: SharesBalance) -> int:
    # shares are bought 1:1 with tokens
    return shares.total


def compute_invested(shares: SharesBalance) -> Decimal:
    return to_token_decimal(compute_invested_wei(shares))


def option_payouts(market: Market, shares: SharesBalance) -> OptionPayouts:
    total_pool = market.total_shares
    return OptionPayouts(
        option_a_wei=candidate_payout(
            total_pool, shares.option_a_shares, market.total_option_a_shares
        ),
        option_b_wei=candidate_payout(
            total_pool, shares.option_b_shares, market.total_option_b_shares
        ),
    )


def compute_winnings(market: Market, shares: SharesBalance) -> Winnings:
    total_pool = market.total_shares
    winner = market.winning_option

    if winner is None:
        if total_pool == 0:
            return Winnings(amount_wei=0, is_winner=None)
        best = max(
            candidate_payout(total_pool, shares.for_option(o), market.option_total(o))
            for o in _OPTIONS
        )
        return Winnings(amount_wei=best, is_winner=None)

    user_winning = shares.for_option(winner)
    if user_winning <= 0:
        return Winnings(amount_wei=0, is_winner=False)
    return Winnings(
        amount_wei=candidate_payout(total_pool, user_winning, market.option_total(winner)),
        is_winner=True,
    )


def summarize_position(market_id: int, market: Market, shares: SharesBalance) -> PositionSummary:
    return PositionSummary(
        market_id=market_id,
        resolved=market.winning_option is not None,
        invested_wei=compute_invested_wei(shares),
        winnings=compute_winnings(market, shares),
        payouts=option_payouts(market, shares),
    )
