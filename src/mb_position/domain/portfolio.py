"""Aggregate statistics over a user's positions, as shown on the profile page.

Only positions with shares count. Gains are the payouts of won markets,
losses the amount invested in lost ones. Percentages are rounded to 2 places.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from src.mb_position.domain.calculator import PositionSummary
from src.mb_position.domain.units import to_token_decimal

_PERCENT_PLACES = Decimal("0.01")


@dataclass(frozen=True)
class PortfolioStats:
    total_invested_wei: int = 0
    total_potential_winnings_wei: int = 0
    active_markets: int = 0
    resolved_markets: int = 0
    won_markets: int = 0
    lost_markets: int = 0
    win_rate: Decimal = Decimal("0")
    roi: Decimal = Decimal("0")
    biggest_win_wei: int = 0
    total_gains_wei: int = 0
    total_losses_wei: int = 0

    @property
    def net_wei(self) -> int:
        return self.total_gains_wei - self.total_losses_wei

    @property
    def total_invested(self) -> Decimal:
        return to_token_decimal(self.total_invested_wei)

    @property
    def total_potential_winnings(self) -> Decimal:
        return to_token_decimal(self.total_potential_winnings_wei)


def _percent(numerator: int, denominator: int) -> Decimal:
    if denominator <= 0:
        return Decimal("0")
    return (Decimal(numerator) * 100 / Decimal(denominator)).quantize(
        _PERCENT_PLACES, rounding=ROUND_HALF_UP
    )


def summarize_portfolio(positions: Iterable[PositionSummary]) -> PortfolioStats:
    invested = winnings = gains = losses = biggest = 0
    active = resolved = won = lost = 0

    for position in positions:
        if not position.has_shares:
            continue
        invested += position.invested_wei
        winnings += position.winnings.amount_wei
        if not position.resolved:
            active += 1
            continue
        resolved += 1
        if position.is_winner:
            won += 1
            gains += position.winnings.amount_wei
            biggest = max(biggest, position.winnings.amount_wei)
        else:
            lost += 1
            losses += position.invested_wei

    return PortfolioStats(
        total_invested_wei=invested,
        total_potential_winnings_wei=winnings,
        active_markets=active,
        resolved_markets=resolved,
        won_markets=won,
        lost_markets=lost,
        win_rate=_percent(won, resolved),
        roi=_percent(winnings - invested, invested),
        biggest_win_wei=biggest,
        total_gains_wei=gains,
        total_losses_wei=losses,
    )
