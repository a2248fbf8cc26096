"""Domain models for mb_position: on-chain market state as read from the contract."""

from dataclasses import dataclass

from src.mb_common.enums import MarketOutcome

# Contract enum order: UNRESOLVED=0, OPTION_A=1, OPTION_B=2
_CONTRACT_OUTCOMES = (MarketOutcome.UNRESOLVED, MarketOutcome.OPTION_A, MarketOutcome.OPTION_B)


def outcome_from_contract(value: int | str | MarketOutcome) -> MarketOutcome:
    """Accept the contract's uint8 or the enum name; ValueError otherwise."""
    if isinstance(value, MarketOutcome):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Unknown market outcome: {value!r}")
    if isinstance(value, int):
        if 0 <= value < len(_CONTRACT_OUTCOMES):
            return _CONTRACT_OUTCOMES[value]
        raise ValueError(f"Unknown market outcome: {value!r}")
    text = str(value).strip()
    if text.isdigit():
        return outcome_from_contract(int(text))
    try:
        return MarketOutcome(text.upper())
    except ValueError as exc:
        raise ValueError(f"Unknown market outcome: {value!r}") from exc


@dataclass(frozen=True)
class Market:
    total_option_a_shares: int
    total_option_b_shares: int
    resolved: bool = False
    outcome: MarketOutcome = MarketOutcome.UNRESOLVED
    question: str = ""
    option_a: str = ""
    option_b: str = ""
    end_time: int = 0

    @property
    def total_shares(self) -> int:
        return self.total_option_a_shares + self.total_option_b_shares

    @property
    def winning_option(self) -> MarketOutcome | None:
        """The settled side, or None while the market can still go either way."""
        if self.resolved and self.outcome is not MarketOutcome.UNRESOLVED:
            return self.outcome
        return None

    def option_total(self, option: MarketOutcome) -> int:
        if option is MarketOutcome.OPTION_A:
            return self.total_option_a_shares
        if option is MarketOutcome.OPTION_B:
            return self.total_option_b_shares
        raise ValueError(f"Not a market option: {option}")


@dataclass(frozen=True)
class SharesBalance:
    option_a_shares: int = 0
    option_b_shares: int = 0

    @property
    def total(self) -> int:
        return self.option_a_shares + self.option_b_shares

    def for_option(self, option: MarketOutcome) -> int:
        if option is MarketOutcome.OPTION_A:
            return self.option_a_shares
        if option is MarketOutcome.OPTION_B:
            return self.option_b_shares
        raise ValueError(f"Not a market option: {option}")
