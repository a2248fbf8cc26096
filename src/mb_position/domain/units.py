"""Token base units. Shares and balances are 18-decimal integers (wei)."""

from decimal import Decimal

TOKEN_DECIMALS = 18
WEI_PER_TOKEN = 10**TOKEN_DECIMALS


def to_token_decimal(wei: int) -> Decimal:
    """Exact token amount for a base-unit integer: 1500000000000000000 -> Decimal('1.5').

    Built from the digit tuple, so no context precision applies.
    """
    sign, digits, exponent = Decimal(wei).as_tuple()
    return Decimal((sign, digits, int(exponent) - TOKEN_DECIMALS))


def format_token(wei: int) -> str:
    """Plain decimal string without exponent or trailing zeros: '1.5', '100', '0'."""
    text = format(to_token_decimal(wei), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text == "-0" else text
