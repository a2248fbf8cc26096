"""Integer arithmetic utilities for BRL amounts.

Fiat amounts are stored and compared as int centavos. Decimal is used only
to parse user/provider input at the boundary; nothing is computed in float.
1 BRL = 1 token, rounded down.
"""

from decimal import ROUND_DOWN, Decimal, InvalidOperation

MIN_AMOUNT_CENTAVOS = 1  # R$ 0,01
MAX_AMOUNT_CENTAVOS = 10_000_000  # R$ 100.000,00 per PIX charge or withdrawal
CENTAVOS_PER_TOKEN = 100


def parse_brl(value: object) -> int:
    """Parse a BRL amount ('10.50', 10.5, 10) into centavos, truncating sub-centavo digits.

    Raises ValueError for anything that is not a finite number.
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Not a BRL amount: {value!r}")
    try:
        # str() first so floats like 0.1 parse as written, not as their binary expansion
        amount = Decimal(str(value).strip().replace(",", "."))
    except InvalidOperation as exc:
        raise ValueError(f"Not a BRL amount: {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"Not a BRL amount: {value!r}")
    return int((amount * 100).to_integral_value(rounding=ROUND_DOWN))


def validate_deposit_amount(centavos: int) -> None:
    """Validate that the amount is between R$ 0,01 and R$ 100.000,00."""
    if centavos < MIN_AMOUNT_CENTAVOS:
        raise ValueError(f"Amount must be at least R$ 0,01, got {centavos} centavos")
    if centavos > MAX_AMOUNT_CENTAVOS:
        raise ValueError(f"Amount must be at most R$ 100.000,00, got {centavos} centavos")


def tokens_from_centavos(centavos: int) -> int:
    """Whole tokens for a fiat amount: floor(BRL)."""
    if centavos <= 0:
        return 0
    return centavos // CENTAVOS_PER_TOKEN


def centavos_to_display(centavos: int) -> str:
    """Convert centavos to display string: 150050 -> 'R$ 1.500,50', -1200 -> '-R$ 12,00'."""
    sign = "-" if centavos < 0 else ""
    abs_centavos = -centavos if centavos < 0 else centavos
    reais = f"{abs_centavos // 100:,}".replace(",", ".")
    return f"{sign}R$ {reais},{abs_centavos % 100:02d}"


def centavos_to_brl_string(centavos: int) -> str:
    """Plain decimal string for provider payloads and metadata: 1050 -> '10.50'."""
    sign = "-" if centavos < 0 else ""
    abs_centavos = -centavos if centavos < 0 else centavos
    return f"{sign}{abs_centavos // 100}.{abs_centavos % 100:02d}"
