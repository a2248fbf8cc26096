"""Global enums. Values must match DB CHECK constraints exactly."""

from enum import Enum


class IntentStatus(str, Enum):
    """Lifecycle of a PIX payment intent. approved/rejected are terminal."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class MintStatus(str, Enum):
    """Exactly-once claim on a provider payment id (payment_mints.status)."""
    CLAIMED = "CLAIMED"
    MINTED = "MINTED"
    FAILED = "FAILED"


class WithdrawalStatus(str, Enum):
    PAYOUT_PENDING = "PAYOUT_PENDING"
    PAID = "PAID"
    FAILED = "FAILED"


class TxState(str, Enum):
    PENDING = "pending"
    MINED = "mined"
    FAILED = "failed"


class MarketOutcome(str, Enum):
    UNRESOLVED = "UNRESOLVED"
    OPTION_A = "OPTION_A"
    OPTION_B = "OPTION_B"


# Mercado Pago payment statuses that will never become "approved"
PROVIDER_REJECTED_STATUSES = frozenset({"rejected", "cancelled", "refunded", "charged_back"})
