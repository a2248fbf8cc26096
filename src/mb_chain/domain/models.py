"""Domain models for mb_chain: pure dataclasses, no httpx dependency."""

from dataclasses import dataclass

from src.mb_common.enums import TxState

BURN_ADDRESS = "0x0000000000000000000000000000000000000000"

# thirdweb Engine transaction statuses
_ENGINE_FAILED_STATUSES = frozenset({"errored", "cancelled"})


def tx_state_from_engine(status: str | None) -> TxState:
    """Map an engine status string onto pending/mined/failed."""
    normalized = (status or "").lower()
    if normalized == "mined":
        return TxState.MINED
    if normalized in _ENGINE_FAILED_STATUSES:
        return TxState.FAILED
    return TxState.PENDING


@dataclass
class TransactionStatus:
    queue_id: str
    state: TxState
    raw_status: str | None = None
    error: str | None = None


@dataclass
class MintRequest:
    """Issue `amount` whole tokens to `to_address`, signed by the operator wallet."""

    to_address: str
    amount: int
    wait_for_confirmation: bool = False

    endpoint = "mint-to"

    def acting_wallet(self, operator_wallet: str) -> str:
        return operator_wallet

    @property
    def destination(self) -> str:
        return self.to_address


@dataclass
class BurnRequest:
    """Transfer `amount` tokens from the user's wallet to the null address."""

    from_address: str
    amount: int
    wait_for_confirmation: bool = False

    endpoint = "transfer"

    def acting_wallet(self, operator_wallet: str) -> str:
        # The engine acts as the user's wallet; the user must have approved it.
        return self.from_address

    @property
    def destination(self) -> str:
        return BURN_ADDRESS


TokenRequest = MintRequest | BurnRequest


@dataclass
class TokenTransferResult:
    success: bool
    queue_id: str | None
    is_mined: bool | None = None
    error: str | None = None

    @classmethod
    def failed(cls, error: str, queue_id: str | None = None) -> "TokenTransferResult":
        return cls(success=False, queue_id=queue_id, is_mined=None, error=error)
