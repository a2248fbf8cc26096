"""Transaction confirmation poller, shared by the mint and burn flows.

Polls the engine's transaction status at a fixed interval up to a bounded
number of attempts (15 x 3s by default, about 45s). Running out of attempts
is not a failure: the caller gets "submitted but unconfirmed".

A failed status fetch (network error, non-2xx, malformed body) counts as
"not yet mined" and polling continues. An engine-reported terminal state
(errored/cancelled) stops polling at once.
"""

import logging
from typing import Protocol

import httpx

from src.mb_chain.domain.models import TransactionStatus
from src.mb_common.enums import TxState
from src.mb_common.retry import poll_until

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 15
DEFAULT_INTERVAL_SECONDS = 3.0


class TransactionStatusSource(Protocol):
    async def get_transaction_status(self, queue_id: str) -> TransactionStatus: ...


class TransactionPoller:
    def __init__(
        self,
        source: TransactionStatusSource,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        interval: float = DEFAULT_INTERVAL_SECONDS,
    ) -> None:
        self._source = source
        self.max_attempts = max_attempts
        self.interval = interval

    async def wait_for_status(self, queue_id: str) -> TransactionStatus:
        """Poll until mined, failed, or the attempt ceiling; return the last state seen."""
        result = await poll_until(
            lambda: self._source.get_transaction_status(queue_id),
            is_done=lambda status: status.state is TxState.MINED,
            is_terminal=lambda status: status.state is TxState.FAILED,
            max_attempts=self.max_attempts,
            interval=self.interval,
            transient=(httpx.HTTPError, ValueError),
            description=f"tx status {queue_id}",
        )
        if result.value is None:
            return TransactionStatus(queue_id=queue_id, state=TxState.PENDING)
        if result.terminal:
            logger.error(
                "Transaction %s failed on-chain: %s", queue_id, result.value.error
            )
        return result.value

    async def await_confirmation(self, queue_id: str) -> bool:
        """True on the first `mined` observation, False otherwise."""
        status = await self.wait_for_status(queue_id)
        return status.state is TxState.MINED
