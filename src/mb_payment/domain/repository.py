"""Repository and provider Protocols, for dependency inversion.

Unit tests inject mocks that conform to these Protocols.
Infrastructure layer provides the real implementations.
"""

from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mb_payment.domain.models import (
    PaymentIntent,
    PaymentMint,
    ProviderPayment,
    Withdrawal,
)


class PaymentIntentRepositoryProtocol(Protocol):
    async def get_by_id(self, db: AsyncSession, intent_id: str) -> PaymentIntent | None: ...

    async def get_by_idempotency_key(
        self, db: AsyncSession, idempotency_key: str
    ) -> PaymentIntent | None: ...

    async def insert(self, db: AsyncSession, intent: PaymentIntent) -> PaymentIntent: ...

    async def update_status(
        self, db: AsyncSession, intent_id: str, status: str
    ) -> bool: ...


class PaymentMintRepositoryProtocol(Protocol):
    async def try_claim(
        self,
        db: AsyncSession,
        payment_id: str,
        recipient_address: str,
        token_amount: int,
    ) -> PaymentMint | None: ...

    async def reclaim_failed(self, db: AsyncSession, payment_id: str) -> PaymentMint | None: ...

    async def get(self, db: AsyncSession, payment_id: str) -> PaymentMint | None: ...

    async def mark_minted(
        self, db: AsyncSession, payment_id: str, queue_id: str | None
    ) -> None: ...

    async def mark_failed(self, db: AsyncSession, payment_id: str, error: str) -> None: ...


class WithdrawalRepositoryProtocol(Protocol):
    async def create(
        self,
        db: AsyncSession,
        user_address: str,
        amount_cents: int,
        token_amount: int,
        pix_key: str,
        pix_key_type: str,
        burn_queue_id: str,
    ) -> Withdrawal | None: ...


class PaymentProviderProtocol(Protocol):
    async def create_payment(
        self, payload: dict[str, Any], idempotency_key: str
    ) -> ProviderPayment: ...

    async def find_payment(self, payment_id: str) -> ProviderPayment | None: ...

    async def get_payment(self, payment_id: str) -> ProviderPayment: ...

    async def search_by_reference(self, external_reference: str) -> ProviderPayment | None: ...
