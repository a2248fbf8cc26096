"""Concrete repositories for mb_payment.

Exactly-once minting rests on two atomic statements:
  - INSERT ... ON CONFLICT (payment_id) DO NOTHING RETURNING  (first claim wins)
  - UPDATE ... WHERE status = 'FAILED' RETURNING              (retry after failure)
A result of 0 rows means another delivery already owns the payment.

Transaction ownership: the CALLER (application service) commits.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mb_common.enums import IntentStatus, MintStatus, WithdrawalStatus
from src.mb_common.errors import InternalError
from src.mb_payment.domain.models import PaymentIntent, PaymentMint, Withdrawal

# ---------------------------------------------------------------------------
# SQL: payment_intents
# ---------------------------------------------------------------------------

_INTENT_COLUMNS = """
    id, idempotency_key, recipient_address, amount_cents, status,
    notification_url, qr_code, qr_code_base64, created_at, updated_at
"""

_GET_INTENT_SQL = text(f"SELECT {_INTENT_COLUMNS} FROM payment_intents WHERE id = :id")

_GET_INTENT_BY_KEY_SQL = text(
    f"SELECT {_INTENT_COLUMNS} FROM payment_intents WHERE idempotency_key = :key"
)

_INSERT_INTENT_SQL = text(f"""
    INSERT INTO payment_intents
        (id, idempotency_key, recipient_address, amount_cents, status,
         notification_url, qr_code, qr_code_base64)
    VALUES
        (:id, :idempotency_key, :recipient_address, :amount_cents, :status,
         :notification_url, :qr_code, :qr_code_base64)
    ON CONFLICT (idempotency_key) DO NOTHING
    RETURNING {_INTENT_COLUMNS}
""")

# approved/rejected are terminal: only pending rows move
_UPDATE_INTENT_STATUS_SQL = text("""
    UPDATE payment_intents
    SET status = :status
    WHERE id = :id AND status = :pending
    RETURNING id
""")

# ---------------------------------------------------------------------------
# SQL: payment_mints
# ---------------------------------------------------------------------------

_MINT_COLUMNS = """
    payment_id, recipient_address, token_amount, status, queue_id,
    attempts, last_error, created_at, updated_at
"""

_CLAIM_MINT_SQL = text(f"""
    INSERT INTO payment_mints (payment_id, recipient_address, token_amount, status)
    VALUES (:payment_id, :recipient_address, :token_amount, :claimed)
    ON CONFLICT (payment_id) DO NOTHING
    RETURNING {_MINT_COLUMNS}
""")

_RECLAIM_FAILED_SQL = text(f"""
    UPDATE payment_mints
    SET status = :claimed,
        attempts = attempts + 1
    WHERE payment_id = :payment_id AND status = :failed
    RETURNING {_MINT_COLUMNS}
""")

_GET_MINT_SQL = text(f"SELECT {_MINT_COLUMNS} FROM payment_mints WHERE payment_id = :payment_id")

_MARK_MINTED_SQL = text("""
    UPDATE payment_mints
    SET status = :minted, queue_id = :queue_id, last_error = NULL
    WHERE payment_id = :payment_id AND status = :claimed
""")

_MARK_FAILED_SQL = text("""
    UPDATE payment_mints
    SET status = :failed, last_error = :error
    WHERE payment_id = :payment_id AND status = :claimed
""")

# ---------------------------------------------------------------------------
# SQL: withdrawals
# ---------------------------------------------------------------------------

_INSERT_WITHDRAWAL_SQL = text("""
    INSERT INTO withdrawals
        (user_address, amount_cents, token_amount, pix_key, pix_key_type,
         burn_queue_id, status)
    VALUES
        (:user_address, :amount_cents, :token_amount, :pix_key, :pix_key_type,
         :burn_queue_id, :status)
    ON CONFLICT (burn_queue_id) DO NOTHING
    RETURNING id, user_address, amount_cents, token_amount, pix_key, pix_key_type,
              burn_queue_id, status, created_at
""")

_LAST_ERROR_MAX = 2000


def _row_to_intent(row: object) -> PaymentIntent:
    return PaymentIntent(
        id=row.id,  # type: ignore[attr-defined]
        idempotency_key=row.idempotency_key,  # type: ignore[attr-defined]
        recipient_address=row.recipient_address,  # type: ignore[attr-defined]
        amount_cents=row.amount_cents,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        notification_url=row.notification_url,  # type: ignore[attr-defined]
        qr_code=row.qr_code,  # type: ignore[attr-defined]
        qr_code_base64=row.qr_code_base64,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_mint(row: object) -> PaymentMint:
    return PaymentMint(
        payment_id=row.payment_id,  # type: ignore[attr-defined]
        recipient_address=row.recipient_address,  # type: ignore[attr-defined]
        token_amount=row.token_amount,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        queue_id=row.queue_id,  # type: ignore[attr-defined]
        attempts=row.attempts,  # type: ignore[attr-defined]
        last_error=row.last_error,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_withdrawal(row: object) -> Withdrawal:
    return Withdrawal(
        id=row.id,  # type: ignore[attr-defined]
        user_address=row.user_address,  # type: ignore[attr-defined]
        amount_cents=row.amount_cents,  # type: ignore[attr-defined]
        token_amount=row.token_amount,  # type: ignore[attr-defined]
        pix_key=row.pix_key,  # type: ignore[attr-defined]
        pix_key_type=row.pix_key_type,  # type: ignore[attr-defined]
        burn_queue_id=row.burn_queue_id,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class PaymentIntentRepository:
    async def get_by_id(self, db: AsyncSession, intent_id: str) -> PaymentIntent | None:
        row = (await db.execute(_GET_INTENT_SQL, {"id": intent_id})).fetchone()
        return _row_to_intent(row) if row else None

    async def get_by_idempotency_key(
        self, db: AsyncSession, idempotency_key: str
    ) -> PaymentIntent | None:
        row = (await db.execute(_GET_INTENT_BY_KEY_SQL, {"key": idempotency_key})).fetchone()
        return _row_to_intent(row) if row else None

    async def insert(self, db: AsyncSession, intent: PaymentIntent) -> PaymentIntent:
        """Insert, or return the row a concurrent request stored under the same key."""
        result = await db.execute(
            _INSERT_INTENT_SQL,
            {
                "id": intent.id,
                "idempotency_key": intent.idempotency_key,
                "recipient_address": intent.recipient_address,
                "amount_cents": intent.amount_cents,
                "status": intent.status,
                "notification_url": intent.notification_url,
                "qr_code": intent.qr_code,
                "qr_code_base64": intent.qr_code_base64,
            },
        )
        row = result.fetchone()
        if row is not None:
            return _row_to_intent(row)
        existing = await self.get_by_idempotency_key(db, intent.idempotency_key)
        if existing is None:
            raise InternalError("Intent insert conflicted but no row exists")
        return existing

    async def update_status(self, db: AsyncSession, intent_id: str, status: str) -> bool:
        result = await db.execute(
            _UPDATE_INTENT_STATUS_SQL,
            {"id": intent_id, "status": status, "pending": IntentStatus.PENDING.value},
        )
        return result.fetchone() is not None


class PaymentMintRepository:
    async def try_claim(
        self,
        db: AsyncSession,
        payment_id: str,
        recipient_address: str,
        token_amount: int,
    ) -> PaymentMint | None:
        result = await db.execute(
            _CLAIM_MINT_SQL,
            {
                "payment_id": payment_id,
                "recipient_address": recipient_address,
                "token_amount": token_amount,
                "claimed": MintStatus.CLAIMED.value,
            },
        )
        row = result.fetchone()
        return _row_to_mint(row) if row else None

    async def reclaim_failed(self, db: AsyncSession, payment_id: str) -> PaymentMint | None:
        result = await db.execute(
            _RECLAIM_FAILED_SQL,
            {
                "payment_id": payment_id,
                "claimed": MintStatus.CLAIMED.value,
                "failed": MintStatus.FAILED.value,
            },
        )
        row = result.fetchone()
        return _row_to_mint(row) if row else None

    async def get(self, db: AsyncSession, payment_id: str) -> PaymentMint | None:
        row = (await db.execute(_GET_MINT_SQL, {"payment_id": payment_id})).fetchone()
        return _row_to_mint(row) if row else None

    async def mark_minted(
        self, db: AsyncSession, payment_id: str, queue_id: str | None
    ) -> None:
        await db.execute(
            _MARK_MINTED_SQL,
            {
                "payment_id": payment_id,
                "queue_id": queue_id,
                "minted": MintStatus.MINTED.value,
                "claimed": MintStatus.CLAIMED.value,
            },
        )

    async def mark_failed(self, db: AsyncSession, payment_id: str, error: str) -> None:
        await db.execute(
            _MARK_FAILED_SQL,
            {
                "payment_id": payment_id,
                "error": error[:_LAST_ERROR_MAX],
                "failed": MintStatus.FAILED.value,
                "claimed": MintStatus.CLAIMED.value,
            },
        )


class WithdrawalRepository:
    async def create(
        self,
        db: AsyncSession,
        user_address: str,
        amount_cents: int,
        token_amount: int,
        pix_key: str,
        pix_key_type: str,
        burn_queue_id: str,
    ) -> Withdrawal | None:
        """Record a payout request. None when the burn was already used by another withdrawal."""
        result = await db.execute(
            _INSERT_WITHDRAWAL_SQL,
            {
                "user_address": user_address,
                "amount_cents": amount_cents,
                "token_amount": token_amount,
                "pix_key": pix_key,
                "pix_key_type": pix_key_type,
                "burn_queue_id": burn_queue_id,
                "status": WithdrawalStatus.PAYOUT_PENDING.value,
            },
        )
        row = result.fetchone()
        return _row_to_withdrawal(row) if row else None
