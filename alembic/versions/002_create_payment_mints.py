"""002: create payment_mints table

One row per provider payment id. The primary key is what makes minting
exactly-once: the first delivery to insert the row owns the mint.

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE payment_mints (
            payment_id          VARCHAR(64)  PRIMARY KEY,
            recipient_address   VARCHAR(64)  NOT NULL,
            token_amount        BIGINT       NOT NULL,
            status              VARCHAR(16)  NOT NULL DEFAULT 'CLAIMED',
            queue_id            VARCHAR(128),
            attempts            INT          NOT NULL DEFAULT 1,
            last_error          TEXT,
            created_at          TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_payment_mints_tokens_gte_0 CHECK (token_amount >= 0),
            CONSTRAINT ck_payment_mints_status
                CHECK (status IN ('CLAIMED', 'MINTED', 'FAILED'))
        );
    """)
    op.execute("""
        CREATE INDEX idx_payment_mints_status
            ON payment_mints (status)
            WHERE status != 'MINTED';
    """)
    op.execute("""
        CREATE TRIGGER trg_payment_mints_updated_at
            BEFORE UPDATE ON payment_mints
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS payment_mints CASCADE;")
