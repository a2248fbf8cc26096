"""001: updated_at trigger function and payment_intents table

Revision ID: 001
Revises: 
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # shared by every table with an updated_at column
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_touch_updated_at() RETURNS TRIGGER
        LANGUAGE plpgsql AS $$
        BEGIN
            NEW.updated_at := NOW();
            RETURN NEW;
        END $$;
    """)
    op.execute("""
        CREATE TABLE payment_intents (
            id                  VARCHAR(64)  PRIMARY KEY,
            idempotency_key     CHAR(64)     NOT NULL,
            recipient_address   VARCHAR(64)  NOT NULL,
            amount_cents        BIGINT       NOT NULL,
            status              VARCHAR(16)  NOT NULL DEFAULT 'pending',
            notification_url    TEXT,
            qr_code             TEXT,
            qr_code_base64      TEXT,
            created_at          TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_payment_intents_idempotency_key UNIQUE (idempotency_key),
            CONSTRAINT ck_payment_intents_amount_gte_1    CHECK (amount_cents >= 1),
            CONSTRAINT ck_payment_intents_status
                CHECK (status IN ('pending', 'approved', 'rejected'))
        );
    """)
    op.execute("""
        CREATE INDEX idx_payment_intents_recipient
            ON payment_intents (recipient_address, created_at DESC);
    """)
    op.execute("""
        CREATE TRIGGER trg_payment_intents_updated_at
            BEFORE UPDATE ON payment_intents
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute("COMMENT ON TABLE payment_intents IS 'PIX deposit charges, amounts in centavos';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS payment_intents CASCADE;")
    op.execute("DROP FUNCTION IF EXISTS fn_touch_updated_at();")
