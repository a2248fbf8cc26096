"""003: create withdrawals table

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE withdrawals (
            id                  BIGSERIAL    PRIMARY KEY,
            user_address        VARCHAR(64)  NOT NULL,
            amount_cents        BIGINT       NOT NULL,
            token_amount        BIGINT       NOT NULL,
            pix_key             VARCHAR(140) NOT NULL,
            pix_key_type        VARCHAR(8)   NOT NULL,
            burn_queue_id       VARCHAR(128) NOT NULL,
            status              VARCHAR(16)  NOT NULL DEFAULT 'PAYOUT_PENDING',
            created_at          TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ  NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_withdrawals_burn_queue_id UNIQUE (burn_queue_id),
            CONSTRAINT ck_withdrawals_amount_gt_0   CHECK (amount_cents > 0),
            CONSTRAINT ck_withdrawals_amount_tokens CHECK (amount_cents = token_amount * 100),
            CONSTRAINT ck_withdrawals_pix_key_type
                CHECK (pix_key_type IN ('CPF', 'CNPJ', 'EMAIL', 'PHONE', 'EVP')),
            CONSTRAINT ck_withdrawals_status
                CHECK (status IN ('PAYOUT_PENDING', 'PAID', 'FAILED'))
        );
    """)
    op.execute("""
        CREATE INDEX idx_withdrawals_pending
            ON withdrawals (created_at)
            WHERE status = 'PAYOUT_PENDING';
    """)
    op.execute("""
        CREATE TRIGGER trg_withdrawals_updated_at
            BEFORE UPDATE ON withdrawals
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute("COMMENT ON TABLE withdrawals IS 'Confirmed burns awaiting PIX payout, amounts in centavos';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS withdrawals CASCADE;")
