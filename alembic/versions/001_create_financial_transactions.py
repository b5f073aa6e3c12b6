"""001: create financial_transactions table

Revision ID: 001
Revises:
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE financial_transactions (
            id              VARCHAR(64)     PRIMARY KEY,
            seq             INTEGER         NOT NULL,
            type            VARCHAR(20)     NOT NULL,
            amount          NUMERIC(18, 6)  NOT NULL,
            user_id         VARCHAR(64),
            game_id         VARCHAR(64),
            status          VARCHAR(20)     NOT NULL,
            description     VARCHAR(500),
            metadata        JSONB           NOT NULL DEFAULT '{}'::jsonb,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_fin_txn_type CHECK (
                type IN ('deposit', 'withdrawal', 'entry_fee', 'prize_payout', 'platform_fee')
            ),
            CONSTRAINT ck_fin_txn_status CHECK (
                status IN ('pending', 'completed', 'failed', 'cancelled')
            ),
            CONSTRAINT ck_fin_txn_amount_gte_0 CHECK (amount >= 0)
        );
    """)
    op.execute("CREATE UNIQUE INDEX uq_fin_txn_seq ON financial_transactions (seq);")
    op.execute("CREATE INDEX idx_fin_txn_type_time ON financial_transactions (type, created_at);")
    op.execute("""
        CREATE INDEX idx_fin_txn_game
        ON financial_transactions (game_id)
        WHERE game_id IS NOT NULL;
    """)
    op.execute(
        "COMMENT ON TABLE financial_transactions IS "
        "'Append-only platform ledger; only status may change. Amounts in dollars';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS financial_transactions CASCADE;")
