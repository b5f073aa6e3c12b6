"""002: create ledger_snapshots table

Revision ID: 002
Revises: 001
Create Date: 2026-10-17
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE ledger_snapshots (
            id              SMALLINT        PRIMARY KEY,
            balance         JSONB           NOT NULL,
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_ledger_snapshot_singleton CHECK (id = 1)
        );
    """)
    op.execute(
        "COMMENT ON TABLE ledger_snapshots IS "
        "'Derived balance cache; recomputed from financial_transactions on load';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS ledger_snapshots CASCADE;")
