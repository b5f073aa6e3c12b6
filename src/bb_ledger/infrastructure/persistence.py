"""PostgresLedgerStorage: raw SQL persistence of the ledger snapshot.

Tables (created by Alembic migrations 001/002):
  financial_transactions: one row per transaction, `seq` = position in the log
  ledger_snapshots: single row (id=1) holding the derived balance as JSONB

save() writes only rows this store has not yet persisted (new transactions,
or ones whose status changed) plus the snapshot row, inside one DB transaction.
Only `status` of an existing transaction row may change on upsert.
"""

import json
from collections.abc import Callable
from decimal import Decimal
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bb_common.enums import TransactionStatus, TransactionType
from src.bb_ledger.domain.models import FinancialTransaction, LedgerSnapshot
from src.bb_ledger.infrastructure.serialization import balance_from_dict, balance_to_dict

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_UPSERT_TRANSACTION_SQL = text("""
    INSERT INTO financial_transactions
        (id, seq, type, amount, user_id, game_id, status, description, metadata, created_at)
    VALUES
        (:id, :seq, :type, :amount, :user_id, :game_id, :status, :description,
         CAST(:metadata AS JSONB), :created_at)
    ON CONFLICT (id) DO UPDATE
        SET status = EXCLUDED.status
""")

_UPSERT_SNAPSHOT_SQL = text("""
    INSERT INTO ledger_snapshots (id, balance, updated_at)
    VALUES (1, CAST(:balance AS JSONB), NOW())
    ON CONFLICT (id) DO UPDATE
        SET balance = EXCLUDED.balance,
            updated_at = NOW()
""")

_LIST_TRANSACTIONS_SQL = text("""
    SELECT id, type, amount, user_id, game_id, status, description, metadata, created_at
    FROM financial_transactions
    ORDER BY seq ASC
""")

_GET_SNAPSHOT_SQL = text("SELECT balance FROM ledger_snapshots WHERE id = 1")


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _json_value(value: Any) -> dict[str, Any]:
    if value is None:
        return {}
    if isinstance(value, str):
        return json.loads(value)
    return dict(value)


def _row_to_transaction(row: Any) -> FinancialTransaction:
    return FinancialTransaction(
        id=row.id,
        type=TransactionType(row.type),
        amount=Decimal(row.amount),
        user_id=row.user_id,
        game_id=row.game_id,
        timestamp=row.created_at,
        status=TransactionStatus(row.status),
        description=row.description or "",
        metadata=_json_value(row.metadata),
    )


def _transaction_params(txn: FinancialTransaction, seq: int) -> dict[str, Any]:
    return {
        "id": txn.id,
        "seq": seq,
        "type": txn.type.value,
        "amount": txn.amount,
        "user_id": txn.user_id,
        "game_id": txn.game_id,
        "status": txn.status.value,
        "description": txn.description,
        "metadata": json.dumps(txn.metadata, default=str),
        "created_at": txn.timestamp,
    }


class PostgresLedgerStorage:
    def __init__(self, session_factory: Callable[[], AsyncSession]) -> None:
        self._session_factory = session_factory
        # id -> status of every row known to be in the table
        self._persisted: dict[str, TransactionStatus] = {}

    async def load(self) -> LedgerSnapshot | None:
        async with self._session_factory() as db:
            rows = (await db.execute(_LIST_TRANSACTIONS_SQL)).fetchall()
            balance_raw = (await db.execute(_GET_SNAPSHOT_SQL)).scalar_one_or_none()
        transactions = [_row_to_transaction(r) for r in rows]
        self._persisted = {t.id: t.status for t in transactions}
        if not rows and balance_raw is None:
            return None
        return LedgerSnapshot(
            transactions=transactions,
            balance=balance_from_dict(_json_value(balance_raw)),
        )

    async def save(self, snapshot: LedgerSnapshot) -> None:
        params = [
            _transaction_params(t, i)
            for i, t in enumerate(snapshot.transactions)
            if self._persisted.get(t.id) != t.status
        ]
        async with self._session_factory() as db:
            async with db.begin():
                if params:
                    await db.execute(_UPSERT_TRANSACTION_SQL, params)
                await db.execute(
                    _UPSERT_SNAPSHOT_SQL,
                    {"balance": json.dumps(balance_to_dict(snapshot.balance))},
                )
        self._persisted.update((p["id"], TransactionStatus(p["status"])) for p in params)
