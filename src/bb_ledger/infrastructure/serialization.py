"""JSON (de)serialization of ledger snapshots.

Amounts are written as decimal strings, timestamps as ISO-8601, and both are
revived to Decimal / timezone-aware datetime on load.
"""

import json
from decimal import Decimal
from typing import Any

from src.bb_common.datetime_utils import parse_iso
from src.bb_common.enums import TransactionStatus, TransactionType
from src.bb_ledger.domain.models import FinancialBalance, FinancialTransaction, LedgerSnapshot

_BALANCE_AMOUNT_FIELDS = (
    "total_deposits",
    "total_withdrawals",
    "total_entry_fees",
    "total_prize_payouts",
    "total_platform_fees",
    "available_balance",
    "reserved_for_payouts",
    "platform_profit",
)


def transaction_to_dict(txn: FinancialTransaction) -> dict[str, Any]:
    return {
        "id": txn.id,
        "type": txn.type.value,
        "amount": str(txn.amount),
        "user_id": txn.user_id,
        "game_id": txn.game_id,
        "timestamp": txn.timestamp.isoformat(),
        "status": txn.status.value,
        "description": txn.description,
        "metadata": txn.metadata,
    }


def transaction_from_dict(data: dict[str, Any]) -> FinancialTransaction:
    return FinancialTransaction(
        id=data["id"],
        type=TransactionType(data["type"]),
        amount=Decimal(str(data["amount"])),
        user_id=data.get("user_id"),
        game_id=data.get("game_id"),
        timestamp=parse_iso(data["timestamp"]),
        status=TransactionStatus(data["status"]),
        description=data.get("description") or "",
        metadata=dict(data.get("metadata") or {}),
    )


def balance_to_dict(balance: FinancialBalance) -> dict[str, Any]:
    data: dict[str, Any] = {name: str(getattr(balance, name)) for name in _BALANCE_AMOUNT_FIELDS}
    data["last_updated"] = balance.last_updated.isoformat() if balance.last_updated else None
    return data


def balance_from_dict(data: dict[str, Any]) -> FinancialBalance:
    last_updated = data.get("last_updated")
    return FinancialBalance(
        **{name: Decimal(str(data.get(name, "0"))) for name in _BALANCE_AMOUNT_FIELDS},
        last_updated=parse_iso(last_updated) if last_updated else None,
    )


def snapshot_to_json(snapshot: LedgerSnapshot) -> str:
    payload = {
        "transactions": [transaction_to_dict(t) for t in snapshot.transactions],
        "balance": balance_to_dict(snapshot.balance),
    }
    return json.dumps(payload, default=str)


def snapshot_from_json(raw: str) -> LedgerSnapshot:
    payload = json.loads(raw)
    return LedgerSnapshot(
        transactions=[transaction_from_dict(t) for t in payload.get("transactions", [])],
        balance=balance_from_dict(payload.get("balance") or {}),
    )
