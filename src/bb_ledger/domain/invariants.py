"""Ledger invariant verification."""

import logging
from collections.abc import Sequence

from src.bb_ledger.domain.balance import compute_balance
from src.bb_ledger.domain.models import FinancialBalance, FinancialTransaction

logger = logging.getLogger(__name__)


def verify_ledger_invariants(
    transactions: Sequence[FinancialTransaction], balance: FinancialBalance
) -> list[str]:
    """Check the stored balance against the log. Returns list of violation strings.

    INV-L1: balance == compute_balance(transactions)  (no drift)
    INV-L2: available_balance >= 0
    INV-L3: transaction ids are unique
    """
    violations: list[str] = []

    recomputed = compute_balance(transactions, balance.last_updated)
    if not recomputed.same_totals(balance):
        violations.append(
            f"INV-L1 violated: stored available={balance.available_balance} "
            f"!= recomputed available={recomputed.available_balance} "
            f"(entry_fees {balance.total_entry_fees} vs {recomputed.total_entry_fees})"
        )

    if balance.available_balance < 0:
        violations.append(
            f"INV-L2 violated: available_balance={balance.available_balance} < 0"
        )

    ids = [t.id for t in transactions]
    if len(ids) != len(set(ids)):
        violations.append(
            f"INV-L3 violated: {len(ids) - len(set(ids))} duplicate transaction id(s)"
        )

    for msg in violations:
        logger.error(msg)
    if not violations:
        logger.debug(
            "Ledger invariants OK: txns=%d, available=%s",
            len(transactions),
            balance.available_balance,
        )
    return violations
