"""Balance projection: the balance is a pure function of the transaction log.

Only COMPLETED transactions count:
  available_balance    = deposits + entry_fees - withdrawals - prize_payouts
  reserved_for_payouts = entry_fees * 0.90
  platform_profit      = platform_fees + entry_fees * 0.10
"""

from collections.abc import Iterable
from datetime import datetime
from decimal import Decimal

from src.bb_common.datetime_utils import utc_now
from src.bb_common.enums import TransactionType
from src.bb_common.money import PAYOUT_RATE, PLATFORM_FEE_RATE, ZERO
from src.bb_ledger.domain.models import FinancialBalance, FinancialTransaction


def sum_by_type(transactions: Iterable[FinancialTransaction]) -> dict[TransactionType, Decimal]:
    totals = {t: ZERO for t in TransactionType}
    for txn in transactions:
        if txn.is_completed:
            totals[txn.type] += txn.amount
    return totals


def compute_balance(
    transactions: Iterable[FinancialTransaction], now: datetime | None = None
) -> FinancialBalance:
    totals = sum_by_type(transactions)
    deposits = totals[TransactionType.DEPOSIT]
    withdrawals = totals[TransactionType.WITHDRAWAL]
    entry_fees = totals[TransactionType.ENTRY_FEE]
    prize_payouts = totals[TransactionType.PRIZE_PAYOUT]
    platform_fees = totals[TransactionType.PLATFORM_FEE]

    return FinancialBalance(
        total_deposits=deposits,
        total_withdrawals=withdrawals,
        total_entry_fees=entry_fees,
        total_prize_payouts=prize_payouts,
        total_platform_fees=platform_fees,
        available_balance=deposits + entry_fees - withdrawals - prize_payouts,
        reserved_for_payouts=entry_fees * PAYOUT_RATE,
        platform_profit=platform_fees + entry_fees * PLATFORM_FEE_RATE,
        last_updated=now or utc_now(),
    )
