"""Domain models for bb_ledger: pure dataclasses, no persistence dependency."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from src.bb_common.enums import TransactionStatus, TransactionType, WarningLevel
from src.bb_common.money import ZERO


@dataclass
class FinancialTransaction:
    id: str
    type: TransactionType
    amount: Decimal                  # dollars, always positive; type gives direction
    timestamp: datetime
    status: TransactionStatus
    description: str = ""
    user_id: str | None = None
    game_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_completed(self) -> bool:
        return self.status == TransactionStatus.COMPLETED


@dataclass(frozen=True)
class FinancialBalance:
    """Projection of the transaction log. Never mutated independently."""

    total_deposits: Decimal = ZERO
    total_withdrawals: Decimal = ZERO
    total_entry_fees: Decimal = ZERO
    total_prize_payouts: Decimal = ZERO
    total_platform_fees: Decimal = ZERO
    available_balance: Decimal = ZERO
    reserved_for_payouts: Decimal = ZERO
    platform_profit: Decimal = ZERO
    last_updated: datetime | None = None

    def same_totals(self, other: "FinancialBalance") -> bool:
        """Compare every amount, ignoring last_updated."""
        return (
            self.total_deposits == other.total_deposits
            and self.total_withdrawals == other.total_withdrawals
            and self.total_entry_fees == other.total_entry_fees
            and self.total_prize_payouts == other.total_prize_payouts
            and self.total_platform_fees == other.total_platform_fees
            and self.available_balance == other.available_balance
            and self.reserved_for_payouts == other.reserved_for_payouts
            and self.platform_profit == other.platform_profit
        )


@dataclass(frozen=True)
class GameAdmissionRequest:
    entry_fee: Decimal
    min_players: int
    max_players: int
    estimated_players: int


@dataclass(frozen=True)
class GameFinancialCheck:
    can_start: bool
    required_balance: Decimal
    available_balance: Decimal
    estimated_payouts: Decimal
    platform_fee: Decimal
    safety_margin: Decimal
    reason: str | None = None


@dataclass(frozen=True)
class FundHealth:
    is_healthy: bool
    warning_level: WarningLevel
    message: str
    recommended_action: str


@dataclass
class LedgerSnapshot:
    """Unit of persistence: the full log plus the balance derived from it."""

    transactions: list[FinancialTransaction]
    balance: FinancialBalance


@dataclass(frozen=True)
class DailyLedgerStats:
    deposits: Decimal
    payouts: Decimal
    profit: Decimal
    games_played: int


@dataclass(frozen=True)
class DashboardData:
    balance: FinancialBalance
    recent_transactions: list[FinancialTransaction]
    health_check: FundHealth
    daily_stats: DailyLedgerStats
    test_mode: bool
