"""Pydantic schemas for bb_ledger API. Amounts are serialized as decimal strings."""

from decimal import Decimal

from pydantic import BaseModel, Field

from src.bb_common.enums import TransactionStatus
from src.bb_common.money import money_to_display, money_to_str
from src.bb_ledger.domain.models import (
    DailyLedgerStats,
    DashboardData,
    FinancialBalance,
    FinancialTransaction,
    FundHealth,
    GameFinancialCheck,
)

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class DepositRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=64)
    amount: Decimal = Field(
        ..., gt=0, decimal_places=6, description="Amount to deposit in dollars"
    )
    method: str = Field("card", min_length=1, max_length=32)


class WithdrawRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=64)
    amount: Decimal = Field(
        ..., gt=0, decimal_places=6, description="Amount to withdraw in dollars"
    )
    method: str = Field("bank_transfer", min_length=1, max_length=32)


class EntryFeeRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=64)
    game_id: str = Field(..., min_length=1, max_length=64)
    amount: Decimal = Field(..., ge=0, decimal_places=6)


class PayoutRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=64)
    game_id: str = Field(..., min_length=1, max_length=64)
    amount: Decimal = Field(..., ge=0, decimal_places=6)


class CanStartRequest(BaseModel):
    entry_fee: Decimal = Field(..., ge=0, decimal_places=6)
    min_players: int = Field(..., ge=0)
    max_players: int = Field(..., ge=0)
    estimated_players: int = Field(..., ge=0)


class SetTestModeRequest(BaseModel):
    enabled: bool


class AddTestFundsRequest(BaseModel):
    amount: Decimal = Field(Decimal("10000"), gt=0, decimal_places=6)


class StatusUpdateRequest(BaseModel):
    status: TransactionStatus


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class TransactionItem(BaseModel):
    id: str
    type: str
    amount: str
    amount_display: str
    status: str
    description: str
    user_id: str | None
    game_id: str | None
    timestamp: str
    metadata: dict

    @classmethod
    def from_domain(cls, t: FinancialTransaction) -> "TransactionItem":
        return cls(
            id=t.id,
            type=t.type.value,
            amount=money_to_str(t.amount),
            amount_display=money_to_display(t.amount),
            status=t.status.value,
            description=t.description,
            user_id=t.user_id,
            game_id=t.game_id,
            timestamp=t.timestamp.isoformat(),
            metadata=dict(t.metadata),
        )


class TransactionListResponse(BaseModel):
    items: list[TransactionItem]
    count: int


class BalanceResponse(BaseModel):
    total_deposits: str
    total_withdrawals: str
    total_entry_fees: str
    total_prize_payouts: str
    total_platform_fees: str
    available_balance: str
    available_balance_display: str
    reserved_for_payouts: str
    platform_profit: str
    last_updated: str | None

    @classmethod
    def from_domain(cls, b: FinancialBalance) -> "BalanceResponse":
        return cls(
            total_deposits=money_to_str(b.total_deposits),
            total_withdrawals=money_to_str(b.total_withdrawals),
            total_entry_fees=money_to_str(b.total_entry_fees),
            total_prize_payouts=money_to_str(b.total_prize_payouts),
            total_platform_fees=money_to_str(b.total_platform_fees),
            available_balance=money_to_str(b.available_balance),
            available_balance_display=money_to_display(b.available_balance),
            reserved_for_payouts=money_to_str(b.reserved_for_payouts),
            platform_profit=money_to_str(b.platform_profit),
            last_updated=b.last_updated.isoformat() if b.last_updated else None,
        )


class PayoutResponse(BaseModel):
    """paid=False means the available balance did not cover the prize."""

    paid: bool
    transaction: TransactionItem | None
    available_balance: str


class WithdrawResponse(BaseModel):
    withdrawn: bool
    transaction: TransactionItem | None
    available_balance: str


class FinancialCheckResponse(BaseModel):
    can_start: bool
    required_balance: str
    available_balance: str
    estimated_payouts: str
    platform_fee: str
    safety_margin: str
    reason: str | None

    @classmethod
    def from_domain(cls, c: GameFinancialCheck) -> "FinancialCheckResponse":
        return cls(
            can_start=c.can_start,
            required_balance=money_to_str(c.required_balance),
            available_balance=money_to_str(c.available_balance),
            estimated_payouts=money_to_str(c.estimated_payouts),
            platform_fee=money_to_str(c.platform_fee),
            safety_margin=money_to_str(c.safety_margin),
            reason=c.reason,
        )


class FundHealthResponse(BaseModel):
    is_healthy: bool
    warning_level: str
    message: str
    recommended_action: str

    @classmethod
    def from_domain(cls, h: FundHealth) -> "FundHealthResponse":
        return cls(
            is_healthy=h.is_healthy,
            warning_level=h.warning_level.value,
            message=h.message,
            recommended_action=h.recommended_action,
        )


class DailyStatsItem(BaseModel):
    deposits: str
    payouts: str
    profit: str
    games_played: int

    @classmethod
    def from_domain(cls, s: DailyLedgerStats) -> "DailyStatsItem":
        return cls(
            deposits=money_to_str(s.deposits),
            payouts=money_to_str(s.payouts),
            profit=money_to_str(s.profit),
            games_played=s.games_played,
        )


class DashboardResponse(BaseModel):
    balance: BalanceResponse
    recent_transactions: list[TransactionItem]
    health_check: FundHealthResponse
    daily_stats: DailyStatsItem
    test_mode: bool

    @classmethod
    def from_domain(cls, d: DashboardData) -> "DashboardResponse":
        return cls(
            balance=BalanceResponse.from_domain(d.balance),
            recent_transactions=[TransactionItem.from_domain(t) for t in d.recent_transactions],
            health_check=FundHealthResponse.from_domain(d.health_check),
            daily_stats=DailyStatsItem.from_domain(d.daily_stats),
            test_mode=d.test_mode,
        )


class ModeStatusResponse(BaseModel):
    test_mode: bool


class InvariantReport(BaseModel):
    ok: bool
    violations: list[str]
