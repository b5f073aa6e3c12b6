"""Pydantic schemas for bb_game API. Amounts are serialized as decimal strings."""

from decimal import Decimal

from pydantic import BaseModel, Field

from src.bb_common.enums import SessionStatus
from src.bb_common.money import money_to_display, money_to_str
from src.bb_game.domain.models import (
    GameConfig,
    GameSession,
    Player,
    PrizeDistribution,
    SettlementPlan,
    SettlementSummary,
)
from src.bb_ledger.application.schemas import FinancialCheckResponse
from src.bb_ledger.domain.models import GameFinancialCheck

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class PlayerStub(BaseModel):
    id: str = Field(..., min_length=1, max_length=64)
    username: str = Field(..., min_length=1, max_length=64)
    entry_fee: Decimal | None = Field(
        None, ge=0, decimal_places=6, description="Defaults to the game config's entry fee"
    )


class CreateSessionRequest(BaseModel):
    game_config_id: str
    players: list[PlayerStub] = Field(default_factory=list)


class StartSessionRequest(BaseModel):
    estimated_players: int | None = Field(None, ge=0)


class FinishSessionRequest(BaseModel):
    scores: dict[str, int] | None = Field(None, description="player id -> game score")


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class GameConfigItem(BaseModel):
    id: str
    name: str
    entry_fee: str
    entry_fee_display: str
    min_players: int
    max_players: int
    game_type: str
    duration_minutes: int

    @classmethod
    def from_domain(cls, c: GameConfig) -> "GameConfigItem":
        return cls(
            id=c.id,
            name=c.name,
            entry_fee=money_to_str(c.entry_fee),
            entry_fee_display=money_to_display(c.entry_fee),
            min_players=c.min_players,
            max_players=c.max_players,
            game_type=c.game_type.value,
            duration_minutes=c.duration_minutes,
        )


class PlayerItem(BaseModel):
    id: str
    username: str
    is_bot: bool
    entry_fee: str
    score: int
    position: int | None
    prize: str | None

    @classmethod
    def from_domain(cls, p: Player) -> "PlayerItem":
        return cls(
            id=p.id,
            username=p.username,
            is_bot=p.is_bot,
            entry_fee=money_to_str(p.entry_fee),
            score=p.score,
            position=p.position,
            prize=money_to_str(p.prize) if p.prize is not None else None,
        )


class PrizeDistributionItem(BaseModel):
    total_entry_fees: str
    platform_cut: str
    payout_pool: str
    first_place: str
    second_place: str
    third_place: str

    @classmethod
    def from_domain(cls, d: PrizeDistribution) -> "PrizeDistributionItem":
        return cls(
            total_entry_fees=money_to_str(d.total_entry_fees),
            platform_cut=money_to_str(d.platform_cut),
            payout_pool=money_to_str(d.payout_pool),
            first_place=money_to_str(d.first_place),
            second_place=money_to_str(d.second_place),
            third_place=money_to_str(d.third_place),
        )


class SessionDetail(BaseModel):
    id: str
    game_config: GameConfigItem
    status: str
    players: list[PlayerItem]
    bot_count: int
    prize_distribution: PrizeDistributionItem
    start_time: str | None
    end_time: str | None

    @classmethod
    def from_domain(cls, s: GameSession) -> "SessionDetail":
        return cls(
            id=s.id,
            game_config=GameConfigItem.from_domain(s.game_config),
            status=s.status.value,
            players=[PlayerItem.from_domain(p) for p in s.players],
            bot_count=s.bot_count,
            prize_distribution=PrizeDistributionItem.from_domain(s.prize_distribution),
            start_time=s.start_time.isoformat() if s.start_time else None,
            end_time=s.end_time.isoformat() if s.end_time else None,
        )


class StartSessionResponse(BaseModel):
    started: bool
    session: SessionDetail
    financial_check: FinancialCheckResponse

    @classmethod
    def from_result(cls, session: GameSession, check: GameFinancialCheck) -> "StartSessionResponse":
        return cls(
            started=check.can_start and session.status == SessionStatus.PLAYING,
            session=SessionDetail.from_domain(session),
            financial_check=FinancialCheckResponse.from_domain(check),
        )


class PayoutResultItem(BaseModel):
    user_id: str
    username: str
    position: int
    prize_amount: str
    transaction_id: str | None
    success: bool
    error_message: str | None


class SettlementSummaryResponse(BaseModel):
    session_id: str
    total_prize_pool: str
    total_paid: str
    successful_payouts: int
    failed_payouts: int
    retained_bot_prizes: str
    payouts: list[PayoutResultItem]

    @classmethod
    def from_domain(cls, s: SettlementSummary) -> "SettlementSummaryResponse":
        return cls(
            session_id=s.session_id,
            total_prize_pool=money_to_str(s.total_prize_pool),
            total_paid=money_to_str(s.total_paid),
            successful_payouts=s.successful_payouts,
            failed_payouts=s.failed_payouts,
            retained_bot_prizes=money_to_str(s.retained_bot_prizes),
            payouts=[
                PayoutResultItem(
                    user_id=p.user_id,
                    username=p.username,
                    position=p.position,
                    prize_amount=money_to_str(p.prize_amount),
                    transaction_id=p.transaction_id,
                    success=p.success,
                    error_message=p.error_message,
                )
                for p in s.payouts
            ],
        )


class PayoutTransferItem(BaseModel):
    player_id: str
    amount: str
    is_bot: bool


class SettlementPlanResponse(BaseModel):
    session_id: str
    platform_transfer: str
    payout_transfers: list[PayoutTransferItem]

    @classmethod
    def from_domain(cls, plan: SettlementPlan) -> "SettlementPlanResponse":
        return cls(
            session_id=plan.session_id,
            platform_transfer=money_to_str(plan.platform_transfer),
            payout_transfers=[
                PayoutTransferItem(
                    player_id=t.player_id, amount=money_to_str(t.amount), is_bot=t.is_bot
                )
                for t in plan.payout_transfers
            ],
        )
