"""Domain models for bb_game: pure dataclasses, no persistence dependency."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from src.bb_common.enums import GameType, SessionStatus
from src.bb_common.money import ZERO


@dataclass(frozen=True)
class GameConfig:
    id: str
    name: str
    entry_fee: Decimal        # dollars per player
    min_players: int
    max_players: int
    game_type: GameType
    duration_minutes: int


@dataclass
class Player:
    id: str
    username: str
    entry_fee: Decimal
    is_bot: bool = False
    score: int = 0                   # game score, higher ranks first
    position: int | None = None      # 1..3 for prize places, 0 = unplaced
    prize: Decimal | None = None


@dataclass(frozen=True)
class PrizeDistribution:
    total_entry_fees: Decimal
    platform_cut: Decimal     # 10% of total
    payout_pool: Decimal      # 90% of total
    first_place: Decimal      # 60% of payout pool
    second_place: Decimal     # 25% of payout pool
    third_place: Decimal      # 15% of payout pool

    @property
    def tiers(self) -> tuple[Decimal, Decimal, Decimal]:
        return (self.first_place, self.second_place, self.third_place)

    @classmethod
    def empty(cls) -> "PrizeDistribution":
        return cls(ZERO, ZERO, ZERO, ZERO, ZERO, ZERO)


@dataclass
class GameSession:
    id: str
    game_config: GameConfig
    players: list[Player]
    prize_distribution: PrizeDistribution
    status: SessionStatus = SessionStatus.WAITING
    start_time: datetime | None = None
    end_time: datetime | None = None

    @property
    def real_players(self) -> list[Player]:
        return [p for p in self.players if not p.is_bot]

    @property
    def bot_count(self) -> int:
        return sum(1 for p in self.players if p.is_bot)


@dataclass
class PayoutResult:
    """Outcome of paying one player's prize through the ledger."""

    user_id: str
    username: str
    position: int
    prize_amount: Decimal
    transaction_id: str | None = None
    success: bool = True
    error_message: str | None = None


@dataclass
class SettlementSummary:
    session_id: str
    total_prize_pool: Decimal
    total_paid: Decimal = ZERO
    successful_payouts: int = 0
    failed_payouts: int = 0
    retained_bot_prizes: Decimal = ZERO
    payouts: list[PayoutResult] = field(default_factory=list)


@dataclass(frozen=True)
class PayoutTransfer:
    player_id: str
    amount: Decimal
    is_bot: bool


@dataclass(frozen=True)
class SettlementPlan:
    """Where the money of a finished session goes: platform cut + prize transfers."""

    session_id: str
    platform_transfer: Decimal
    payout_transfers: tuple[PayoutTransfer, ...]
