"""Read-only revenue and player aggregation over game sessions.

No mutation, no error conditions: empty input yields all-zero output.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from src.bb_common.datetime_utils import local_date, local_today
from src.bb_common.money import ZERO
from src.bb_game.domain.models import GameSession


@dataclass(frozen=True)
class DailyRevenue:
    day: date
    sessions: int
    total_revenue: Decimal      # entry fees collected
    platform_revenue: Decimal   # 10% platform cut
    total_payouts: Decimal      # 90% payout pools
    net_profit: Decimal         # == platform_revenue


@dataclass(frozen=True)
class PlayerStats:
    total_players: int
    real_players: int
    bot_players: int
    total_prizes_paid: Decimal
    real_prizes_paid: Decimal
    bot_prizes_paid: Decimal
    average_prize: Decimal


def calculate_daily_revenue(
    sessions: Iterable[GameSession], today: date | None = None
) -> DailyRevenue:
    """Sum sessions started on `today` (local calendar day, default: now)."""
    day = today or local_today()
    todays = [
        s for s in sessions
        if s.start_time is not None and local_date(s.start_time) == day
    ]
    platform = sum((s.prize_distribution.platform_cut for s in todays), ZERO)
    return DailyRevenue(
        day=day,
        sessions=len(todays),
        total_revenue=sum((s.prize_distribution.total_entry_fees for s in todays), ZERO),
        platform_revenue=platform,
        total_payouts=sum((s.prize_distribution.payout_pool for s in todays), ZERO),
        net_profit=platform,
    )


def calculate_player_stats(sessions: Iterable[GameSession]) -> PlayerStats:
    players = [p for s in sessions for p in s.players]
    real = [p for p in players if not p.is_bot]
    bots = [p for p in players if p.is_bot]

    real_prizes = sum((p.prize or ZERO for p in real), ZERO)
    bot_prizes = sum((p.prize or ZERO for p in bots), ZERO)
    total = real_prizes + bot_prizes
    return PlayerStats(
        total_players=len(players),
        real_players=len(real),
        bot_players=len(bots),
        total_prizes_paid=total,
        real_prizes_paid=real_prizes,
        bot_prizes_paid=bot_prizes,
        average_prize=total / max(len(players), 1),
    )
