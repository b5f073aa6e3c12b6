"""Pydantic schemas for bb_analytics API."""

from pydantic import BaseModel

from src.bb_analytics.domain.revenue import DailyRevenue, PlayerStats
from src.bb_common.money import money_to_str, quantize_cents


class DailyRevenueResponse(BaseModel):
    day: str
    sessions: int
    total_revenue: str
    platform_revenue: str
    total_payouts: str
    net_profit: str

    @classmethod
    def from_domain(cls, r: DailyRevenue) -> "DailyRevenueResponse":
        return cls(
            day=r.day.isoformat(),
            sessions=r.sessions,
            total_revenue=money_to_str(r.total_revenue),
            platform_revenue=money_to_str(r.platform_revenue),
            total_payouts=money_to_str(r.total_payouts),
            net_profit=money_to_str(r.net_profit),
        )


class PlayerStatsResponse(BaseModel):
    total_players: int
    real_players: int
    bot_players: int
    total_prizes_paid: str
    real_prizes_paid: str
    bot_prizes_paid: str
    average_prize: str

    @classmethod
    def from_domain(cls, s: PlayerStats) -> "PlayerStatsResponse":
        return cls(
            total_players=s.total_players,
            real_players=s.real_players,
            bot_players=s.bot_players,
            total_prizes_paid=money_to_str(s.total_prizes_paid),
            real_prizes_paid=money_to_str(s.real_prizes_paid),
            bot_prizes_paid=money_to_str(s.bot_prizes_paid),
            # division result, not an exact pool amount
            average_prize=money_to_str(quantize_cents(s.average_prize)),
        )
