"""Settlement plan: where the money of a finished session goes."""

from src.bb_common.money import ZERO
from src.bb_game.domain.models import GameSession, PayoutTransfer, SettlementPlan


def build_settlement_plan(session: GameSession) -> SettlementPlan:
    """Platform transfer = platform cut; one transfer per player with a prize > 0.

    Transfers are listed in finishing order. Bot transfers are flagged so the
    caller can keep them in house.
    """
    transfers = tuple(
        PayoutTransfer(player_id=p.id, amount=p.prize, is_bot=p.is_bot)
        for p in session.players
        if p.prize is not None and p.prize > ZERO
    )
    return SettlementPlan(
        session_id=session.id,
        platform_transfer=session.prize_distribution.platform_cut,
        payout_transfers=transfers,
    )
