"""SessionSettlementService: ties session transitions to the ledger.

start:  admission check + entry-fee collection (real players only) in one
        ledger critical section; the session starts only when admitted.
finish: ranks/prizes assigned by the session manager, then each real player's
        prize is paid through the gated payout. Under-funded payouts come back
        as failed PayoutResults, never as exceptions. Bot prizes stay in house.
"""

import asyncio
import logging
from collections.abc import Mapping
from decimal import Decimal

from src.bb_common.enums import SessionStatus
from src.bb_common.money import ZERO
from src.bb_game.application.session_manager import GameSessionManager
from src.bb_game.domain.models import GameSession, PayoutResult, Player, SettlementSummary
from src.bb_ledger.application.manager import FinancialSafetyManager
from src.bb_ledger.domain.models import GameAdmissionRequest, GameFinancialCheck

logger = logging.getLogger(__name__)


def admission_request_for(
    session: GameSession, estimated_players: int | None = None
) -> GameAdmissionRequest:
    config = session.game_config
    return GameAdmissionRequest(
        entry_fee=config.entry_fee,
        min_players=config.min_players,
        max_players=config.max_players,
        estimated_players=(
            estimated_players if estimated_players is not None else len(session.players)
        ),
    )


class SessionSettlementService:
    def __init__(self, sessions: GameSessionManager, ledger: FinancialSafetyManager) -> None:
        self._sessions = sessions
        self._ledger = ledger
        # Serializes start/finish so one session is never admitted or paid twice.
        self._lock = asyncio.Lock()

    async def start_session(
        self, session_id: str, estimated_players: int | None = None
    ) -> tuple[GameSession, GameFinancialCheck] | None:
        """Returns None for an unknown session id."""
        async with self._lock:
            session = self._sessions.get_game_session(session_id)
            if session is None:
                return None

            request = admission_request_for(session, estimated_players)
            if session.status != SessionStatus.WAITING:
                logger.warning(
                    "start_session ignored: session %s is %s", session_id, session.status.value
                )
                return session, self._ledger.can_start_game(request)

            entries = [(p.id, p.entry_fee) for p in session.real_players]
            check = await self._ledger.admit_game(request, session.id, entries)
            if check.can_start:
                self._sessions.start_game(session.id)
            return session, check

    async def finish_session(
        self, session_id: str, scores: Mapping[str, int] | None = None
    ) -> SettlementSummary | None:
        """Returns None for an unknown session id.

        A session that is not playing yields an empty summary: nothing is paid.
        """
        async with self._lock:
            session = self._sessions.get_game_session(session_id)
            if session is None:
                return None

            summary = SettlementSummary(
                session_id=session.id,
                total_prize_pool=session.prize_distribution.payout_pool,
            )
            if session.status != SessionStatus.PLAYING:
                logger.warning(
                    "finish_session ignored: session %s is %s", session_id, session.status.value
                )
                return summary

            finished = self._sessions.finish_game(session_id, scores)
            if finished is None:
                return None
            for player in finished.players:
                prize = player.prize or ZERO
                if prize <= ZERO:
                    continue
                if player.is_bot:
                    summary.retained_bot_prizes += prize
                    continue
                summary.payouts.append(await self._pay(finished.id, player, prize))

            for result in summary.payouts:
                if result.success:
                    summary.successful_payouts += 1
                    summary.total_paid += result.prize_amount
                else:
                    summary.failed_payouts += 1

            logger.info(
                "Session settled: id=%s paid=%s ok=%d failed=%d retained=%s",
                session.id,
                summary.total_paid,
                summary.successful_payouts,
                summary.failed_payouts,
                summary.retained_bot_prizes,
            )
            return summary

    async def _pay(self, session_id: str, player: Player, prize: Decimal) -> PayoutResult:
        txn = await self._ledger.process_prize_payout(player.id, session_id, prize)
        if txn is None:
            return PayoutResult(
                user_id=player.id,
                username=player.username,
                position=player.position or 0,
                prize_amount=prize,
                success=False,
                error_message="Insufficient funds for payout",
            )
        return PayoutResult(
            user_id=player.id,
            username=player.username,
            position=player.position or 0,
            prize_amount=prize,
            transaction_id=txn.id,
        )
