"""GameSessionManager: stateful registry of in-flight and finished sessions.

State machine per session: waiting -> playing -> finished (one-way).
Unknown session ids return None, never raise: callers treat None as a no-op.
Sessions are never deleted; finished sessions accumulate for reporting.
"""

import logging
import random
from collections.abc import Mapping, Sequence
from dataclasses import replace

from src.bb_common.datetime_utils import utc_now
from src.bb_common.enums import SessionStatus
from src.bb_common.id_generator import generate_id
from src.bb_game.domain.bots import generate_bot_players
from src.bb_game.domain.catalog import get_game_config
from src.bb_game.domain.models import GameSession, Player
from src.bb_game.domain.prize import (
    RankingStrategy,
    calculate_prize_distribution,
    distribute_prizes,
    rank_by_score,
)

logger = logging.getLogger(__name__)


def fit_roster(real: Sequence[Player], bots: Sequence[Player], max_players: int) -> list[Player]:
    """Trim to max_players, dropping bots before any real player."""
    real_kept = list(real)
    bots_kept = list(bots)
    overflow = len(real_kept) + len(bots_kept) - max_players
    if overflow <= 0:
        return real_kept + bots_kept

    bots_dropped = min(overflow, len(bots_kept))
    bots_kept = bots_kept[: len(bots_kept) - bots_dropped]
    overflow -= bots_dropped
    if overflow > 0:
        logger.warning(
            "Roster exceeds max_players=%d: dropping %d real player(s) from the tail",
            max_players,
            overflow,
        )
        real_kept = real_kept[: len(real_kept) - overflow]
    return real_kept + bots_kept


class GameSessionManager:
    def __init__(
        self,
        ranking: RankingStrategy | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._sessions: dict[str, GameSession] = {}
        self._ranking: RankingStrategy = ranking or rank_by_score
        self._rng = rng

    def create_game_session(
        self, game_config_id: str, real_players: Sequence[Player]
    ) -> GameSession:
        """Build roster (bot-padded, capped), fix the prize pool, register as waiting.

        Raises ConfigNotFoundError for an unknown config id.
        """
        config = get_game_config(game_config_id)
        bots = generate_bot_players(config.min_players - len(real_players), config, self._rng)
        roster = fit_roster(real_players, bots, config.max_players)

        session = GameSession(
            id=generate_id("session"),
            game_config=config,
            players=roster,
            prize_distribution=calculate_prize_distribution(roster, config),
        )
        self._sessions[session.id] = session
        logger.info(
            "Session created: id=%s config=%s players=%d bots=%d pool=%s",
            session.id,
            config.id,
            len(roster),
            session.bot_count,
            session.prize_distribution.total_entry_fees,
        )
        return session

    def get_game_session(self, session_id: str) -> GameSession | None:
        return self._sessions.get(session_id)

    def get_all_sessions(self) -> list[GameSession]:
        return list(self._sessions.values())

    def start_game(self, session_id: str) -> GameSession | None:
        session = self._sessions.get(session_id)
        if session is None:
            return None
        if session.status != SessionStatus.WAITING:
            logger.warning(
                "start_game ignored: session %s is %s", session_id, session.status.value
            )
            return session

        session.status = SessionStatus.PLAYING
        session.start_time = utc_now()
        logger.info("Session started: id=%s", session_id)
        return session

    def finish_game(
        self, session_id: str, scores: Mapping[str, int] | None = None
    ) -> GameSession | None:
        """Move playing -> finished and assign ranks/prizes.

        scores maps player id -> game score; players not listed keep theirs.
        Sessions that are not playing are returned unchanged, so prizes are
        assigned exactly once.
        """
        session = self._sessions.get(session_id)
        if session is None:
            return None
        if session.status != SessionStatus.PLAYING:
            logger.warning(
                "finish_game ignored: session %s is %s", session_id, session.status.value
            )
            return session

        if scores:
            session.players = [
                replace(p, score=scores[p.id]) if p.id in scores else p
                for p in session.players
            ]
        session.status = SessionStatus.FINISHED
        session.end_time = utc_now()
        session.players = distribute_prizes(
            session.players, session.prize_distribution, self._ranking
        )
        logger.info("Session finished: id=%s", session_id)
        return session
