"""Unit tests for SessionSettlementService and the settlement plan."""

from decimal import Decimal

from src.bb_common.enums import SessionStatus, TransactionType
from src.bb_common.money import ZERO
from src.bb_game.application.session_manager import GameSessionManager
from src.bb_game.application.settlement_service import (
    SessionSettlementService,
    admission_request_for,
)
from src.bb_game.domain.models import Player
from src.bb_game.domain.settlement import build_settlement_plan
from src.bb_ledger.application.manager import FinancialSafetyManager


def _real(pid: str = "user-1") -> Player:
    return Player(id=pid, username=pid, entry_fee=Decimal("5.00"))


def _available(ledger: FinancialSafetyManager) -> Decimal:
    return ledger.get_financial_status().available_balance


class TestAdmissionRequestFor:
    def test_defaults_to_roster_size(self, session_manager: GameSessionManager) -> None:
        session = session_manager.create_game_session("speed-bingo", [_real()])
        request = admission_request_for(session)
        assert request.entry_fee == Decimal("5.00")
        assert request.min_players == 3
        assert request.max_players == 20
        assert request.estimated_players == 3

    def test_explicit_estimate(self, session_manager: GameSessionManager) -> None:
        session = session_manager.create_game_session("speed-bingo", [_real()])
        assert admission_request_for(session, 12).estimated_players == 12


class TestStartSession:
    async def test_refused_without_funds(
        self,
        settlement_service: SessionSettlementService,
        session_manager: GameSessionManager,
        ledger: FinancialSafetyManager,
    ) -> None:
        session = session_manager.create_game_session("speed-bingo", [_real()])

        result = await settlement_service.start_session(session.id)

        assert result is not None
        started, check = result
        assert check.can_start is False
        assert started.status == SessionStatus.WAITING
        assert ledger.transactions == ()

    async def test_admitted_collects_real_fees_only(
        self,
        settlement_service: SessionSettlementService,
        session_manager: GameSessionManager,
        ledger: FinancialSafetyManager,
    ) -> None:
        await ledger.process_deposit("house", 1000, "seed")
        session = session_manager.create_game_session("speed-bingo", [_real()])

        result = await settlement_service.start_session(session.id)

        assert result is not None
        started, check = result
        assert check.can_start is True
        assert started.status == SessionStatus.PLAYING
        fees = [t for t in ledger.transactions if t.type == TransactionType.ENTRY_FEE]
        assert [(t.user_id, t.amount) for t in fees] == [("user-1", Decimal("5.00"))]
        assert _available(ledger) == Decimal("1005")

    async def test_second_start_collects_nothing(
        self,
        settlement_service: SessionSettlementService,
        session_manager: GameSessionManager,
        ledger: FinancialSafetyManager,
    ) -> None:
        await ledger.process_deposit("house", 1000, "seed")
        session = session_manager.create_game_session("speed-bingo", [_real()])
        await settlement_service.start_session(session.id)

        await settlement_service.start_session(session.id)

        assert len(ledger.transactions) == 2

    async def test_unknown_session(self, settlement_service: SessionSettlementService) -> None:
        assert await settlement_service.start_session("nope") is None


class TestFinishSession:
    async def test_pays_real_winner_and_retains_bot_prizes(
        self,
        settlement_service: SessionSettlementService,
        session_manager: GameSessionManager,
        ledger: FinancialSafetyManager,
    ) -> None:
        await ledger.process_deposit("house", 1000, "seed")
        session = session_manager.create_game_session("speed-bingo", [_real()])
        await settlement_service.start_session(session.id)

        summary = await settlement_service.finish_session(session.id, {"user-1": 100})

        assert summary is not None
        assert summary.total_prize_pool == Decimal("13.50")
        assert summary.total_paid == Decimal("8.10")
        assert summary.successful_payouts == 1
        assert summary.failed_payouts == 0
        assert summary.retained_bot_prizes == Decimal("5.40")
        assert summary.payouts[0].position == 1
        assert summary.payouts[0].transaction_id is not None
        assert _available(ledger) == Decimal("996.90")
        assert ledger.verify_ledger_invariants() == []

    async def test_underfunded_payout_reported_not_raised(
        self,
        settlement_service: SessionSettlementService,
        session_manager: GameSessionManager,
        ledger: FinancialSafetyManager,
    ) -> None:
        ledger.enable_test_mode()
        session = session_manager.create_game_session("speed-bingo", [_real()])
        await settlement_service.start_session(session.id)

        summary = await settlement_service.finish_session(session.id, {"user-1": 100})

        assert summary is not None
        assert summary.failed_payouts == 1
        assert summary.total_paid == ZERO
        assert summary.payouts[0].success is False
        assert summary.payouts[0].error_message == "Insufficient funds for payout"
        assert _available(ledger) == Decimal("5.00")

    async def test_unplaced_real_player_gets_no_payout(
        self,
        settlement_service: SessionSettlementService,
        session_manager: GameSessionManager,
        ledger: FinancialSafetyManager,
    ) -> None:
        await ledger.process_deposit("house", 1000, "seed")
        real = [_real(f"u{i}") for i in range(4)]
        session = session_manager.create_game_session("speed-bingo", real)
        await settlement_service.start_session(session.id)

        summary = await settlement_service.finish_session(
            session.id, {"u0": 1, "u1": 4, "u2": 3, "u3": 2}
        )

        assert summary is not None
        assert [p.user_id for p in summary.payouts] == ["u1", "u2", "u3"]
        assert summary.retained_bot_prizes == ZERO

    async def test_waiting_session_yields_empty_summary(
        self,
        settlement_service: SessionSettlementService,
        session_manager: GameSessionManager,
    ) -> None:
        session = session_manager.create_game_session("speed-bingo", [_real()])

        summary = await settlement_service.finish_session(session.id)

        assert summary is not None
        assert summary.payouts == []
        assert session.status == SessionStatus.WAITING

    async def test_finish_twice_pays_once(
        self,
        settlement_service: SessionSettlementService,
        session_manager: GameSessionManager,
        ledger: FinancialSafetyManager,
    ) -> None:
        await ledger.process_deposit("house", 1000, "seed")
        session = session_manager.create_game_session("speed-bingo", [_real()])
        await settlement_service.start_session(session.id)
        await settlement_service.finish_session(session.id, {"user-1": 100})

        again = await settlement_service.finish_session(session.id)

        assert again is not None
        assert again.payouts == []
        payouts = [t for t in ledger.transactions if t.type == TransactionType.PRIZE_PAYOUT]
        assert len(payouts) == 1

    async def test_unknown_session(self, settlement_service: SessionSettlementService) -> None:
        assert await settlement_service.finish_session("nope") is None


class TestBuildSettlementPlan:
    def test_waiting_session_has_no_transfers(self, session_manager: GameSessionManager) -> None:
        session = session_manager.create_game_session("speed-bingo", [_real()])

        plan = build_settlement_plan(session)

        assert plan.platform_transfer == Decimal("1.50")
        assert plan.payout_transfers == ()

    def test_finished_session(self, session_manager: GameSessionManager) -> None:
        session = session_manager.create_game_session("speed-bingo", [_real()])
        session_manager.start_game(session.id)
        session_manager.finish_game(session.id, {"user-1": 100})

        plan = build_settlement_plan(session)

        assert plan.session_id == session.id
        assert [t.amount for t in plan.payout_transfers] == [
            Decimal("8.10"),
            Decimal("3.375"),
            Decimal("2.025"),
        ]
        assert [t.is_bot for t in plan.payout_transfers] == [False, True, True]
        total = plan.platform_transfer + sum((t.amount for t in plan.payout_transfers), ZERO)
        assert total == session.prize_distribution.total_entry_fees
