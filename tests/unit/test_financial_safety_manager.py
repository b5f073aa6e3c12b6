"""Unit tests for FinancialSafetyManager using in-memory and mocked storage."""

import asyncio
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from src.bb_common.enums import TransactionStatus, TransactionType, WarningLevel
from src.bb_common.errors import (
    InvalidAmountError,
    InvalidStatusTransitionError,
    LedgerPersistenceError,
    TransactionNotFoundError,
)
from src.bb_common.money import ZERO
from src.bb_ledger.application.manager import FinancialSafetyManager
from src.bb_ledger.domain.balance import compute_balance
from src.bb_ledger.domain.models import GameAdmissionRequest, LedgerSnapshot
from src.bb_ledger.infrastructure.memory import InMemoryLedgerStorage
from src.bb_ledger.infrastructure.serialization import snapshot_from_json, snapshot_to_json


def _available(ledger: FinancialSafetyManager) -> Decimal:
    return ledger.get_financial_status().available_balance


class TestDepositEntryPayoutScenario:
    async def test_full_flow(self, ledger: FinancialSafetyManager) -> None:
        await ledger.process_deposit("user-1", 1000, "test")
        assert _available(ledger) == Decimal("1000")

        for _ in range(5):
            await ledger.process_entry_fee("user-1", "game-1", 10)
        assert _available(ledger) == Decimal("1050")

        payout = await ledger.process_prize_payout("user-1", "game-1", 900)
        assert payout is not None
        assert payout.type == TransactionType.PRIZE_PAYOUT
        assert _available(ledger) == Decimal("150")

        refused = await ledger.process_prize_payout("user-1", "game-1", 200)
        assert refused is None
        assert _available(ledger) == Decimal("150")
        assert len(ledger.transactions) == 7

    async def test_exact_balance_payout_allowed(self, ledger: FinancialSafetyManager) -> None:
        await ledger.process_deposit("user-1", 100, "card")
        assert await ledger.process_prize_payout("user-1", "g", "100") is not None
        assert _available(ledger) == ZERO

    async def test_balance_never_drifts(self, ledger: FinancialSafetyManager) -> None:
        await ledger.process_deposit("user-1", "250.50", "card")
        await ledger.process_entry_fee("user-2", "g", "5.00")
        await ledger.process_prize_payout("user-2", "g", "8.10")
        await ledger.process_withdrawal("user-1", "12.25", "bank")
        assert ledger.get_financial_status().same_totals(compute_balance(ledger.transactions))
        assert ledger.verify_ledger_invariants() == []


class TestValidation:
    @pytest.mark.parametrize("amount", [0, -1, "-0.01"])
    async def test_deposit_must_be_positive(
        self, ledger: FinancialSafetyManager, amount: object
    ) -> None:
        with pytest.raises(InvalidAmountError):
            await ledger.process_deposit("user-1", amount, "card")  # type: ignore[arg-type]
        assert ledger.transactions == ()

    async def test_withdrawal_must_be_positive(self, ledger: FinancialSafetyManager) -> None:
        with pytest.raises(InvalidAmountError):
            await ledger.process_withdrawal("user-1", 0, "bank")

    async def test_deposit_records_method(self, ledger: FinancialSafetyManager) -> None:
        txn = await ledger.process_deposit("user-1", 10, "paypal")
        assert txn.metadata == {"method": "paypal"}
        assert txn.status == TransactionStatus.COMPLETED
        assert txn.id.startswith("txn_")

    async def test_amounts_rounded_to_stored_scale(self, ledger: FinancialSafetyManager) -> None:
        txn = await ledger.process_deposit("user-1", "10.0000004", "card")
        assert txn.amount == Decimal("10")
        assert _available(ledger) == Decimal("10")


class TestWithdrawal:
    async def test_within_balance(self, ledger: FinancialSafetyManager) -> None:
        await ledger.process_deposit("user-1", 100, "card")
        txn = await ledger.process_withdrawal("user-1", 40, "bank")
        assert txn is not None
        assert _available(ledger) == Decimal("60")

    async def test_over_balance_refused(self, ledger: FinancialSafetyManager) -> None:
        await ledger.process_deposit("user-1", 100, "card")
        assert await ledger.process_withdrawal("user-1", 101, "bank") is None
        assert _available(ledger) == Decimal("100")


class TestConcurrentPayouts:
    async def test_concurrent_payouts_never_overdraw(
        self, ledger: FinancialSafetyManager
    ) -> None:
        await ledger.process_deposit("user-1", 100, "card")

        results = await asyncio.gather(
            *(ledger.process_prize_payout(f"u{i}", "g", 30) for i in range(5))
        )

        assert sum(1 for r in results if r is not None) == 3
        assert _available(ledger) == Decimal("10")


class TestUpdateTransactionStatus:
    async def test_pending_to_completed_counts(self, ledger: FinancialSafetyManager) -> None:
        pending = await ledger.record_transaction(
            TransactionType.DEPOSIT, 50, user_id="user-1", status=TransactionStatus.PENDING
        )
        assert _available(ledger) == ZERO

        updated = await ledger.update_transaction_status(pending.id, TransactionStatus.COMPLETED)

        assert updated.status == TransactionStatus.COMPLETED
        assert _available(ledger) == Decimal("50")

    async def test_completed_is_final(self, ledger: FinancialSafetyManager) -> None:
        txn = await ledger.process_deposit("user-1", 10, "card")
        with pytest.raises(InvalidStatusTransitionError):
            await ledger.update_transaction_status(txn.id, TransactionStatus.FAILED)

    async def test_unknown_id(self, ledger: FinancialSafetyManager) -> None:
        with pytest.raises(TransactionNotFoundError):
            await ledger.update_transaction_status("txn_missing", TransactionStatus.FAILED)

    async def test_completing_uncovered_payout_is_refused(
        self, ledger: FinancialSafetyManager, storage: InMemoryLedgerStorage
    ) -> None:
        await ledger.process_deposit("user-1", 100, "card")
        pending = await ledger.record_transaction(
            TransactionType.PRIZE_PAYOUT, 500, user_id="user-1", status=TransactionStatus.PENDING
        )
        saves = storage.save_count

        result = await ledger.update_transaction_status(pending.id, TransactionStatus.COMPLETED)

        assert result.status == TransactionStatus.PENDING
        assert _available(ledger) == Decimal("100")
        assert ledger.verify_ledger_invariants() == []
        assert storage.save_count == saves

    async def test_completing_uncovered_withdrawal_is_refused(
        self, ledger: FinancialSafetyManager
    ) -> None:
        pending = await ledger.record_transaction(
            TransactionType.WITHDRAWAL, 20, user_id="user-1", status=TransactionStatus.PENDING
        )

        result = await ledger.update_transaction_status(pending.id, TransactionStatus.COMPLETED)

        assert result.status == TransactionStatus.PENDING
        assert _available(ledger) == ZERO

    async def test_completing_covered_payout(self, ledger: FinancialSafetyManager) -> None:
        await ledger.process_deposit("user-1", 600, "card")
        pending = await ledger.record_transaction(
            TransactionType.PRIZE_PAYOUT, 500, user_id="user-1", status=TransactionStatus.PENDING
        )

        result = await ledger.update_transaction_status(pending.id, TransactionStatus.COMPLETED)

        assert result.status == TransactionStatus.COMPLETED
        assert _available(ledger) == Decimal("100")

    async def test_cancelling_uncovered_payout_is_allowed(
        self, ledger: FinancialSafetyManager
    ) -> None:
        pending = await ledger.record_transaction(
            TransactionType.PRIZE_PAYOUT, 500, user_id="user-1", status=TransactionStatus.PENDING
        )

        result = await ledger.update_transaction_status(pending.id, TransactionStatus.CANCELLED)

        assert result.status == TransactionStatus.CANCELLED


class TestAdmission:
    async def test_empty_ledger_refuses(self, ledger: FinancialSafetyManager) -> None:
        check = ledger.can_start_game(GameAdmissionRequest(Decimal("10"), 5, 5, 5))
        assert check.can_start is False

    async def test_admit_records_entry_fees(self, ledger: FinancialSafetyManager) -> None:
        await ledger.process_deposit("house", 1000, "seed")
        request = GameAdmissionRequest(Decimal("5.00"), 3, 20, 3)

        check = await ledger.admit_game(
            request, "game-1", [("u1", Decimal("5.00")), ("u2", Decimal("5.00"))]
        )

        assert check.can_start is True
        fees = [t for t in ledger.transactions if t.type == TransactionType.ENTRY_FEE]
        assert [(t.user_id, t.game_id) for t in fees] == [("u1", "game-1"), ("u2", "game-1")]
        assert _available(ledger) == Decimal("1010")

    async def test_refused_admission_records_nothing(
        self, ledger: FinancialSafetyManager
    ) -> None:
        request = GameAdmissionRequest(Decimal("5.00"), 3, 20, 3)

        check = await ledger.admit_game(request, "game-1", [("u1", Decimal("5.00"))])

        assert check.can_start is False
        assert ledger.transactions == ()

    async def test_test_mode_toggle(self, ledger: FinancialSafetyManager) -> None:
        request = GameAdmissionRequest(Decimal("10"), 5, 5, 5)
        ledger.enable_test_mode()
        assert ledger.is_test_mode is True
        assert ledger.can_start_game(request).can_start is True
        ledger.disable_test_mode()
        assert ledger.can_start_game(request).can_start is False

    async def test_add_test_funds(self, ledger: FinancialSafetyManager) -> None:
        txn = await ledger.add_test_funds()
        assert txn.user_id == "test_admin"
        assert txn.metadata == {"method": "test_funds"}
        assert _available(ledger) == Decimal("10000")


class TestReadSide:
    async def test_history_newest_first_with_limit(self, ledger: FinancialSafetyManager) -> None:
        for amount in (1, 2, 3):
            await ledger.process_deposit("user-1", amount, "card")

        history = ledger.get_transaction_history(limit=2)

        assert [t.amount for t in history] == [Decimal("3"), Decimal("2")]
        assert [t.amount for t in ledger.transactions] == [Decimal(1), Decimal(2), Decimal(3)]

    async def test_emergency_check_on_empty_ledger(self, ledger: FinancialSafetyManager) -> None:
        assert ledger.emergency_fund_check().warning_level == WarningLevel.CRITICAL

    async def test_dashboard(self, ledger: FinancialSafetyManager) -> None:
        await ledger.process_deposit("user-1", 1000, "card")
        await ledger.process_entry_fee("user-1", "game-1", 5)
        await ledger.process_entry_fee("user-2", "game-1", 5)
        await ledger.process_entry_fee("user-3", "game-2", 5)
        await ledger.process_prize_payout("user-1", "game-1", "8.10")

        data = ledger.get_dashboard_data()

        assert data.daily_stats.deposits == Decimal("1000")
        assert data.daily_stats.payouts == Decimal("8.10")
        assert data.daily_stats.games_played == 2
        assert len(data.recent_transactions) == 5
        assert data.test_mode is False
        assert data.health_check.is_healthy is True


class TestPersistence:
    async def test_every_mutation_saves(
        self, ledger: FinancialSafetyManager, storage: InMemoryLedgerStorage
    ) -> None:
        await ledger.process_deposit("user-1", 100, "card")
        await ledger.process_prize_payout("user-1", "g", 500)  # refused, nothing saved
        await ledger.process_entry_fee("user-1", "g", 5)
        assert storage.save_count == 2

    async def test_reload_restores_state(
        self, ledger: FinancialSafetyManager, storage: InMemoryLedgerStorage
    ) -> None:
        await ledger.process_deposit("user-1", "100.25", "card")
        await ledger.process_entry_fee("user-1", "g", "5.00")

        restored = FinancialSafetyManager(InMemoryLedgerStorage(storage.raw))
        await restored.load()

        assert _available(restored) == Decimal("105.25")
        assert [t.id for t in restored.transactions] == [t.id for t in ledger.transactions]

    async def test_load_recomputes_drifted_balance(self) -> None:
        source = FinancialSafetyManager(InMemoryLedgerStorage())
        await source.process_deposit("user-1", 100, "card")
        tampered = LedgerSnapshot(
            transactions=list(source.transactions),
            balance=compute_balance([]),
        )

        ledger = FinancialSafetyManager(InMemoryLedgerStorage(snapshot_to_json(tampered)))
        await ledger.load()

        assert _available(ledger) == Decimal("100")

    async def test_load_empty_storage(self, ledger: FinancialSafetyManager) -> None:
        await ledger.load()
        assert ledger.transactions == ()

    async def test_load_failure_keeps_state(self, ledger: FinancialSafetyManager) -> None:
        await ledger.process_deposit("user-1", 100, "card")
        broken = AsyncMock()
        broken.load.side_effect = ConnectionError("down")
        ledger._storage = broken

        await ledger.load()

        assert _available(ledger) == Decimal("100")

    async def test_failed_load_does_not_overwrite_stored_log(self) -> None:
        source_storage = InMemoryLedgerStorage()
        await FinancialSafetyManager(source_storage).process_deposit("user-1", 1000, "card")
        stored = source_storage.raw
        storage = InMemoryLedgerStorage(stored)
        storage.load = AsyncMock(side_effect=[TimeoutError(), snapshot_from_json(stored)])
        ledger = FinancialSafetyManager(storage)

        await ledger.load()
        await ledger.process_deposit("user-2", 5, "card")

        assert _available(ledger) == Decimal("1005")
        restored = FinancialSafetyManager(InMemoryLedgerStorage(storage.raw))
        await restored.load()
        assert _available(restored) == Decimal("1005")
        assert len(restored.transactions) == 2

    async def test_mutation_rejected_while_storage_unreadable(self) -> None:
        source_storage = InMemoryLedgerStorage()
        await FinancialSafetyManager(source_storage).process_deposit("user-1", 1000, "card")
        stored = source_storage.raw
        storage = InMemoryLedgerStorage(stored)
        storage.load = AsyncMock(side_effect=ConnectionError("down"))
        ledger = FinancialSafetyManager(storage)

        await ledger.load()
        with pytest.raises(LedgerPersistenceError):
            await ledger.process_deposit("user-2", 5, "card")
        with pytest.raises(LedgerPersistenceError):
            await ledger.process_prize_payout("user-2", "g", 5)

        assert storage.raw == stored
        assert storage.save_count == 0
        assert ledger.transactions == ()

    async def test_save_failure_is_logged_not_raised(self) -> None:
        storage = AsyncMock()
        storage.save.side_effect = ConnectionError("down")
        ledger = FinancialSafetyManager(storage)

        txn = await ledger.process_deposit("user-1", 100, "card")

        assert txn in ledger.transactions
        assert _available(ledger) == Decimal("100")

    async def test_save_timeout_is_bounded(self) -> None:
        async def _hang(_snapshot: LedgerSnapshot) -> None:
            await asyncio.sleep(10)

        storage = AsyncMock()
        storage.save.side_effect = _hang
        ledger = FinancialSafetyManager(storage, storage_timeout=0.01)

        await ledger.process_deposit("user-1", 100, "card")

        assert _available(ledger) == Decimal("100")

    async def test_strict_persistence_rejects_on_failure(self) -> None:
        storage = AsyncMock()
        storage.save.side_effect = ConnectionError("down")
        ledger = FinancialSafetyManager(storage, strict_persistence=True)

        with pytest.raises(LedgerPersistenceError):
            await ledger.process_deposit("user-1", 100, "card")

        assert ledger.transactions == ()
        assert _available(ledger) == ZERO
