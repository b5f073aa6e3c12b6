"""FinancialSafetyManager: the append-only ledger and admission gate.

One instance per process, constructed at startup and injected into callers.
The transaction log is the single source of truth: every mutation builds a
new log, recomputes the whole balance from it, and swaps both in together
while holding `_lock`. Gated operations (payout, withdrawal, completing a
pending outflow, admit_game) run their check and their write inside that same
critical section. A failed startup load blocks mutations until a reload works.

Persistence: every mutation saves the full snapshot with a bounded timeout.
By default a failed save is logged and the in-memory state is kept. With
strict_persistence the save happens first and a failure rejects the mutation.
"""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Any

from src.bb_common.datetime_utils import local_date, local_today, utc_now
from src.bb_common.enums import TransactionStatus, TransactionType
from src.bb_common.errors import (
    InvalidAmountError,
    InvalidStatusTransitionError,
    LedgerPersistenceError,
    TransactionNotFoundError,
)
from src.bb_common.id_generator import generate_id
from src.bb_common.money import ZERO, to_ledger_amount
from src.bb_ledger.domain.admission import classify_fund_health, evaluate_admission
from src.bb_ledger.domain.balance import compute_balance
from src.bb_ledger.domain.invariants import verify_ledger_invariants
from src.bb_ledger.domain.models import (
    DailyLedgerStats,
    DashboardData,
    FinancialBalance,
    FinancialTransaction,
    FundHealth,
    GameAdmissionRequest,
    GameFinancialCheck,
    LedgerSnapshot,
)
from src.bb_ledger.domain.repository import LedgerStorageProtocol

logger = logging.getLogger(__name__)

DEFAULT_TEST_FUNDS = Decimal("10000")
DASHBOARD_RECENT_LIMIT = 20

_ALLOWED_STATUS_TRANSITIONS: dict[TransactionStatus, frozenset[TransactionStatus]] = {
    TransactionStatus.PENDING: frozenset(
        {TransactionStatus.COMPLETED, TransactionStatus.FAILED, TransactionStatus.CANCELLED}
    ),
}

_OUTFLOW_TYPES = frozenset({TransactionType.PRIZE_PAYOUT, TransactionType.WITHDRAWAL})


class FinancialSafetyManager:
    def __init__(
        self,
        storage: LedgerStorageProtocol,
        *,
        test_mode: bool = False,
        storage_timeout: float = 2.0,
        strict_persistence: bool = False,
    ) -> None:
        self._storage = storage
        self._transactions: list[FinancialTransaction] = []
        self._balance = FinancialBalance(last_updated=utc_now())
        self._test_mode = test_mode
        self._storage_timeout = storage_timeout
        self._strict_persistence = strict_persistence
        self._lock = asyncio.Lock()
        self._needs_reload = False

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    async def load(self) -> None:
        """Reload the log from storage; on error or timeout keep the current state.

        A failed load leaves the stored log unread. Until a later read succeeds,
        every mutation retries the load first and is rejected if it fails again,
        so a partial in-memory log never overwrites the stored one.
        """
        try:
            snapshot = await asyncio.wait_for(self._storage.load(), self._storage_timeout)
        except Exception:
            logger.exception("Error loading financial data, continuing with in-memory state")
            self._needs_reload = True
            return
        async with self._lock:
            self._apply_loaded_locked(snapshot)

    def _apply_loaded_locked(self, snapshot: LedgerSnapshot | None) -> None:
        self._needs_reload = False
        if snapshot is None:
            logger.info("No stored financial data, starting with an empty ledger")
            return

        recomputed = compute_balance(snapshot.transactions)
        if not recomputed.same_totals(snapshot.balance):
            logger.warning(
                "Stored balance drifted from log: stored available=%s, recomputed=%s; "
                "using recomputed",
                snapshot.balance.available_balance,
                recomputed.available_balance,
            )
        self._transactions = list(snapshot.transactions)
        self._balance = recomputed
        logger.info(
            "Loaded %d transaction(s), available balance=%s",
            len(self._transactions),
            self._balance.available_balance,
        )

    async def _ensure_loaded_locked(self) -> None:
        """Retry a failed load before mutating. Caller holds _lock."""
        if not self._needs_reload:
            return
        try:
            snapshot = await asyncio.wait_for(self._storage.load(), self._storage_timeout)
        except Exception as exc:
            logger.error("Stored ledger still unreadable, mutation rejected: %r", exc)
            raise LedgerPersistenceError(
                "stored ledger could not be loaded; refusing to overwrite it"
            ) from exc
        self._apply_loaded_locked(snapshot)

    async def _save(self, snapshot: LedgerSnapshot) -> None:
        try:
            await asyncio.wait_for(self._storage.save(snapshot), self._storage_timeout)
        except Exception as exc:
            if self._strict_persistence:
                raise LedgerPersistenceError(str(exc) or type(exc).__name__) from exc
            logger.exception("Error saving financial data, in-memory state kept")

    async def _commit_locked(self, transactions: list[FinancialTransaction]) -> None:
        """Swap in a new log and its recomputed balance. Caller holds _lock."""
        snapshot = LedgerSnapshot(transactions=transactions, balance=compute_balance(transactions))
        if self._strict_persistence:
            await self._save(snapshot)
            self._transactions, self._balance = snapshot.transactions, snapshot.balance
        else:
            self._transactions, self._balance = snapshot.transactions, snapshot.balance
            await self._save(snapshot)

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    @staticmethod
    def _new_transaction(
        txn_type: TransactionType,
        amount: Decimal,
        user_id: str | None,
        game_id: str | None,
        status: TransactionStatus,
        description: str,
        metadata: dict[str, Any] | None,
    ) -> FinancialTransaction:
        return FinancialTransaction(
            id=generate_id("txn"),
            type=txn_type,
            amount=amount,
            user_id=user_id,
            game_id=game_id,
            timestamp=utc_now(),
            status=status,
            description=description,
            metadata=dict(metadata or {}),
        )

    async def _append_locked(
        self,
        txn_type: TransactionType,
        amount: Decimal,
        user_id: str | None = None,
        game_id: str | None = None,
        status: TransactionStatus = TransactionStatus.COMPLETED,
        description: str = "",
        metadata: dict[str, Any] | None = None,
    ) -> FinancialTransaction:
        txn = self._new_transaction(
            txn_type, amount, user_id, game_id, status, description, metadata
        )
        await self._commit_locked(self._transactions + [txn])
        return txn

    async def record_transaction(
        self,
        txn_type: TransactionType,
        amount: Decimal | int | str,
        *,
        user_id: str | None = None,
        game_id: str | None = None,
        status: TransactionStatus = TransactionStatus.COMPLETED,
        description: str = "",
        metadata: dict[str, Any] | None = None,
    ) -> FinancialTransaction:
        """Append one transaction. No validation here; callers own amount checks."""
        async with self._lock:
            await self._ensure_loaded_locked()
            return await self._append_locked(
                txn_type,
                to_ledger_amount(amount),
                user_id,
                game_id,
                status,
                description,
                metadata,
            )

    async def process_deposit(
        self, user_id: str, amount: Decimal | int | str, method: str
    ) -> FinancialTransaction:
        value = to_ledger_amount(amount)
        if value <= 0:
            raise InvalidAmountError(amount)
        txn = await self.record_transaction(
            TransactionType.DEPOSIT,
            value,
            user_id=user_id,
            description=f"Deposit via {method}",
            metadata={"method": method},
        )
        logger.info("Deposit recorded: user=%s amount=%s method=%s", user_id, value, method)
        return txn

    async def process_entry_fee(
        self, user_id: str, game_id: str, amount: Decimal | int | str
    ) -> FinancialTransaction:
        return await self.record_transaction(
            TransactionType.ENTRY_FEE,
            amount,
            user_id=user_id,
            game_id=game_id,
            description=f"Entry fee for game {game_id}",
        )

    async def process_prize_payout(
        self, user_id: str, game_id: str, amount: Decimal | int | str
    ) -> FinancialTransaction | None:
        """Pay a prize if the available balance covers it, else return None."""
        value = to_ledger_amount(amount)
        async with self._lock:
            await self._ensure_loaded_locked()
            available = self._balance.available_balance
            if available < value:
                logger.warning(
                    "Insufficient funds for payout: %s. Available: %s (user=%s game=%s)",
                    value,
                    available,
                    user_id,
                    game_id,
                )
                return None
            return await self._append_locked(
                TransactionType.PRIZE_PAYOUT,
                value,
                user_id=user_id,
                game_id=game_id,
                description=f"Prize payout for game {game_id}",
            )

    async def process_withdrawal(
        self, user_id: str, amount: Decimal | int | str, method: str
    ) -> FinancialTransaction | None:
        """Withdraw if the available balance covers it, else return None."""
        value = to_ledger_amount(amount)
        if value <= 0:
            raise InvalidAmountError(amount)
        async with self._lock:
            await self._ensure_loaded_locked()
            available = self._balance.available_balance
            if available < value:
                logger.warning(
                    "Insufficient funds for withdrawal: %s. Available: %s (user=%s)",
                    value,
                    available,
                    user_id,
                )
                return None
            return await self._append_locked(
                TransactionType.WITHDRAWAL,
                value,
                user_id=user_id,
                description=f"Withdrawal via {method}",
                metadata={"method": method},
            )

    async def update_transaction_status(
        self, transaction_id: str, status: TransactionStatus
    ) -> FinancialTransaction:
        """Move a pending transaction to a final status.

        Completing a pending payout or withdrawal is gated like a new one: if the
        available balance does not cover it, the transaction is returned unchanged.
        """
        async with self._lock:
            await self._ensure_loaded_locked()
            for index, txn in enumerate(self._transactions):
                if txn.id == transaction_id:
                    break
            else:
                raise TransactionNotFoundError(transaction_id)

            if status not in _ALLOWED_STATUS_TRANSITIONS.get(txn.status, frozenset()):
                raise InvalidStatusTransitionError(
                    transaction_id, txn.status.value, status.value
                )
            if (
                status == TransactionStatus.COMPLETED
                and txn.type in _OUTFLOW_TYPES
                and self._balance.available_balance < txn.amount
            ):
                logger.warning(
                    "Insufficient funds to complete %s %s: %s. Available: %s",
                    txn.type.value,
                    transaction_id,
                    txn.amount,
                    self._balance.available_balance,
                )
                return txn
            updated = replace(txn, status=status)
            transactions = list(self._transactions)
            transactions[index] = updated
            await self._commit_locked(transactions)
            return updated

    # ------------------------------------------------------------------
    # Admission control
    # ------------------------------------------------------------------

    def can_start_game(self, request: GameAdmissionRequest) -> GameFinancialCheck:
        return evaluate_admission(request, self._balance.available_balance, self._test_mode)

    async def admit_game(
        self,
        request: GameAdmissionRequest,
        game_id: str,
        entries: Sequence[tuple[str, Decimal]],
    ) -> GameFinancialCheck:
        """Check admission and, if admitted, record the entry fees atomically.

        entries is a list of (user_id, entry_fee). Nothing is recorded when
        the check fails.
        """
        async with self._lock:
            await self._ensure_loaded_locked()
            check = evaluate_admission(
                request, self._balance.available_balance, self._test_mode
            )
            if not check.can_start:
                logger.warning("Game %s refused: %s", game_id, check.reason)
                return check
            fees = [
                self._new_transaction(
                    TransactionType.ENTRY_FEE,
                    to_ledger_amount(fee),
                    user_id,
                    game_id,
                    TransactionStatus.COMPLETED,
                    f"Entry fee for game {game_id}",
                    None,
                )
                for user_id, fee in entries
            ]
            if fees:
                await self._commit_locked(self._transactions + fees)
            return check

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def transactions(self) -> tuple[FinancialTransaction, ...]:
        return tuple(self._transactions)

    def get_financial_status(self) -> FinancialBalance:
        return self._balance

    def get_transaction_history(self, limit: int = 100) -> list[FinancialTransaction]:
        """Newest first; equal timestamps keep reverse log order. Does not reorder the log."""
        ordered = sorted(self._transactions, key=lambda t: t.timestamp)[::-1]
        return ordered[:limit]

    def emergency_fund_check(self) -> FundHealth:
        return classify_fund_health(self._balance)

    def verify_ledger_invariants(self) -> list[str]:
        return verify_ledger_invariants(self._transactions, self._balance)

    def get_dashboard_data(self, today: date | None = None) -> DashboardData:
        day = today or local_today()
        todays = [
            t for t in self._transactions
            if t.is_completed and local_date(t.timestamp) == day
        ]

        def _total(txn_type: TransactionType) -> Decimal:
            return sum((t.amount for t in todays if t.type == txn_type), ZERO)

        games = {t.game_id for t in todays if t.type == TransactionType.ENTRY_FEE}
        return DashboardData(
            balance=self._balance,
            recent_transactions=self.get_transaction_history(DASHBOARD_RECENT_LIMIT),
            health_check=self.emergency_fund_check(),
            daily_stats=DailyLedgerStats(
                deposits=_total(TransactionType.DEPOSIT),
                payouts=_total(TransactionType.PRIZE_PAYOUT),
                profit=_total(TransactionType.PLATFORM_FEE),
                games_played=len(games),
            ),
            test_mode=self._test_mode,
        )

    # ------------------------------------------------------------------
    # Test mode
    # ------------------------------------------------------------------

    @property
    def is_test_mode(self) -> bool:
        return self._test_mode

    def enable_test_mode(self) -> None:
        self._test_mode = True
        logger.warning("Financial safety test mode ENABLED: all games can start regardless of funds")

    def disable_test_mode(self) -> None:
        self._test_mode = False
        logger.info("Financial safety test mode DISABLED: normal safety checks active")

    async def add_test_funds(
        self, amount: Decimal | int | str = DEFAULT_TEST_FUNDS
    ) -> FinancialTransaction:
        txn = await self.process_deposit("test_admin", amount, "test_funds")
        logger.info("Added %s test funds to the system", txn.amount)
        return txn
