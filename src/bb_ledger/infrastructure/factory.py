"""Build the configured ledger storage backend and the process-wide manager."""

from config.settings import Settings
from src.bb_ledger.application.manager import FinancialSafetyManager
from src.bb_ledger.domain.repository import LedgerStorageProtocol
from src.bb_ledger.infrastructure.memory import InMemoryLedgerStorage


def create_ledger_storage(settings: Settings) -> LedgerStorageProtocol:
    backend = settings.LEDGER_STORAGE_BACKEND
    if backend == "memory":
        return InMemoryLedgerStorage()
    if backend == "redis":
        from src.bb_common.redis_client import get_redis
        from src.bb_ledger.infrastructure.redis_storage import RedisLedgerStorage

        return RedisLedgerStorage(get_redis, settings.LEDGER_REDIS_KEY)

    from src.bb_common.database import async_session_factory
    from src.bb_ledger.infrastructure.persistence import PostgresLedgerStorage

    return PostgresLedgerStorage(async_session_factory)


def create_financial_safety_manager(settings: Settings) -> FinancialSafetyManager:
    return FinancialSafetyManager(
        create_ledger_storage(settings),
        test_mode=settings.LEDGER_TEST_MODE,
        storage_timeout=settings.LEDGER_STORAGE_TIMEOUT_SECONDS,
        strict_persistence=settings.LEDGER_STRICT_PERSISTENCE,
    )
