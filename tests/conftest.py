"""Shared test fixtures.

ASGITransport does not run the lifespan, so the client fixture wires the
process-wide services onto app.state itself, backed by in-memory storage.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from src.bb_game.application.session_manager import GameSessionManager
from src.bb_game.application.settlement_service import SessionSettlementService
from src.bb_ledger.application.manager import FinancialSafetyManager
from src.bb_ledger.infrastructure.memory import InMemoryLedgerStorage
from src.main import app


@pytest.fixture
def storage() -> InMemoryLedgerStorage:
    return InMemoryLedgerStorage()


@pytest.fixture
def ledger(storage: InMemoryLedgerStorage) -> FinancialSafetyManager:
    return FinancialSafetyManager(storage)


@pytest.fixture
def session_manager() -> GameSessionManager:
    return GameSessionManager()


@pytest.fixture
def settlement_service(
    session_manager: GameSessionManager, ledger: FinancialSafetyManager
) -> SessionSettlementService:
    return SessionSettlementService(session_manager, ledger)


@pytest.fixture
async def client(
    ledger: FinancialSafetyManager,
    session_manager: GameSessionManager,
    settlement_service: SessionSettlementService,
) -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints."""
    app.state.ledger = ledger
    app.state.session_manager = session_manager
    app.state.settlement_service = settlement_service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
