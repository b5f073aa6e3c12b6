"""FastAPI dependencies for the process-wide services built in the lifespan."""

from fastapi import Request

from src.bb_game.application.session_manager import GameSessionManager
from src.bb_game.application.settlement_service import SessionSettlementService
from src.bb_ledger.application.manager import FinancialSafetyManager


def get_ledger(request: Request) -> FinancialSafetyManager:
    return request.app.state.ledger


def get_session_manager(request: Request) -> GameSessionManager:
    return request.app.state.session_manager


def get_settlement_service(request: Request) -> SessionSettlementService:
    return request.app.state.settlement_service
