"""bb_game REST API: config catalog and session lifecycle."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.bb_common.errors import SessionNotFoundError
from src.bb_common.money import to_money
from src.bb_common.response import ApiResponse, success_response
from src.bb_game.application.schemas import (
    CreateSessionRequest,
    FinishSessionRequest,
    GameConfigItem,
    SessionDetail,
    SettlementPlanResponse,
    SettlementSummaryResponse,
    StartSessionRequest,
    StartSessionResponse,
)
from src.bb_game.application.session_manager import GameSessionManager
from src.bb_game.application.settlement_service import SessionSettlementService
from src.bb_game.domain.catalog import get_game_config, list_game_configs
from src.bb_game.domain.models import Player
from src.bb_game.domain.settlement import build_settlement_plan
from src.bb_gateway.dependencies import get_session_manager, get_settlement_service

router = APIRouter(prefix="/games", tags=["games"])

Sessions = Annotated[GameSessionManager, Depends(get_session_manager)]
Settlement = Annotated[SessionSettlementService, Depends(get_settlement_service)]


@router.get("/configs")
async def list_configs(request: Request) -> ApiResponse:
    items = [GameConfigItem.from_domain(c).model_dump() for c in list_game_configs()]
    return success_response(items, request)


@router.post("/sessions")
async def create_session(
    body: CreateSessionRequest, sessions: Sessions, request: Request
) -> ApiResponse:
    config = get_game_config(body.game_config_id)
    players = [
        Player(
            id=p.id,
            username=p.username,
            entry_fee=to_money(p.entry_fee) if p.entry_fee is not None else config.entry_fee,
        )
        for p in body.players
    ]
    session = sessions.create_game_session(config.id, players)
    return success_response(SessionDetail.from_domain(session).model_dump(), request)


@router.get("/sessions")
async def list_sessions(sessions: Sessions, request: Request) -> ApiResponse:
    items = [SessionDetail.from_domain(s).model_dump() for s in sessions.get_all_sessions()]
    return success_response(items, request)


@router.get("/sessions/{session_id}")
async def get_session(session_id: str, sessions: Sessions, request: Request) -> ApiResponse:
    session = sessions.get_game_session(session_id)
    if session is None:
        raise SessionNotFoundError(session_id)
    return success_response(SessionDetail.from_domain(session).model_dump(), request)


@router.post("/sessions/{session_id}/start")
async def start_session(
    session_id: str,
    settlement: Settlement,
    request: Request,
    body: StartSessionRequest | None = None,
) -> ApiResponse:
    estimated = body.estimated_players if body is not None else None
    result = await settlement.start_session(session_id, estimated)
    if result is None:
        raise SessionNotFoundError(session_id)
    session, check = result
    data = StartSessionResponse.from_result(session, check)
    return success_response(data.model_dump(), request)


@router.post("/sessions/{session_id}/finish")
async def finish_session(
    session_id: str,
    settlement: Settlement,
    request: Request,
    body: FinishSessionRequest | None = None,
) -> ApiResponse:
    scores = body.scores if body is not None else None
    summary = await settlement.finish_session(session_id, scores)
    if summary is None:
        raise SessionNotFoundError(session_id)
    return success_response(SettlementSummaryResponse.from_domain(summary).model_dump(), request)


@router.get("/sessions/{session_id}/settlement-plan")
async def settlement_plan(session_id: str, sessions: Sessions, request: Request) -> ApiResponse:
    session = sessions.get_game_session(session_id)
    if session is None:
        raise SessionNotFoundError(session_id)
    plan = build_settlement_plan(session)
    return success_response(SettlementPlanResponse.from_domain(plan).model_dump(), request)
