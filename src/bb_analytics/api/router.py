"""bb_analytics REST API: read-only aggregates over the session registry."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from src.bb_analytics.application.schemas import DailyRevenueResponse, PlayerStatsResponse
from src.bb_analytics.domain.revenue import calculate_daily_revenue, calculate_player_stats
from src.bb_common.response import ApiResponse, success_response
from src.bb_game.application.session_manager import GameSessionManager
from src.bb_gateway.dependencies import get_session_manager

router = APIRouter(prefix="/analytics", tags=["analytics"])

Sessions = Annotated[GameSessionManager, Depends(get_session_manager)]


@router.get("/daily-revenue")
async def daily_revenue(
    sessions: Sessions,
    request: Request,
    day: date | None = Query(None, description="Local calendar day, defaults to today"),
) -> ApiResponse:
    revenue = calculate_daily_revenue(sessions.get_all_sessions(), day)
    return success_response(DailyRevenueResponse.from_domain(revenue).model_dump(), request)


@router.get("/player-stats")
async def player_stats(sessions: Sessions, request: Request) -> ApiResponse:
    stats = calculate_player_stats(sessions.get_all_sessions())
    return success_response(PlayerStatsResponse.from_domain(stats).model_dump(), request)
