"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config.settings import settings
from src.bb_analytics.api.router import router as analytics_router
from src.bb_common.errors import AppError, InternalError
from src.bb_common.response import error_response
from src.bb_game.api.router import router as games_router
from src.bb_game.application.session_manager import GameSessionManager
from src.bb_game.application.settlement_service import SessionSettlementService
from src.bb_gateway.middleware.request_log import RequestLogMiddleware
from src.bb_ledger.api.router import router as ledger_router
from src.bb_ledger.infrastructure.factory import create_financial_safety_manager

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: build the ledger and load it from storage. Shutdown: release pools."""
    ledger = create_financial_safety_manager(settings)
    await ledger.load()
    sessions = GameSessionManager()
    app.state.ledger = ledger
    app.state.session_manager = sessions
    app.state.settlement_service = SessionSettlementService(sessions, ledger)
    yield
    if settings.LEDGER_STORAGE_BACKEND == "postgres":
        from src.bb_common.database import engine

        await engine.dispose()
    elif settings.LEDGER_STORAGE_BACKEND == "redis":
        from src.bb_common.redis_client import close_redis

        await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message, request)
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return await app_error_handler(request, InternalError())


app.include_router(games_router, prefix="/api/v1")
app.include_router(ledger_router, prefix="/api/v1")
app.include_router(analytics_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
