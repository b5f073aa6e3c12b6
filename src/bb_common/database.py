"""Async SQLAlchemy engine for LEDGER_STORAGE_BACKEND=postgres.

Only imported when that backend is selected, so the memory and redis
backends never need a reachable database or the asyncpg driver loaded.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from config.settings import settings

engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=5,
    max_overflow=5,
    pool_pre_ping=True,
    pool_timeout=settings.LEDGER_STORAGE_TIMEOUT_SECONDS,
)

async_session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
    engine, expire_on_commit=False
)
