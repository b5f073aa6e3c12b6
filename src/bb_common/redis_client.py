"""Redis connection for LEDGER_STORAGE_BACKEND=redis.

One lazily created client per process. The ledger snapshot lives as a JSON
string under settings.LEDGER_REDIS_KEY. Socket timeouts equal the ledger
storage timeout.
"""

import redis.asyncio as aioredis

from config.settings import settings

_client: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    global _client  # noqa: PLW0603
    if _client is None:
        _client = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_timeout=settings.LEDGER_STORAGE_TIMEOUT_SECONDS,
            socket_connect_timeout=settings.LEDGER_STORAGE_TIMEOUT_SECONDS,
            health_check_interval=30,
        )
    return _client


async def close_redis() -> None:
    global _client  # noqa: PLW0603
    if _client is not None:
        await _client.aclose()
        _client = None
