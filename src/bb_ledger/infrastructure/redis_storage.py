"""RedisLedgerStorage: the whole snapshot as one JSON value under a single key."""

from collections.abc import Awaitable, Callable

import redis.asyncio as aioredis

from src.bb_ledger.domain.models import LedgerSnapshot
from src.bb_ledger.infrastructure.serialization import snapshot_from_json, snapshot_to_json


class RedisLedgerStorage:
    def __init__(self, redis_factory: Callable[[], Awaitable[aioredis.Redis]], key: str) -> None:
        self._redis_factory = redis_factory
        self._key = key

    async def load(self) -> LedgerSnapshot | None:
        client = await self._redis_factory()
        raw = await client.get(self._key)
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode()
        return snapshot_from_json(raw)

    async def save(self, snapshot: LedgerSnapshot) -> None:
        client = await self._redis_factory()
        await client.set(self._key, snapshot_to_json(snapshot))
