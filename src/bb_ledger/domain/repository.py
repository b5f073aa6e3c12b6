"""Ledger storage Protocol.

Implemented by the PostgreSQL, Redis and in-memory backends in infrastructure.
"""

from typing import Protocol

from src.bb_ledger.domain.models import LedgerSnapshot


class LedgerStorageProtocol(Protocol):
    async def load(self) -> LedgerSnapshot | None: ...

    async def save(self, snapshot: LedgerSnapshot) -> None: ...
