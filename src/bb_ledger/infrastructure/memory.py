"""In-process snapshot store for tests and LEDGER_STORAGE_BACKEND=memory.

Stores the serialized JSON rather than live objects so a reload goes through
the same revival path as the durable stores.
"""

from src.bb_ledger.domain.models import LedgerSnapshot
from src.bb_ledger.infrastructure.serialization import snapshot_from_json, snapshot_to_json


class InMemoryLedgerStorage:
    def __init__(self, raw: str | None = None) -> None:
        self.raw = raw
        self.save_count = 0

    async def load(self) -> LedgerSnapshot | None:
        if self.raw is None:
            return None
        return snapshot_from_json(self.raw)

    async def save(self, snapshot: LedgerSnapshot) -> None:
        self.raw = snapshot_to_json(snapshot)
        self.save_count += 1
