"""Snowflake-style business IDs for transactions, sessions and bots.

IDs are prefixed strings ("txn_7012..."), unique within a process and
increasing in generation order, so sorting ids of one prefix sorts them by
creation time. Layout of the numeric part (63 bits):

    41 bits  milliseconds since EPOCH_MS
    10 bits  worker id (0-1023)
    12 bits  per-millisecond sequence (0-4095)
"""

import threading
import time

EPOCH_MS = 1_735_689_600_000  # 2025-01-01T00:00:00Z
WORKER_BITS = 10
SEQUENCE_BITS = 12
MAX_WORKER_ID = (1 << WORKER_BITS) - 1
MAX_SEQUENCE = (1 << SEQUENCE_BITS) - 1


class SnowflakeIdGenerator:
    def __init__(self, worker_id: int = 0) -> None:
        if not 0 <= worker_id <= MAX_WORKER_ID:
            raise ValueError(f"worker_id must be 0-{MAX_WORKER_ID}, got {worker_id}")
        self._worker_id = worker_id
        self._last_ms = -1
        self._sequence = 0
        self._lock = threading.Lock()

    def next_int(self) -> int:
        with self._lock:
            now_ms = time.time_ns() // 1_000_000
            # Clock stepped back: keep issuing from the last seen millisecond.
            now_ms = max(now_ms, self._last_ms)
            if now_ms == self._last_ms:
                self._sequence = (self._sequence + 1) & MAX_SEQUENCE
                if self._sequence == 0:
                    while now_ms <= self._last_ms:
                        now_ms = time.time_ns() // 1_000_000
            else:
                self._sequence = 0
            self._last_ms = now_ms
            return (
                ((now_ms - EPOCH_MS) << (WORKER_BITS + SEQUENCE_BITS))
                | (self._worker_id << SEQUENCE_BITS)
                | self._sequence
            )

    def next_id(self, prefix: str = "") -> str:
        value = str(self.next_int())
        return f"{prefix}_{value}" if prefix else value


def id_timestamp_ms(business_id: str) -> int:
    """Unix milliseconds encoded in an id produced by this module."""
    numeric = int(business_id.rsplit("_", 1)[-1])
    return (numeric >> (WORKER_BITS + SEQUENCE_BITS)) + EPOCH_MS


_default_generator = SnowflakeIdGenerator()


def generate_id(prefix: str = "") -> str:
    """generate_id("txn") -> 'txn_7012...'; no prefix gives the bare number."""
    return _default_generator.next_id(prefix)
