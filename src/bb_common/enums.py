"""Global enums: values must match DB CHECK constraints exactly."""

from enum import Enum


class GameType(str, Enum):
    BINGO = "bingo"
    TOURNAMENT = "tournament"
    SPECIAL = "special"


class SessionStatus(str, Enum):
    WAITING = "waiting"
    PLAYING = "playing"
    FINISHED = "finished"


class TransactionType(str, Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    ENTRY_FEE = "entry_fee"
    PRIZE_PAYOUT = "prize_payout"
    PLATFORM_FEE = "platform_fee"


class TransactionStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class WarningLevel(str, Enum):
    """Emergency fund check levels, from healthy (LOW) to CRITICAL."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"
