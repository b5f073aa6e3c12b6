"""Unified error codes and custom exceptions.

Error code ranges:
  2xxx: Ledger
  3xxx: Game config / session
  9xxx: System

Insufficient funds and failed admission checks are NOT errors: they are
returned as result values (None / GameFinancialCheck.can_start=False).
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 2xxx: Ledger ---

class InvalidAmountError(AppError):
    def __init__(self, amount: object) -> None:
        super().__init__(2001, f"Amount must be positive, got {amount}", 422)


class TransactionNotFoundError(AppError):
    def __init__(self, transaction_id: str) -> None:
        super().__init__(2002, f"Transaction not found: {transaction_id}", 404)


class InvalidStatusTransitionError(AppError):
    def __init__(self, transaction_id: str, current: str, target: str) -> None:
        super().__init__(
            2003,
            f"Transaction {transaction_id} cannot move from {current} to {target}",
            422,
        )


class LedgerPersistenceError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2004, f"Ledger persistence failed: {detail}", 503)


# --- 3xxx: Game config / session ---

class ConfigNotFoundError(AppError):
    def __init__(self, config_id: str) -> None:
        super().__init__(3001, f"Game config not found: {config_id}", 404)


class SessionNotFoundError(AppError):
    def __init__(self, session_id: str) -> None:
        super().__init__(3002, f"Game session not found: {session_id}", 404)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)
