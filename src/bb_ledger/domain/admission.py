"""Admission control and fund-health classification.

A game may start only if BOTH thresholds pass:
  required_balance = estimated_payouts * (1 + SAFETY_MARGIN_MULTIPLIER)
  safety_margin    = required_balance * MINIMUM_BALANCE_RATIO
  available >= required_balance  AND  available - required_balance >= safety_margin
with estimated_payouts = max(min_players, estimated_players) * entry_fee * 0.90.
"""

from decimal import Decimal

from src.bb_common.enums import WarningLevel
from src.bb_common.money import PAYOUT_RATE, PLATFORM_FEE_RATE, ZERO, quantize_cents
from src.bb_ledger.domain.models import (
    FinancialBalance,
    FundHealth,
    GameAdmissionRequest,
    GameFinancialCheck,
)

SAFETY_MARGIN_MULTIPLIER = Decimal("0.5")  # 150% of estimated payouts must be covered
MINIMUM_BALANCE_RATIO = Decimal("0.15")

# (min ratio of available balance to entry fees, level, healthy, message, action)
_HEALTH_LEVELS: tuple[tuple[Decimal, WarningLevel, bool, str, str], ...] = (
    (Decimal("0.5"), WarningLevel.LOW, True,
     "Financial health is excellent", "Continue normal operations"),
    (Decimal("0.3"), WarningLevel.MEDIUM, True,
     "Financial health is good", "Monitor closely"),
    (Decimal("0.15"), WarningLevel.HIGH, False,
     "Financial health is concerning", "Increase deposits or reduce payouts"),
)


def calculate_estimated_payouts(request: GameAdmissionRequest) -> Decimal:
    players = max(request.min_players, request.estimated_players)
    return players * request.entry_fee * PAYOUT_RATE


def _failure_reason(available: Decimal, required: Decimal, safety: Decimal) -> str:
    if available < required:
        return (
            f"Insufficient balance. Need {quantize_cents(required)}, "
            f"have {quantize_cents(available)}"
        )
    if available - required < safety:
        return f"Insufficient safety margin. Need {quantize_cents(safety)} more for safety"
    return "Unknown reason"


def evaluate_admission(
    request: GameAdmissionRequest, available_balance: Decimal, test_mode: bool = False
) -> GameFinancialCheck:
    estimated = calculate_estimated_payouts(request)
    platform_fee = estimated * PLATFORM_FEE_RATE

    if test_mode:
        return GameFinancialCheck(
            can_start=True,
            required_balance=estimated,
            available_balance=available_balance,
            estimated_payouts=estimated,
            platform_fee=platform_fee,
            safety_margin=ZERO,
        )

    required = estimated * (1 + SAFETY_MARGIN_MULTIPLIER)
    safety = required * MINIMUM_BALANCE_RATIO
    can_start = available_balance >= required and (available_balance - required) >= safety
    return GameFinancialCheck(
        can_start=can_start,
        required_balance=required,
        available_balance=available_balance,
        estimated_payouts=estimated,
        platform_fee=platform_fee,
        safety_margin=safety,
        reason=None if can_start else _failure_reason(available_balance, required, safety),
    )


def classify_fund_health(balance: FinancialBalance) -> FundHealth:
    """Advisory only: ratio of available balance to entry fees collected (min divisor 1)."""
    divisor = balance.total_entry_fees or Decimal(1)
    ratio = balance.available_balance / divisor
    for threshold, level, healthy, message, action in _HEALTH_LEVELS:
        if ratio >= threshold:
            return FundHealth(healthy, level, message, action)
    return FundHealth(
        is_healthy=False,
        warning_level=WarningLevel.CRITICAL,
        message="Financial health is critical",
        recommended_action="STOP ALL PAYOUTS - Emergency action required",
    )
