"""Decimal arithmetic utilities for dollar amounts.

All entry fees, pools and balances are decimal.Decimal dollars. No float.
Tier amounts stay exact (13.50 * 0.25 = 3.375); only display rounds to cents.
"""

from decimal import ROUND_HALF_UP, Decimal

ZERO = Decimal("0")
CENT = Decimal("0.01")

PLATFORM_FEE_RATE = Decimal("0.10")
PAYOUT_RATE = Decimal("0.90")

# Scale of the stored amount column: NUMERIC(18, 6).
LEDGER_QUANTUM = Decimal("0.000001")


def to_money(value: Decimal | int | float | str) -> Decimal:
    """Coerce a number to Decimal. Floats go through str() to avoid binary noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def to_ledger_amount(value: Decimal | int | float | str) -> Decimal:
    """Coerce to Decimal at the precision the ledger stores: 3.3750004 -> 3.375000."""
    return to_money(value).quantize(LEDGER_QUANTUM, rounding=ROUND_HALF_UP)


def quantize_cents(amount: Decimal) -> Decimal:
    """Round half-up to whole cents: 3.375 -> 3.38."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def money_to_display(amount: Decimal) -> str:
    """Convert dollars to display string: 1500 -> '$1,500.00', -12 -> '-$12.00'."""
    rounded = quantize_cents(amount)
    if rounded < 0:
        return f"-${-rounded:,.2f}"
    return f"${rounded:,.2f}"


def money_to_str(amount: Decimal) -> str:
    """Plain string, at least cent precision, exact beyond it: 13.5000 -> '13.50', 3.375 -> '3.375'."""
    cents = amount.quantize(CENT)
    if cents == amount:
        return f"{cents:f}"
    return f"{amount.normalize():f}"
