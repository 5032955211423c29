"""Helpers for money held as integer minor units."""

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


def round_minor(value: float | Decimal) -> int:
    """Round to a whole minor unit, halves away from zero."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def apply_rate(amount: int | Decimal, rate: Decimal) -> Decimal:
    """Multiply an amount by a rate, keeping two decimal places."""
    return (Decimal(amount) * rate).quantize(CENT, rounding=ROUND_HALF_UP)
