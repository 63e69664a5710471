"""
Currency helpers.

Missing or malformed amounts count as zero everywhere in reporting.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")


def to_decimal(value: Any) -> Decimal:
    """Convert a stored amount to Decimal; None, NaN and junk become 0."""
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return ZERO
    return result if result.is_finite() else ZERO


def round_half_up(value: Decimal, places: int = 0) -> Decimal:
    """Round like the dashboard does (0.5 goes up, not to even)."""
    exponent = Decimal(1).scaleb(-places)
    return value.quantize(exponent, rounding=ROUND_HALF_UP)


def safe_format(value: Any) -> str:
    """'$1,234' style display; '$0' for missing values."""
    amount = to_decimal(value)
    if amount == amount.to_integral_value():
        return f"${amount:,.0f}"
    return f"${amount:,.2f}"
