"""Fixed-point helpers for monetary amounts.

Amounts are persisted in Float fields; every computation goes through
``Decimal`` quantized to cents so sums never pick up binary float noise.
"""

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


def to_decimal(value) -> Decimal:
    """Convert a stored or user-supplied amount to a cent-quantized Decimal."""
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_amount(value) -> float:
    """Quantize ``value`` and return it in the form stored on aggregates."""
    return float(to_decimal(value))


def format_amount(value) -> str:
    """Serialize an amount as a fixed-point string: ``20`` becomes ``"20.00"``."""
    return str(to_decimal(value))


def line_total(unit_price, quantity: int) -> Decimal:
    return to_decimal(to_decimal(unit_price) * quantity)


def total_of(amounts) -> Decimal:
    return to_decimal(sum((to_decimal(a) for a in amounts), Decimal("0.00")))


def has_at_most_two_decimals(value) -> bool:
    if value is None:
        return True
    exact = Decimal(str(value))
    return exact == exact.quantize(CENT)
