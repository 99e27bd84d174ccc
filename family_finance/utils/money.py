"""
Currency helpers.

All arithmetic on amounts goes through integer cents or Decimal quantized
to two places with ROUND_HALF_UP, so float drift never reaches storage.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

CENT = Decimal("0.01")

Number = Union[Decimal, int, float, str]


def _as_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # str() gives the shortest repr, so 89.9 becomes Decimal("89.9")
        return Decimal(str(value))
    return Decimal(value)


def round_currency(value: Number) -> Decimal:
    """Round half-up to cents, e.g. 10.005 -> 10.01."""
    return _as_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_cents(value: Number) -> int:
    """Convert an amount to an integer number of cents (half-up)."""
    return int(round_currency(value) * 100)


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(CENT)


def format_brl(value: Number, symbol: str = "R$") -> str:
    """Format as Brazilian currency, e.g. 'R$ 1.234,56'."""
    amount = round_currency(value)
    sign = "-" if amount < 0 else ""
    # Format with US separators, then swap them
    text = f"{abs(amount):,.2f}"
    text = text.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}{symbol} {text}"
