"""Decimal helpers for currency amounts.

Balances and prices never touch binary floats once they enter the core:
floats are converted through their string form, and every stored amount
is quantized to cents.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

MONEY_PRECISION = Decimal("0.01")

# Largest single amount accepted from a caller, and largest balance ever
# stored. Both stay well inside the 28-digit default decimal context, so
# quantizing to cents cannot overflow.
MAX_AMOUNT = Decimal("1000000000000000")  # 1e15
MAX_BALANCE = Decimal("1000000000000000000000000")  # 1e24

Amount = Union[str, int, float, Decimal]


def to_decimal(value: Amount | None) -> Decimal:
    """Convert ``value`` to Decimal, returning ``Decimal("0")`` if None/invalid."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    try:
        if isinstance(value, float):
            return Decimal(str(value))
        return Decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")


def round_money(value: Amount) -> Decimal:
    """Quantize to cents, rounding half up."""
    return to_decimal(value).quantize(MONEY_PRECISION, rounding=ROUND_HALF_UP)


def parse_amount(value: object, limit: Decimal = MAX_AMOUNT) -> Decimal | None:
    """Parse a non-negative amount no larger than ``limit``.

    Returns None for anything that is not a finite number in
    ``[0, limit]`` (booleans included, even though they are ints).
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    if not isinstance(value, (str, int, float, Decimal)):
        return None
    try:
        amount = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return None
    if not amount.is_finite() or amount < 0 or amount > limit:
        return None
    try:
        return round_money(amount)
    except InvalidOperation:
        return None
