"""
Currency helpers

Amounts are carried as Decimal at full precision and only rounded to
pence at the point where a value is emitted.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable

PENNY = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value: Any) -> Decimal:
    """Coerce a number to Decimal without binary-float artefacts"""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    if value is None or value == "":
        return ZERO
    return Decimal(value)


def round_money(value: Decimal) -> Decimal:
    """Round to 2 decimal places, halves away from zero"""
    return to_decimal(value).quantize(PENNY, rounding=ROUND_HALF_UP)


def sum_money(values: Iterable[Decimal]) -> Decimal:
    return sum(values, ZERO)


def to_minor_units(value: Decimal) -> int:
    """Convert pounds to whole pence"""
    return int(round_money(value) * 100)


def from_minor_units(pence: int) -> Decimal:
    """Convert whole pence to pounds"""
    return (Decimal(pence) / 100).quantize(PENNY)


def format_currency(value: Decimal, symbol: str = "£") -> str:
    """
    Format an amount for display, e.g. ``£1,234.50`` or ``-£20.00``

    Args:
        value: Amount in pounds
        symbol: Currency symbol prefix

    Returns:
        Formatted string
    """
    amount = round_money(value)
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"
