"""Utilities module initialization"""

from invease.utils.money import (
    PENNY,
    ZERO,
    to_decimal,
    round_money,
    sum_money,
    to_minor_units,
    from_minor_units,
    format_currency,
)
from invease.utils.dates import (
    calculate_due_date,
    format_date_uk,
    quarter_of,
    utc_now,
)

__all__ = [
    "PENNY",
    "ZERO",
    "to_decimal",
    "round_money",
    "sum_money",
    "to_minor_units",
    "from_minor_units",
    "format_currency",
    "calculate_due_date",
    "format_date_uk",
    "quarter_of",
    "utc_now",
]
