"""Date helpers shared by the stores and selectors"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union

DEFAULT_PAYMENT_TERMS_DAYS = 30


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def calculate_due_date(
    invoice_date: date, payment_terms: Optional[Union[int, str]]
) -> date:
    """
    Calculate the due date from the invoice date and payment terms

    Args:
        invoice_date: Date the document was issued
        payment_terms: Days until payment is due; unparseable values
            fall back to 30 days

    Returns:
        Due date
    """
    try:
        days = int(payment_terms)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        days = DEFAULT_PAYMENT_TERMS_DAYS
    if days < 0:
        days = DEFAULT_PAYMENT_TERMS_DAYS
    return invoice_date + timedelta(days=days)


def format_date_uk(value: Optional[date]) -> str:
    """Format a date as DD/MM/YYYY"""
    if value is None:
        return ""
    return value.strftime("%d/%m/%Y")


def quarter_of(value: date) -> int:
    return (value.month - 1) // 3 + 1
