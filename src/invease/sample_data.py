"""
Sample data
Placeholder values offered to first-time users, and checks that tell
whether a record still holds them

Blank values count as sample data, so a store restored to its defaults
is always reported as "not yet filled in".
"""

from decimal import Decimal

from invease.models.invoice import BankDetails, CustomerDetails, LineItem
from invease.models.tax import CisCategory, VatRate

SAMPLE_COMPANY = {
    "company_name": "Your Company Name",
    "address": "123 Business Street\nLondon",
    "post_code": "SW1A 1AA",
    "vat_number": "",
    "company_number": "",
}

SAMPLE_BANK_DETAILS = BankDetails(
    bank_name="Your Bank",
    account_name="Your Account Name",
    account_number="12345678",
    sort_code="00-00-00",
    reference="",
)

SAMPLE_CUSTOMER = CustomerDetails(
    name="Sample Customer Ltd",
    address="456 Client Road\nManchester",
    post_code="M1 1AA",
)

SAMPLE_INVOICE_DETAILS = {
    "payment_terms": 30,
    "notes": "Thank you for your business.",
}

SAMPLE_LINE_ITEM = {
    "description": "Professional Services",
    "quantity": Decimal("1"),
    "net_amount": Decimal("500"),
    "vat_rate": VatRate.STANDARD,
    "cis_category": CisCategory.NOT_APPLICABLE,
}


def sample_line_item() -> LineItem:
    """Fresh sample line item with its own id"""
    return LineItem(**SAMPLE_LINE_ITEM)


def is_sample_company_name(name: str) -> bool:
    return name == SAMPLE_COMPANY["company_name"] or name == ""


def is_sample_bank_details(bank: BankDetails) -> bool:
    return (
        bank.bank_name == SAMPLE_BANK_DETAILS.bank_name
        or bank.account_number == SAMPLE_BANK_DETAILS.account_number
        or bank.bank_name == ""
    )


def is_sample_customer(customer: CustomerDetails) -> bool:
    return customer.name == SAMPLE_CUSTOMER.name or customer.name == ""
