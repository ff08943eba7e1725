"""
Shared fixtures for the unit tests
"""

from datetime import date
from decimal import Decimal
from typing import Optional
import pytest

from invease.models.invoice import (
    BankDetails,
    CreditNoteFields,
    CustomerDetails,
    DocumentType,
    InvoiceData,
    InvoiceDetails,
    InvoicerDetails,
    LineItem,
)
from invease.models.tax import VatRate
from invease.services.totals import compute_totals


@pytest.fixture
def make_invoice_data():
    """Factory for assembled documents with one standard-rated line"""

    def build(
        customer: str = "Acme Ltd",
        number: str = "INV-0001",
        issued: date = date(2026, 3, 1),
        net_amount: str = "1000",
        document_type: DocumentType = DocumentType.INVOICE,
        related_invoice_number: Optional[str] = None,
        payment_terms: int = 30,
        vat_rate: VatRate = VatRate.ZERO,
    ) -> InvoiceData:
        credit_note_fields = None
        if document_type == DocumentType.CREDIT_NOTE:
            credit_note_fields = CreditNoteFields(
                related_invoice_number=related_invoice_number or "",
                reason="Goods returned",
            )
        return InvoiceData(
            invoicer=InvoicerDetails(company_name="Builder Co", post_code="SW1A 1AA"),
            customer=CustomerDetails(name=customer, address="1 High Street", post_code="M1 1AA"),
            details=InvoiceDetails(
                date=issued,
                invoice_number=number,
                payment_terms=payment_terms,
                document_type=document_type,
                credit_note_fields=credit_note_fields,
            ),
            line_items=[
                LineItem(description="Work", quantity=Decimal("1"),
                         net_amount=Decimal(net_amount), vat_rate=vat_rate),
            ],
            bank_details=BankDetails(account_number="12345678", sort_code="12-34-56"),
        )

    return build


@pytest.fixture
def invoice_data(make_invoice_data) -> InvoiceData:
    return make_invoice_data(vat_rate=VatRate.STANDARD)


@pytest.fixture
def archive(make_invoice_data):
    """Archive a document the way finalisation does, returning the record"""

    def save(history, **kwargs):
        data = make_invoice_data(**kwargs)
        return history.save_invoice(data, compute_totals(data.line_items))

    return save
