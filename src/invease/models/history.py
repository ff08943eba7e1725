"""Invoice history models"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field

from invease.models.invoice import DocumentType, InvoiceData, InvoiceTotals


class PaymentStatus(str, Enum):
    """Payment status of an archived document"""
    UNPAID = "unpaid"
    PAID = "paid"


class DashboardPeriod(str, Enum):
    """Reporting window for dashboard figures"""
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"


class HistoryRecord(BaseModel):
    """
    Archived invoice or credit note

    ``invoice_data`` and ``totals`` are frozen copies of what was issued;
    only ``status`` and ``paid_date`` change after archival.
    """

    id: str = Field(..., description="Record id (inv_... or cn_...)")
    document_type: DocumentType = Field(default=DocumentType.INVOICE)
    invoice_data: InvoiceData
    totals: InvoiceTotals
    status: PaymentStatus = Field(default=PaymentStatus.UNPAID)
    created_at: datetime = Field(..., description="Archival timestamp (UTC)")
    due_date: date
    related_invoice_number: Optional[str] = Field(
        default=None, description="Original invoice number (credit notes only)"
    )
    paid_date: Optional[date] = None

    @property
    def customer_name(self) -> str:
        return self.invoice_data.customer.name

    @property
    def invoice_number(self) -> str:
        return self.invoice_data.details.invoice_number

    @property
    def issue_date(self) -> date:
        return self.invoice_data.details.date

    @property
    def total(self) -> Decimal:
        return self.totals.total

    @property
    def is_credit_note(self) -> bool:
        return self.document_type == DocumentType.CREDIT_NOTE


class RecentCustomer(BaseModel):
    """Customer offered for quick re-use on a new invoice"""

    name: str
    address: str = ""
    post_code: str = ""


class CustomerSummary(BaseModel):
    """One de-duplicated customer across the history"""

    name: str
    email: str = ""
    address: str = ""
    post_code: str = ""
    invoice_count: int = 0
    total_invoiced: Decimal = Decimal("0.00")
    last_used: datetime


class DashboardStats(BaseModel):
    """Aggregate figures for the dashboard"""

    period: DashboardPeriod
    invoice_count: int = 0
    credit_note_count: int = 0
    total_invoiced: Decimal = Decimal("0.00")
    total_collected: Decimal = Decimal("0.00")
    total_outstanding: Decimal = Decimal("0.00")
    current_amount: Decimal = Decimal("0.00")
    overdue_count: int = 0
    overdue_amount: Decimal = Decimal("0.00")
    outstanding_by_customer: Dict[str, Decimal] = Field(default_factory=dict)
