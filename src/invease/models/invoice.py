"""Invoice document models"""

import uuid
import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from invease.models.tax import CisCategory, CisStatus, VatRate
from invease.utils.dates import DEFAULT_PAYMENT_TERMS_DAYS
from invease.utils.money import to_decimal


class DocumentType(str, Enum):
    """Kind of document being issued"""
    INVOICE = "invoice"
    CREDIT_NOTE = "credit_note"


def new_line_item_id() -> str:
    return uuid.uuid4().hex


class LineItem(BaseModel):
    """
    Invoice line item

    Field values are not validated here; invalid items are kept in the
    draft and filtered out by the totals engine.
    """

    id: str = Field(default_factory=new_line_item_id, description="Opaque unique id")
    description: str = Field(default="", description="Item description")
    quantity: Decimal = Field(default=Decimal("1"), description="Quantity")
    net_amount: Decimal = Field(default=Decimal("0"), description="Net unit amount (GBP)")
    vat_rate: VatRate = Field(default=VatRate.STANDARD, description="VAT rate")
    cis_category: CisCategory = Field(
        default=CisCategory.NOT_APPLICABLE, description="CIS category"
    )

    model_config = {
        "validate_assignment": True,
    }

    @field_validator("quantity", "net_amount", mode="before")
    @classmethod
    def coerce_decimal(cls, v):
        """
        Convert floats through str so 0.1 stays 0.1

        Blank or unparseable input becomes 0, which leaves the line
        invalid and out of the totals.
        """
        if isinstance(v, str):
            v = v.strip().replace(",", "").replace("£", "")
        try:
            value = to_decimal(v)
        except (InvalidOperation, TypeError, ValueError):
            return Decimal("0")
        if not value.is_finite():
            return Decimal("0")
        return value

    def copy_with_new_id(self) -> "LineItem":
        """Copy of this item under a fresh id"""
        return self.model_copy(update={"id": new_line_item_id()}, deep=True)


class CustomerDetails(BaseModel):
    """Customer being invoiced"""

    name: str = ""
    email: str = ""
    address: str = ""
    post_code: str = ""


class CreditNoteFields(BaseModel):
    """Extra fields carried by a credit note"""

    related_invoice_number: str = Field(
        default="", description="Number of the invoice being credited"
    )
    reason: str = ""
    is_partial: bool = False


class InvoiceDetails(BaseModel):
    """Document header details"""

    date: datetime.date = Field(default_factory=datetime.date.today, description="Issue date")
    supply_date: Optional[datetime.date] = Field(default=None, description="Tax point, if different")
    invoice_number: str = ""
    payment_terms: int = Field(
        default=DEFAULT_PAYMENT_TERMS_DAYS, description="Days until payment is due"
    )
    notes: str = ""
    document_type: DocumentType = DocumentType.INVOICE
    credit_note_fields: Optional[CreditNoteFields] = None

    @field_validator("payment_terms", mode="before")
    @classmethod
    def coerce_payment_terms(cls, v):
        """Unusable terms fall back to 30 days, as calculate_due_date does"""
        try:
            days = int(str(v).strip()) if isinstance(v, str) else int(v)
        except (TypeError, ValueError, OverflowError):
            return DEFAULT_PAYMENT_TERMS_DAYS
        return days if days >= 0 else DEFAULT_PAYMENT_TERMS_DAYS


class InvoicerDetails(BaseModel):
    """The business issuing the document"""

    logo: Optional[str] = None
    logo_file_name: Optional[str] = None
    company_name: str = ""
    company_number: str = ""
    vat_number: str = ""
    eori_number: str = ""
    address: str = ""
    post_code: str = ""
    cis_status: CisStatus = CisStatus.NOT_APPLICABLE
    cis_utr: str = Field(default="", description="10-digit Unique Taxpayer Reference")


class BankDetails(BaseModel):
    """Payment details printed on the document"""

    account_number: str = ""
    sort_code: str = ""
    account_name: str = ""
    bank_name: str = ""
    reference: str = ""


class InvoiceData(BaseModel):
    """Fully assembled document handed to the archive and exporters"""

    invoicer: InvoicerDetails
    customer: CustomerDetails
    details: InvoiceDetails
    line_items: List[LineItem] = Field(default_factory=list)
    bank_details: BankDetails = Field(default_factory=BankDetails)


class VatBreakdownEntry(BaseModel):
    """VAT charged for one rate"""

    rate: VatRate
    amount: Decimal


class CisBreakdown(BaseModel):
    """CIS deduction summary, present for CIS subcontractors only"""

    labour_total: Decimal
    materials_total: Decimal
    deduction_rate: Decimal = Field(..., description="0, 0.20 or 0.30")
    deduction_amount: Decimal
    net_payable: Decimal = Field(..., description="Total minus CIS deduction")


class InvoiceTotals(BaseModel):
    """Totals derived from a document's line items"""

    subtotal: Decimal
    vat_breakdown: List[VatBreakdownEntry] = Field(default_factory=list)
    total_vat: Decimal
    total: Decimal
    cis_breakdown: Optional[CisBreakdown] = None
