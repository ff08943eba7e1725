"""Models module initialization"""

from invease.models.tax import VatRate, CisStatus, CisCategory
from invease.models.invoice import (
    DocumentType,
    LineItem,
    CustomerDetails,
    CreditNoteFields,
    InvoiceDetails,
    InvoicerDetails,
    BankDetails,
    InvoiceData,
    VatBreakdownEntry,
    CisBreakdown,
    InvoiceTotals,
)
from invease.models.numbering import (
    ResetPeriod,
    DocumentSeries,
    NumberingConfig,
    PatternValidation,
    NumberingPreset,
)
from invease.models.history import (
    PaymentStatus,
    DashboardPeriod,
    HistoryRecord,
    RecentCustomer,
    CustomerSummary,
    DashboardStats,
)
from invease.models.company import BusinessType, CompanySearchResult

__all__ = [
    "VatRate",
    "CisStatus",
    "CisCategory",
    "DocumentType",
    "LineItem",
    "CustomerDetails",
    "CreditNoteFields",
    "InvoiceDetails",
    "InvoicerDetails",
    "BankDetails",
    "InvoiceData",
    "VatBreakdownEntry",
    "CisBreakdown",
    "InvoiceTotals",
    "ResetPeriod",
    "DocumentSeries",
    "NumberingConfig",
    "PatternValidation",
    "NumberingPreset",
    "PaymentStatus",
    "DashboardPeriod",
    "HistoryRecord",
    "RecentCustomer",
    "CustomerSummary",
    "DashboardStats",
    "BusinessType",
    "CompanySearchResult",
]
