"""
Invease invoice core for Python

VAT and CIS totals, document numbering and the persisted stores behind
a UK invoice generator
"""

from invease.workspace import Workspace
from invease.exceptions import (
    InveaseError,
    InveaseErrorCategory,
    ValidationError,
    NumberingError,
    StorageError,
    ConfigError,
)

# Configuration
from invease.config import (
    InveaseConfig,
    StorageBackend,
    ConfigLoader,
    ConfigValidator,
    ENV_VAR_MAPPING,
    ConfigDefaults,
)

# Storage
from invease.storage import StateStorage, MemoryStorage, JsonFileStorage

# Stores
from invease.stores import (
    SettingsStore,
    CompanyStore,
    InvoiceStore,
    HistoryStore,
)

# Services
from invease.services import compute_totals, find_duplicate_customers
from invease.services.documents import assemble_invoice_data, finalise_document

# Models
from invease.models import (
    VatRate,
    CisStatus,
    CisCategory,
    DocumentType,
    LineItem,
    CustomerDetails,
    InvoiceDetails,
    InvoicerDetails,
    BankDetails,
    InvoiceData,
    InvoiceTotals,
    NumberingConfig,
    ResetPeriod,
    DocumentSeries,
    PaymentStatus,
    HistoryRecord,
    DashboardPeriod,
    DashboardStats,
)

__version__ = "0.1.0"

__all__ = [
    "Workspace",
    # Exceptions
    "InveaseError",
    "InveaseErrorCategory",
    "ValidationError",
    "NumberingError",
    "StorageError",
    "ConfigError",
    # Configuration
    "InveaseConfig",
    "StorageBackend",
    "ConfigLoader",
    "ConfigValidator",
    "ENV_VAR_MAPPING",
    "ConfigDefaults",
    # Storage
    "StateStorage",
    "MemoryStorage",
    "JsonFileStorage",
    # Stores
    "SettingsStore",
    "CompanyStore",
    "InvoiceStore",
    "HistoryStore",
    # Services
    "compute_totals",
    "find_duplicate_customers",
    "assemble_invoice_data",
    "finalise_document",
    # Models
    "VatRate",
    "CisStatus",
    "CisCategory",
    "DocumentType",
    "LineItem",
    "CustomerDetails",
    "InvoiceDetails",
    "InvoicerDetails",
    "BankDetails",
    "InvoiceData",
    "InvoiceTotals",
    "NumberingConfig",
    "ResetPeriod",
    "DocumentSeries",
    "PaymentStatus",
    "HistoryRecord",
    "DashboardPeriod",
    "DashboardStats",
]
