"""Stores module initialization"""

from invease.stores.base import BaseStore
from invease.stores.settings_store import SettingsStore, SettingsState
from invease.stores.company_store import CompanyStore, CompanyState
from invease.stores.invoice_store import InvoiceStore, InvoiceDraftState
from invease.stores.history_store import (
    HistoryStore,
    HistoryState,
    select_dashboard_stats,
    search_invoices,
    select_invoices_only,
    select_credit_notes_only,
    select_overdue_invoices,
    select_unpaid_invoices,
    select_paid_invoices,
    select_unique_customers,
    select_recent_customers,
)

__all__ = [
    "BaseStore",
    "SettingsStore",
    "SettingsState",
    "CompanyStore",
    "CompanyState",
    "InvoiceStore",
    "InvoiceDraftState",
    "HistoryStore",
    "HistoryState",
    "select_dashboard_stats",
    "search_invoices",
    "select_invoices_only",
    "select_credit_notes_only",
    "select_overdue_invoices",
    "select_unpaid_invoices",
    "select_paid_invoices",
    "select_unique_customers",
    "select_recent_customers",
]
