"""
Workspace
Application root that builds the storage backend and the four stores
from one configuration and hands them out explicitly
"""

import logging
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from invease.config import ConfigLoader, InveaseConfig, StorageBackend
from invease.models.history import DashboardPeriod, DashboardStats, HistoryRecord, RecentCustomer
from invease.models.invoice import DocumentType, InvoiceTotals
from invease.services.documents import finalise_document
from invease.storage import JsonFileStorage, MemoryStorage, StateStorage
from invease.stores.company_store import CompanyStore
from invease.stores.history_store import (
    HistoryStore,
    select_dashboard_stats,
    select_recent_customers,
)
from invease.stores.invoice_store import InvoiceStore
from invease.stores.settings_store import SettingsStore

logger = logging.getLogger(__name__)

PACKAGE_LOGGER = "invease"


class Workspace:
    """
    Workspace class
    Owns one instance of each store, wired to the same storage backend

    Example:
        >>> workspace = Workspace.from_config({"storage_backend": "memory"})
        >>> workspace.invoice.set_customer_details(name="Acme Ltd")
        >>> record = workspace.finalise()
        >>> record.invoice_number
        'INV-0001'
    """

    def __init__(
        self,
        config: Optional[InveaseConfig] = None,
        storage: Optional[StateStorage] = None,
    ) -> None:
        self.config = config or InveaseConfig()
        logging.getLogger(PACKAGE_LOGGER).setLevel(self.config.log_level)

        self.storage = storage or self._create_storage(self.config)

        self.settings = SettingsStore(
            self.storage,
            invoice_numbering=self.config.invoice_numbering(),
            credit_note_numbering=self.config.credit_note_numbering(),
        )
        self.company = CompanyStore(self.storage)
        self.invoice = InvoiceStore(
            self.storage,
            default_payment_terms=self.config.default_payment_terms,
            default_vat_rate=self.config.default_vat_rate,
        )
        self.history = HistoryStore(self.storage)

        logger.debug(
            f"Workspace ready ({self.config.storage_backend.value} storage, "
            f"{len(self.history.records)} archived documents)"
        )

    @classmethod
    def from_config(
        cls,
        config: Optional[Dict[str, Any]] = None,
        file: Optional[Union[str, Path]] = None,
        env: bool = False,
    ) -> "Workspace":
        """Build a workspace from a config file, environment and/or dictionary"""
        return cls(ConfigLoader().load(file=file, env=env, config=config))

    @staticmethod
    def _create_storage(config: InveaseConfig) -> StateStorage:
        if config.storage_backend == StorageBackend.MEMORY:
            return MemoryStorage()
        return JsonFileStorage(config.storage_dir)

    # ===== Document flow =====

    def current_totals(self) -> InvoiceTotals:
        """Totals of the draft under the invoicer's CIS status"""
        return self.invoice.get_totals(self.company.state.cis_status)

    def finalise(
        self,
        document_type: Optional[DocumentType] = None,
        on: Optional[date] = None,
    ) -> HistoryRecord:
        """Number and archive the current draft"""
        return finalise_document(
            self.invoice,
            self.company,
            self.settings,
            self.history,
            document_type=document_type,
            on=on,
        )

    def start_new_document(self) -> None:
        """Reset the draft for the next document"""
        self.invoice.reset_invoice(is_cis=self.company.is_cis_subcontractor())
        self.invoice.clear_undo_history()

    # ===== Views =====

    def dashboard(
        self,
        period: DashboardPeriod = DashboardPeriod.MONTH,
        today: Optional[date] = None,
    ) -> DashboardStats:
        return select_dashboard_stats(self.history.records, period, today)

    def recent_customers(self) -> List[RecentCustomer]:
        return select_recent_customers(self.history.records, self.config.recent_customer_limit)
