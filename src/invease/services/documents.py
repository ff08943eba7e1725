"""
Document finalisation
Issues the draft as a numbered document and archives it

Consuming the number and archiving the record form one unit of work.
If archival fails after the number was consumed the sequence is not
rolled back: the series gets a gap, never a duplicate.
"""

import logging
from datetime import date
from typing import Optional

from invease.models.history import HistoryRecord
from invease.models.invoice import DocumentType, InvoiceData
from invease.models.numbering import DocumentSeries
from invease.services.totals import compute_totals
from invease.stores.company_store import CompanyStore
from invease.stores.history_store import HistoryStore
from invease.stores.invoice_store import InvoiceStore
from invease.stores.settings_store import SettingsStore

logger = logging.getLogger(__name__)


def assemble_invoice_data(invoice_store: InvoiceStore, company_store: CompanyStore) -> InvoiceData:
    """Combine the draft with the invoicer's profile into one detached document"""
    draft = invoice_store.snapshot()
    return InvoiceData(
        invoicer=company_store.get_invoicer_details(),
        customer=draft.customer,
        details=draft.details,
        line_items=draft.line_items,
        bank_details=company_store.get_bank_details(),
    )


def finalise_document(
    invoice_store: InvoiceStore,
    company_store: CompanyStore,
    settings_store: SettingsStore,
    history_store: HistoryStore,
    document_type: Optional[DocumentType] = None,
    on: Optional[date] = None,
) -> HistoryRecord:
    """
    Number, total and archive the current draft

    Args:
        invoice_store: Draft being issued
        company_store: Invoicer profile (details, bank, CIS status)
        settings_store: Owner of the numbering sequences
        history_store: Archive receiving the snapshot
        document_type: Defaults to the type set on the draft
        on: Date used for period tokens and resets (defaults to today)

    Returns:
        The archived record
    """
    doc_type = DocumentType(document_type or invoice_store.state.details.document_type)
    series = (
        DocumentSeries.CREDIT_NOTE if doc_type == DocumentType.CREDIT_NOTE
        else DocumentSeries.INVOICE
    )

    number = settings_store.consume_number(series, on)
    try:
        invoice_store.set_invoice_details(invoice_number=number, document_type=doc_type)
        invoice_data = assemble_invoice_data(invoice_store, company_store)
        totals = compute_totals(invoice_data.line_items, invoice_data.invoicer.cis_status)
        return history_store.save_invoice(invoice_data, totals, doc_type)
    except Exception:
        logger.error(f"Finalising {doc_type.value} {number} failed; the number is left unused")
        raise
