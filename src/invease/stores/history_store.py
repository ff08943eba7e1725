"""
History store
Archive of issued invoices and credit notes, plus the derived views
(dashboard, search, customers) computed over it

Records are deep copies taken at archival time; only payment status
changes afterwards. There is no size cap: records leave the archive
through explicit deletion only.
"""

import logging
import time
import uuid
from collections import OrderedDict
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from invease.models.history import (
    CustomerSummary,
    DashboardPeriod,
    DashboardStats,
    HistoryRecord,
    PaymentStatus,
    RecentCustomer,
)
from invease.models.invoice import DocumentType, InvoiceData, InvoiceTotals
from invease.services.customer_matching import normalise_customer_name
from invease.stores.base import BaseStore, snake_case_keys
from invease.utils.dates import DEFAULT_PAYMENT_TERMS_DAYS, calculate_due_date, quarter_of, utc_now
from invease.utils.money import ZERO, round_money, sum_money

logger = logging.getLogger(__name__)

DEFAULT_RECENT_CUSTOMER_LIMIT = 5


class HistoryState(BaseModel):
    """Persisted archive, newest record first"""

    records: List[HistoryRecord] = Field(default_factory=list)


def generate_record_id(document_type: DocumentType) -> str:
    prefix = "cn" if DocumentType(document_type) == DocumentType.CREDIT_NOTE else "inv"
    return f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:7]}"


def _migrate_legacy_record(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Fill the fields that archives from the earlier app did not store"""
    record = dict(raw)
    if "invoice_data" not in record and "invoice" in record:
        record["invoice_data"] = record.pop("invoice")
    if "created_at" not in record and "saved_at" in record:
        record["created_at"] = record.pop("saved_at")
    record.setdefault("document_type", DocumentType.INVOICE.value)
    record.setdefault("status", PaymentStatus.UNPAID.value)

    details = (record.get("invoice_data") or {}).get("details")
    if isinstance(details, dict):
        try:
            details["payment_terms"] = int(details.get("payment_terms", DEFAULT_PAYMENT_TERMS_DAYS))
        except (TypeError, ValueError):
            details["payment_terms"] = DEFAULT_PAYMENT_TERMS_DAYS
        if "due_date" not in record:
            try:
                issued = date.fromisoformat(str(details.get("date", ""))[:10])
            except ValueError:
                issued = None
            if issued is not None:
                record["due_date"] = calculate_due_date(
                    issued, details["payment_terms"]
                ).isoformat()
    return record


class HistoryStore(BaseStore[HistoryState]):
    """
    History store

    Example:
        >>> history = HistoryStore(MemoryStorage())
        >>> record = history.save_invoice(invoice_data, totals)
        >>> history.mark_as_paid(record.id)
        >>> select_paid_invoices(history.records)[0].id == record.id
        True
    """

    storage_key = "invoice-history"
    version = 2
    state_model = HistoryState

    def default_state(self) -> HistoryState:
        return HistoryState()

    @property
    def records(self) -> List[HistoryRecord]:
        return list(self._state.records)

    # ===== Persistence =====

    def migrate(self, state: Dict[str, Any], version: int) -> Dict[str, Any]:
        if "records" not in state and isinstance(state.get("invoices"), list):
            state["records"] = state.pop("invoices")
        if version < 2 and isinstance(state.get("records"), list):
            state["records"] = [
                _migrate_legacy_record(raw) if isinstance(raw, dict) else raw
                for raw in state["records"]
            ]
        return state

    def from_persisted(self, raw: Any) -> HistoryState:
        """
        Build the archive from a persisted envelope

        Records are validated one by one; a record that fails validation
        is dropped (and logged) without affecting the rest.
        """
        if not isinstance(raw, dict):
            logger.warning(f"Discarding persisted '{self.storage_key}': expected an object")
            return self.default_state()

        version = raw.get("version", 0)
        if not isinstance(version, int):
            version = 0
        state = raw.get("state", raw)
        if not isinstance(state, dict):
            logger.warning(f"Discarding persisted '{self.storage_key}': expected an object")
            return self.default_state()

        state = self.migrate(snake_case_keys(state), version)
        raw_records = state.get("records")
        if not isinstance(raw_records, list):
            return self.default_state()

        records: List[HistoryRecord] = []
        for index, raw_record in enumerate(raw_records):
            try:
                records.append(HistoryRecord.model_validate(raw_record))
            except PydanticValidationError as e:
                logger.warning(
                    f"Dropping invalid history record at position {index}: "
                    f"{e.error_count()} validation error(s)"
                )
        return HistoryState(records=records)

    # ===== Archive =====

    def save_invoice(
        self,
        invoice_data: InvoiceData,
        totals: InvoiceTotals,
        document_type: Optional[DocumentType] = None,
    ) -> HistoryRecord:
        """
        Archive a finalised document

        Args:
            invoice_data: Assembled document; deep-copied into the archive
            totals: Totals computed for it; deep-copied into the archive
            document_type: Overrides the type recorded in the details

        Returns:
            The archived record
        """
        snapshot = invoice_data.model_copy(deep=True)
        doc_type = DocumentType(document_type or snapshot.details.document_type)

        related = None
        if doc_type == DocumentType.CREDIT_NOTE and snapshot.details.credit_note_fields:
            related = snapshot.details.credit_note_fields.related_invoice_number.strip() or None

        record = HistoryRecord(
            id=generate_record_id(doc_type),
            document_type=doc_type,
            invoice_data=snapshot,
            totals=totals.model_copy(deep=True),
            status=PaymentStatus.UNPAID,
            created_at=utc_now(),
            due_date=calculate_due_date(snapshot.details.date, snapshot.details.payment_terms),
            related_invoice_number=related,
        )

        self._mutate(lambda state: HistoryState(records=[record, *state.records]))
        logger.info(
            f"Archived {doc_type.value} {record.invoice_number or '(unnumbered)'} as {record.id}"
        )
        return record.model_copy(deep=True)

    def get_invoice(self, record_id: str) -> Optional[HistoryRecord]:
        for record in self._state.records:
            if record.id == record_id:
                return record.model_copy(deep=True)
        return None

    def _set_status(
        self, record_id: str, status: PaymentStatus, paid_date: Optional[date]
    ) -> None:
        if self.get_invoice(record_id) is None:
            logger.debug(f"No history record {record_id}; status left unchanged")
            return

        def mutation(state: HistoryState) -> HistoryState:
            records = [
                record.model_copy(update={"status": status, "paid_date": paid_date})
                if record.id == record_id else record
                for record in state.records
            ]
            return HistoryState(records=records)

        self._mutate(mutation)

    def mark_as_paid(self, record_id: str, paid_date: Optional[date] = None) -> None:
        self._set_status(record_id, PaymentStatus.PAID, paid_date or date.today())

    def mark_as_unpaid(self, record_id: str) -> None:
        self._set_status(record_id, PaymentStatus.UNPAID, None)

    def delete_invoice(self, record_id: str) -> None:
        """Remove a record permanently; unknown ids are ignored"""
        if self.get_invoice(record_id) is None:
            logger.debug(f"No history record {record_id}; nothing deleted")
            return
        self._mutate(lambda state: HistoryState(
            records=[record for record in state.records if record.id != record_id]
        ))

    def clear_history(self) -> None:
        self._mutate(lambda _: HistoryState())
        logger.warning("Cleared invoice history")


# ===== Selectors =====

def select_invoices_only(records: Sequence[HistoryRecord]) -> List[HistoryRecord]:
    return [record for record in records if record.document_type == DocumentType.INVOICE]


def select_credit_notes_only(records: Sequence[HistoryRecord]) -> List[HistoryRecord]:
    return [record for record in records if record.document_type == DocumentType.CREDIT_NOTE]


def select_unpaid_invoices(records: Sequence[HistoryRecord]) -> List[HistoryRecord]:
    return [
        record for record in select_invoices_only(records)
        if record.status == PaymentStatus.UNPAID
    ]


def select_paid_invoices(records: Sequence[HistoryRecord]) -> List[HistoryRecord]:
    return [
        record for record in select_invoices_only(records)
        if record.status == PaymentStatus.PAID
    ]


def is_overdue(record: HistoryRecord, today: Optional[date] = None) -> bool:
    """Unpaid invoice whose due date has passed (credit notes are never overdue)"""
    today = today or date.today()
    return (
        record.document_type == DocumentType.INVOICE
        and record.status == PaymentStatus.UNPAID
        and record.due_date < today
    )


def select_overdue_invoices(
    records: Sequence[HistoryRecord], today: Optional[date] = None
) -> List[HistoryRecord]:
    return [record for record in records if is_overdue(record, today)]


def search_invoices(
    records: Sequence[HistoryRecord],
    query: str,
    document_type: Optional[DocumentType] = None,
) -> List[HistoryRecord]:
    """Case-insensitive substring match on customer name or document number"""
    results: Iterable[HistoryRecord] = records
    if document_type is not None:
        results = [r for r in results if r.document_type == DocumentType(document_type)]

    needle = (query or "").strip().lower()
    if not needle:
        return list(results)
    return [
        record for record in results
        if needle in record.customer_name.lower() or needle in record.invoice_number.lower()
    ]


def in_period(value: date, period: DashboardPeriod, today: date) -> bool:
    """Whether ``value`` falls in the month, quarter or year containing ``today``"""
    if value.year != today.year:
        return False
    period = DashboardPeriod(period)
    if period == DashboardPeriod.MONTH:
        return value.month == today.month
    if period == DashboardPeriod.QUARTER:
        return quarter_of(value) == quarter_of(today)
    return True


def select_dashboard_stats(
    records: Sequence[HistoryRecord],
    period: DashboardPeriod = DashboardPeriod.MONTH,
    today: Optional[date] = None,
) -> DashboardStats:
    """
    Aggregate figures for the dashboard

    Invoiced and collected figures cover documents issued in ``period``;
    outstanding and overdue figures cover the whole archive.

    Credit notes offset balances as follows: a note whose related invoice
    number matches an archived invoice reduces that invoice while it is
    unpaid (and has no effect once it is paid); any other note reduces
    its customer's balance by name.
    """
    today = today or date.today()
    period = DashboardPeriod(period)

    invoices = select_invoices_only(records)
    credit_notes = select_credit_notes_only(records)

    period_invoices = [r for r in invoices if in_period(r.issue_date, period, today)]
    period_notes = [r for r in credit_notes if in_period(r.issue_date, period, today)]

    total_invoiced = (
        sum_money(r.total for r in period_invoices)
        - sum_money(r.total for r in period_notes)
    )
    total_collected = sum_money(
        r.total for r in period_invoices if r.status == PaymentStatus.PAID
    )

    # Newest invoice wins when a number was issued twice
    by_number: Dict[str, HistoryRecord] = {}
    for record in invoices:
        number = record.invoice_number.strip()
        if number and number not in by_number:
            by_number[number] = record

    linked_credit: Dict[str, Decimal] = {}
    unlinked_notes: List[HistoryRecord] = []
    for note in credit_notes:
        target = by_number.get((note.related_invoice_number or "").strip())
        if target is None:
            unlinked_notes.append(note)
        else:
            linked_credit[target.id] = linked_credit.get(target.id, ZERO) + note.total

    current_amount = ZERO
    overdue_amount = ZERO
    overdue_count = 0
    outstanding: "OrderedDict[str, Decimal]" = OrderedDict()
    display_names: Dict[str, str] = {}

    def add_outstanding(name: str, amount: Decimal) -> None:
        key = normalise_customer_name(name)
        display_names.setdefault(key, name.strip())
        outstanding[key] = outstanding.get(key, ZERO) + amount

    for record in select_unpaid_invoices(invoices):
        balance = record.total - linked_credit.get(record.id, ZERO)
        if is_overdue(record, today):
            overdue_count += 1
            overdue_amount += balance
        else:
            current_amount += balance
        add_outstanding(record.customer_name, balance)

    for note in unlinked_notes:
        current_amount -= note.total
        add_outstanding(note.customer_name, -note.total)

    return DashboardStats(
        period=period,
        invoice_count=len(period_invoices),
        credit_note_count=len(period_notes),
        total_invoiced=round_money(total_invoiced),
        total_collected=round_money(total_collected),
        total_outstanding=round_money(current_amount + overdue_amount),
        current_amount=round_money(current_amount),
        overdue_count=overdue_count,
        overdue_amount=round_money(overdue_amount),
        outstanding_by_customer={
            display_names[key]: round_money(amount) for key, amount in outstanding.items()
        },
    )


def select_unique_customers(records: Sequence[HistoryRecord]) -> List[CustomerSummary]:
    """
    Customers across the archive, de-duplicated by normalised name

    Contact details come from the customer's most recent document.
    Most recently used customer first.
    """
    ordered = sorted(records, key=lambda r: r.created_at, reverse=True)
    customers: "OrderedDict[str, CustomerSummary]" = OrderedDict()

    for record in ordered:
        key = normalise_customer_name(record.customer_name)
        if not key:
            continue
        summary = customers.get(key)
        if summary is None:
            customer = record.invoice_data.customer
            summary = CustomerSummary(
                name=customer.name.strip(),
                email=customer.email,
                address=customer.address,
                post_code=customer.post_code,
                last_used=record.created_at,
            )
            customers[key] = summary
        if record.is_credit_note:
            summary.total_invoiced -= record.total
        else:
            summary.invoice_count += 1
            summary.total_invoiced += record.total

    return list(customers.values())


def select_recent_customers(
    records: Sequence[HistoryRecord], limit: int = DEFAULT_RECENT_CUSTOMER_LIMIT
) -> List[RecentCustomer]:
    return [
        RecentCustomer(name=c.name, address=c.address, post_code=c.post_code)
        for c in select_unique_customers(records)[:max(limit, 0)]
    ]

