"""
Invoice store
The document currently being edited

Mutators merge values into the draft without validating them; the
totals engine skips lines that are not yet usable. Changes can be
undone and redone, up to HISTORY_LIMIT steps back.
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from invease.models.invoice import (
    CreditNoteFields,
    CustomerDetails,
    DocumentType,
    InvoiceData,
    InvoiceDetails,
    InvoiceTotals,
    LineItem,
)
from invease.models.tax import CisCategory, CisStatus, VatRate
from invease.services.totals import compute_totals
from invease.storage import StateStorage
from invease.stores.base import BaseStore, merge_model
from invease.utils.dates import DEFAULT_PAYMENT_TERMS_DAYS

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 50

DEFAULT_CUSTOMER = CustomerDetails()


def create_empty_line_item(
    is_cis: bool = False, vat_rate: VatRate = VatRate.STANDARD
) -> LineItem:
    return LineItem(
        vat_rate=vat_rate,
        cis_category=CisCategory.LABOUR if is_cis else CisCategory.NOT_APPLICABLE,
    )


def default_invoice_details(payment_terms: int = DEFAULT_PAYMENT_TERMS_DAYS) -> InvoiceDetails:
    """Header defaults for a fresh draft, dated today"""
    return InvoiceDetails(payment_terms=payment_terms)


class InvoiceDraftState(BaseModel):
    """Persisted draft"""

    customer: CustomerDetails = Field(default_factory=CustomerDetails)
    details: InvoiceDetails = Field(default_factory=default_invoice_details)
    line_items: List[LineItem] = Field(default_factory=lambda: [create_empty_line_item()])


class InvoiceStore(BaseStore[InvoiceDraftState]):
    """Invoice (draft) store"""

    storage_key = "invoice-draft"
    version = 1
    state_model = InvoiceDraftState

    def __init__(
        self,
        storage: Optional[StateStorage] = None,
        default_payment_terms: int = DEFAULT_PAYMENT_TERMS_DAYS,
        default_vat_rate: VatRate = VatRate.STANDARD,
        auto_load: bool = True,
    ) -> None:
        self._default_payment_terms = default_payment_terms
        self._default_vat_rate = VatRate(default_vat_rate)
        self._past: List[InvoiceDraftState] = []
        self._future: List[InvoiceDraftState] = []
        super().__init__(storage, auto_load=auto_load)

    def default_state(self, is_cis: bool = False) -> InvoiceDraftState:
        return InvoiceDraftState(
            customer=DEFAULT_CUSTOMER.model_copy(),
            details=default_invoice_details(self._default_payment_terms),
            line_items=[create_empty_line_item(is_cis, self._default_vat_rate)],
        )

    def _mutate(self, mutation):
        with self._lock:
            previous = self._state
            next_state = super()._mutate(mutation)
            if next_state != previous:
                self._past.append(previous)
                del self._past[:-HISTORY_LIMIT]
                self._future.clear()
        return next_state

    # ===== Customer & details =====

    def set_customer_details(self, **details: Any) -> None:
        self._mutate(lambda state: state.model_copy(
            update={"customer": merge_model(state.customer, details)}
        ))

    def set_invoice_details(self, **details: Any) -> None:
        self._mutate(lambda state: state.model_copy(
            update={"details": merge_model(state.details, details)}
        ))

    def set_document_type(self, document_type: DocumentType) -> None:
        """Switch between invoice and credit note, adding or dropping credit note fields"""
        document_type = DocumentType(document_type)

        def mutation(state: InvoiceDraftState) -> InvoiceDraftState:
            fields = state.details.credit_note_fields
            if document_type == DocumentType.CREDIT_NOTE:
                fields = fields or CreditNoteFields()
            else:
                fields = None
            details = state.details.model_copy(
                update={"document_type": document_type, "credit_note_fields": fields}
            )
            return state.model_copy(update={"details": details})

        self._mutate(mutation)

    def set_credit_note_fields(self, **fields: Any) -> None:
        def mutation(state: InvoiceDraftState) -> InvoiceDraftState:
            current = state.details.credit_note_fields or CreditNoteFields()
            details = state.details.model_copy(
                update={"credit_note_fields": merge_model(current, fields)}
            )
            return state.model_copy(update={"details": details})

        self._mutate(mutation)

    # ===== Line items =====

    def add_line_item(self, is_cis: bool = False) -> LineItem:
        item = create_empty_line_item(is_cis, self._default_vat_rate)
        self._mutate(lambda state: state.model_copy(
            update={"line_items": [*state.line_items, item]}
        ))
        return item

    def update_line_item(self, item_id: str, **updates: Any) -> None:
        """Merge ``updates`` into one line; unknown ids are ignored"""
        updates.pop("id", None)

        def mutation(state: InvoiceDraftState) -> InvoiceDraftState:
            items = [
                merge_model(item, updates) if item.id == item_id else item
                for item in state.line_items
            ]
            return state.model_copy(update={"line_items": items})

        self._mutate(mutation)

    def remove_line_item(self, item_id: str) -> None:
        self._mutate(lambda state: state.model_copy(
            update={"line_items": [item for item in state.line_items if item.id != item_id]}
        ))

    def duplicate_line_item(self, item_id: str) -> Optional[LineItem]:
        """Insert a copy (with a new id) right after the given line"""
        source = self.get_line_item(item_id)
        if source is None:
            logger.debug(f"Cannot duplicate unknown line item {item_id}")
            return None

        copy = source.copy_with_new_id()

        def mutation(state: InvoiceDraftState) -> InvoiceDraftState:
            items: List[LineItem] = []
            for item in state.line_items:
                items.append(item)
                if item.id == item_id:
                    items.append(copy)
            return state.model_copy(update={"line_items": items})

        self._mutate(mutation)
        return copy

    def get_line_item(self, item_id: str) -> Optional[LineItem]:
        for item in self._state.line_items:
            if item.id == item_id:
                return item
        return None

    # ===== Whole document =====

    def load_invoice_data(self, data: InvoiceData) -> None:
        """
        Start a new draft from an existing document

        Line items get fresh ids and the number is cleared, since the
        draft will be issued as a new document.
        """
        details = data.details.model_copy(deep=True, update={"invoice_number": ""})
        state = InvoiceDraftState(
            customer=data.customer.model_copy(deep=True),
            details=details,
            line_items=[item.copy_with_new_id() for item in data.line_items],
        )
        self._mutate(lambda _: state)

    def reset_invoice(self, is_cis: bool = False) -> None:
        """Restore the default draft"""
        self._mutate(lambda _: self.default_state(is_cis))

    def clear_all_details(self, is_cis: bool = False) -> None:
        self.reset_invoice(is_cis)

    def get_totals(self, cis_status: CisStatus = CisStatus.NOT_APPLICABLE) -> InvoiceTotals:
        return compute_totals(self._state.line_items, cis_status)

    # ===== Undo / redo =====

    @property
    def can_undo(self) -> bool:
        return bool(self._past)

    @property
    def can_redo(self) -> bool:
        return bool(self._future)

    def undo(self) -> bool:
        """Step back one change; returns False when there is nothing to undo"""
        with self._lock:
            if not self._past:
                return False
            previous = self._past.pop()
            self._future.append(self._state)
            BaseStore._mutate(self, lambda _: previous)
        return True

    def redo(self) -> bool:
        with self._lock:
            if not self._future:
                return False
            following = self._future.pop()
            self._past.append(self._state)
            BaseStore._mutate(self, lambda _: following)
        return True

    def clear_undo_history(self) -> None:
        with self._lock:
            self._past.clear()
            self._future.clear()

    def serialize_state(self, state: InvoiceDraftState) -> Dict[str, Any]:
        return state.model_dump(mode="json")
