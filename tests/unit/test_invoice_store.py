"""
Invoice (Draft) Store Unit Tests
"""

from datetime import date
from decimal import Decimal
import pytest

from invease.models.invoice import DocumentType
from invease.models.tax import CisCategory, CisStatus, VatRate
from invease.sample_data import is_sample_customer
from invease.storage import MemoryStorage
from invease.stores.invoice_store import HISTORY_LIMIT, InvoiceStore


@pytest.fixture
def invoice() -> InvoiceStore:
    return InvoiceStore(MemoryStorage())


class TestDraftEditing:
    """Tests for draft mutators"""

    def test_default_draft(self, invoice: InvoiceStore):
        """Should start with one empty line item dated today"""
        state = invoice.state
        assert len(state.line_items) == 1
        assert state.line_items[0].description == ""
        assert state.details.date == date.today()
        assert state.details.payment_terms == 30
        assert state.details.document_type == DocumentType.INVOICE

    def test_set_customer_details(self, invoice: InvoiceStore):
        """Should merge customer fields"""
        invoice.set_customer_details(name="Acme Ltd")
        invoice.set_customer_details(email="accounts@acme.test")

        assert invoice.state.customer.name == "Acme Ltd"
        assert invoice.state.customer.email == "accounts@acme.test"

    def test_set_invoice_details(self, invoice: InvoiceStore):
        """Should merge header fields"""
        invoice.set_invoice_details(payment_terms=14, notes="Thanks")
        assert invoice.state.details.payment_terms == 14
        assert invoice.state.details.notes == "Thanks"

    def test_add_update_remove_line_item(self, invoice: InvoiceStore):
        """Should manage line items by id"""
        item = invoice.add_line_item()
        invoice.update_line_item(item.id, description="Consulting", net_amount="250.50")

        updated = invoice.get_line_item(item.id)
        assert updated.description == "Consulting"
        assert updated.net_amount == Decimal("250.50")

        invoice.remove_line_item(item.id)
        assert invoice.get_line_item(item.id) is None
        assert len(invoice.state.line_items) == 1

    def test_update_does_not_change_id(self, invoice: InvoiceStore):
        """Should ignore attempts to overwrite the item id"""
        item_id = invoice.state.line_items[0].id
        invoice.update_line_item(item_id, id="other", description="Kept")
        assert invoice.get_line_item(item_id).description == "Kept"

    def test_update_unknown_item_is_noop(self, invoice: InvoiceStore):
        """Should leave the draft untouched for unknown ids"""
        before = invoice.snapshot()
        invoice.update_line_item("missing", description="Nope")
        assert invoice.state == before

    def test_add_cis_line_item(self, invoice: InvoiceStore):
        """Should default new CIS lines to labour"""
        item = invoice.add_line_item(is_cis=True)
        assert item.cis_category == CisCategory.LABOUR

    def test_duplicate_line_item(self, invoice: InvoiceStore):
        """Should insert a copy with a new id right after the original"""
        first = invoice.state.line_items[0]
        invoice.update_line_item(first.id, description="Design", net_amount="80")
        invoice.add_line_item()

        copy = invoice.duplicate_line_item(first.id)

        items = invoice.state.line_items
        assert items[1].id == copy.id
        assert copy.id != first.id
        assert copy.description == "Design"
        assert len(items) == 3

    def test_duplicate_unknown_item(self, invoice: InvoiceStore):
        """Should return None for unknown ids"""
        assert invoice.duplicate_line_item("missing") is None

    def test_invalid_values_are_kept(self, invoice: InvoiceStore):
        """Should not validate drafts; invalid lines are only excluded from totals"""
        item_id = invoice.state.line_items[0].id
        invoice.update_line_item(item_id, description="", net_amount="-5")

        assert invoice.get_line_item(item_id).net_amount == Decimal("-5")
        assert invoice.get_totals().subtotal == Decimal("0.00")

    @pytest.mark.parametrize("raw", ["", "   ", "abc", None])
    def test_unparseable_amount_becomes_zero(self, invoice: InvoiceStore, raw):
        """Should treat blank or non-numeric amounts as zero instead of raising"""
        item_id = invoice.state.line_items[0].id
        invoice.update_line_item(item_id, description="Consulting", net_amount=raw)

        assert invoice.get_line_item(item_id).net_amount == Decimal("0")
        assert invoice.get_totals().subtotal == Decimal("0.00")

    def test_unparseable_quantity_becomes_zero(self, invoice: InvoiceStore):
        """Should treat a non-numeric quantity as zero"""
        item_id = invoice.state.line_items[0].id
        invoice.update_line_item(item_id, quantity="two")
        assert invoice.get_line_item(item_id).quantity == Decimal("0")

    def test_formatted_amount_is_parsed(self, invoice: InvoiceStore):
        """Should accept amounts typed with a pound sign and thousands separators"""
        item_id = invoice.state.line_items[0].id
        invoice.update_line_item(item_id, net_amount="£1,250.50")
        assert invoice.get_line_item(item_id).net_amount == Decimal("1250.50")

    @pytest.mark.parametrize("raw", ["", "abc", None, -5])
    def test_unparseable_payment_terms_use_default(self, invoice: InvoiceStore, raw):
        """Should fall back to 30 days for blank, non-numeric or negative terms"""
        invoice.set_invoice_details(payment_terms=raw)
        assert invoice.state.details.payment_terms == 30

    def test_numeric_string_payment_terms(self, invoice: InvoiceStore):
        """Should parse payment terms typed as text"""
        invoice.set_invoice_details(payment_terms=" 14 ")
        assert invoice.state.details.payment_terms == 14


class TestDocumentType:
    """Tests for switching between invoices and credit notes"""

    def test_switch_to_credit_note(self, invoice: InvoiceStore):
        """Should add empty credit note fields"""
        invoice.set_document_type(DocumentType.CREDIT_NOTE)

        details = invoice.state.details
        assert details.document_type == DocumentType.CREDIT_NOTE
        assert details.credit_note_fields is not None
        assert details.credit_note_fields.related_invoice_number == ""

    def test_set_credit_note_fields(self, invoice: InvoiceStore):
        """Should merge credit note fields"""
        invoice.set_document_type(DocumentType.CREDIT_NOTE)
        invoice.set_credit_note_fields(related_invoice_number="INV-0007", reason="Returned")
        invoice.set_credit_note_fields(is_partial=True)

        fields = invoice.state.details.credit_note_fields
        assert fields.related_invoice_number == "INV-0007"
        assert fields.reason == "Returned"
        assert fields.is_partial is True

    def test_switch_back_clears_fields(self, invoice: InvoiceStore):
        """Should drop credit note fields on an invoice"""
        invoice.set_document_type(DocumentType.CREDIT_NOTE)
        invoice.set_credit_note_fields(reason="Returned")
        invoice.set_document_type(DocumentType.INVOICE)

        assert invoice.state.details.credit_note_fields is None


class TestTotalsBinding:
    """Tests for get_totals"""

    def test_totals_follow_line_items(self, invoice: InvoiceStore):
        """Should compute totals over the current lines"""
        item_id = invoice.state.line_items[0].id
        invoice.update_line_item(item_id, description="Work", quantity=2, net_amount="100")

        totals = invoice.get_totals()
        assert totals.total == Decimal("240.00")
        assert totals.cis_breakdown is None

    def test_totals_with_cis(self, invoice: InvoiceStore):
        """Should include the CIS breakdown for the given status"""
        item_id = invoice.state.line_items[0].id
        invoice.update_line_item(
            item_id, description="Labour", net_amount="100", cis_category=CisCategory.LABOUR
        )

        totals = invoice.get_totals(CisStatus.STANDARD)
        assert totals.cis_breakdown.deduction_amount == Decimal("20.00")


class TestResetAndLoad:
    """Tests for resetting and loading drafts"""

    def test_reset_restores_defaults(self, invoice: InvoiceStore):
        """Should restore the named defaults"""
        invoice.set_customer_details(name="Acme Ltd")
        invoice.add_line_item()
        invoice.reset_invoice()

        assert invoice.state.customer.name == ""
        assert len(invoice.state.line_items) == 1
        assert is_sample_customer(invoice.state.customer) is True

    def test_clear_all_details_with_cis(self, invoice: InvoiceStore):
        """Should default the fresh line to labour for CIS invoicers"""
        invoice.clear_all_details(is_cis=True)
        assert invoice.state.line_items[0].cis_category == CisCategory.LABOUR

    def test_configured_defaults(self):
        """Should use the payment terms and VAT rate it was built with"""
        invoice = InvoiceStore(
            MemoryStorage(), default_payment_terms=14, default_vat_rate=VatRate.REDUCED
        )
        assert invoice.state.details.payment_terms == 14
        assert invoice.state.line_items[0].vat_rate == VatRate.REDUCED

    def test_load_invoice_data(self, invoice: InvoiceStore, invoice_data):
        """Should copy a document into the draft with fresh line ids and no number"""
        invoice.load_invoice_data(invoice_data)

        state = invoice.state
        assert state.customer == invoice_data.customer
        assert state.details.invoice_number == ""
        assert [i.description for i in state.line_items] == [
            i.description for i in invoice_data.line_items
        ]
        assert {i.id for i in state.line_items}.isdisjoint(
            {i.id for i in invoice_data.line_items}
        )

    def test_draft_survives_reload(self):
        """Should restore the draft from storage"""
        storage = MemoryStorage()
        InvoiceStore(storage).set_customer_details(name="Acme Ltd")
        assert InvoiceStore(storage).state.customer.name == "Acme Ltd"


class TestUndoRedo:
    """Tests for undo and redo"""

    def test_undo_restores_previous_draft(self, invoice: InvoiceStore):
        """Should step back to the previous state"""
        invoice.set_customer_details(name="First")
        invoice.set_customer_details(name="Second")

        assert invoice.undo() is True
        assert invoice.state.customer.name == "First"

    def test_redo(self, invoice: InvoiceStore):
        """Should re-apply an undone change"""
        invoice.set_customer_details(name="First")
        invoice.undo()

        assert invoice.can_redo is True
        assert invoice.redo() is True
        assert invoice.state.customer.name == "First"

    def test_new_change_clears_redo(self, invoice: InvoiceStore):
        """Should drop redo history after a new change"""
        invoice.set_customer_details(name="First")
        invoice.undo()
        invoice.set_customer_details(name="Other")
        assert invoice.can_redo is False

    def test_nothing_to_undo(self, invoice: InvoiceStore):
        """Should report when there is nothing to undo"""
        assert invoice.can_undo is False
        assert invoice.undo() is False
        assert invoice.redo() is False

    def test_no_op_changes_are_not_recorded(self, invoice: InvoiceStore):
        """Should not record changes that leave the draft as it was"""
        invoice.remove_line_item("missing")
        assert invoice.can_undo is False

    def test_history_is_bounded(self, invoice: InvoiceStore):
        """Should keep at most HISTORY_LIMIT steps"""
        for n in range(HISTORY_LIMIT + 10):
            invoice.set_invoice_details(notes=f"note {n}")

        steps = 0
        while invoice.undo():
            steps += 1

        assert steps == HISTORY_LIMIT
        assert invoice.state.details.notes == "note 9"

    def test_undo_persists(self):
        """Should persist the state reached by undo"""
        storage = MemoryStorage()
        invoice = InvoiceStore(storage)
        invoice.set_customer_details(name="First")
        invoice.set_customer_details(name="Second")
        invoice.undo()

        assert InvoiceStore(storage).state.customer.name == "First"
