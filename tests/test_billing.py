"""
Tests for the billing rules: invoice numbering, amounts in words,
billing cycles, due dates and the billing engine.
"""

import threading
from datetime import date
from decimal import Decimal

import pytest

from rentbook.billing import (
    BillingCycle,
    BillingEngine,
    CycleMonthEndPolicy,
    CycleStart,
    InvoiceValidationError,
    ManualDueDatePolicy,
    NetDaysPolicy,
    amount_in_words,
    cycle_for_date,
    format_date,
    format_inr,
    get_due_date_policy,
    invoice_number,
    next_invoice_id,
    plain_decimal,
    selectable_cycles,
)
from rentbook.models import (
    InvoiceDraft,
    InvoiceStatus,
    InvoiceUpdate,
    LineItem,
    Tenant,
)
from rentbook.services.storage import Collection, InMemoryRecordStore, NotFoundError


TODAY = date(2026, 10, 19)


@pytest.fixture
def store():
    store = InMemoryRecordStore()
    store.save_record(Collection.TENANTS, Tenant(id="t-1", name="Ramesh Kumar"))
    return store


@pytest.fixture
def engine(store):
    return BillingEngine(store, CycleMonthEndPolicy(), today=lambda: TODAY)


def rent_draft(**overrides) -> InvoiceDraft:
    data = dict(
        tenant_id="t-1",
        items=[
            LineItem(description="Rent Charges", amount=Decimal("15000")),
            LineItem(description="Service charges for common area", amount=Decimal("500")),
        ],
    )
    data.update(overrides)
    return InvoiceDraft(**data)


class TestInvoiceNumbering:
    """Tests for invoice id allocation."""

    def test_empty_collection_starts_at_one(self):
        assert next_invoice_id([]) == "INV-001"

    def test_next_after_highest(self):
        assert next_invoice_id(["INV-001", "INV-007", "INV-003"]) == "INV-008"

    def test_padding_grows_past_three_digits(self):
        assert next_invoice_id(["INV-999"]) == "INV-1000"

    def test_ids_without_digits_count_as_zero(self):
        assert invoice_number("DRAFT") == 0
        assert next_invoice_id(["DRAFT", "legacy"]) == "INV-001"

    def test_first_digit_run_is_used(self):
        assert invoice_number("INV-012-copy2") == 12

    def test_deleted_number_is_not_reused(self):
        """Test that freeing a non-maximal id does not lower the next id."""
        ids = ["INV-001", "INV-002", "INV-003"]
        ids.remove("INV-002")
        assert next_invoice_id(ids) == "INV-004"


class TestAmountInWords:
    """Tests for Indian-English amount spelling."""

    @pytest.mark.parametrize(
        "amount, expected",
        [
            (0, "Zero"),
            (100, "One Hundred Only"),
            (1000, "One Thousand Only"),
            (100000, "One Lakh Only"),
            (10000000, "One Crore Only"),
            (15, "Fifteen Only"),
            (
                1234567,
                "Twelve Lakh Thirty Four Thousand Five Hundred and Sixty Seven Only",
            ),
        ],
    )
    def test_known_amounts(self, amount, expected):
        assert amount_in_words(amount) == expected

    def test_each_group_word_appears_once(self):
        words = amount_in_words(1234567).split()
        for word in ("Lakh", "Thousand", "Hundred", "and"):
            assert words.count(word) == 1

    def test_fractions_are_floored(self):
        assert amount_in_words(Decimal("1500.99")) == "One Thousand Five Hundred Only"

    def test_below_one_rupee_is_zero(self):
        assert amount_in_words(Decimal("0.50")) == "Zero"

    def test_hundreds_of_crores(self):
        assert amount_in_words(1_000_000_000) == "One Hundred Crore Only"

    def test_negative_rejected(self):
        with pytest.raises(ValueError):
            amount_in_words(-1)

    def test_no_double_spaces(self):
        assert "  " not in amount_in_words(20_00_020)


class TestBillingCycles:
    """Tests for half-year cycle selection."""

    def test_january_belongs_to_previous_october(self):
        cycle = cycle_for_date(date(2027, 1, 15))
        assert cycle.start == CycleStart.OCTOBER
        assert cycle.label == "01 October 2026 to 31 March 2027"

    def test_july_belongs_to_april(self):
        cycle = cycle_for_date(date(2026, 7, 15))
        assert cycle.label == "01 April 2026 to 30 September 2026"

    def test_november_belongs_to_october(self):
        cycle = cycle_for_date(date(2026, 11, 15))
        assert cycle.start_date == date(2026, 10, 1)
        assert cycle.end_date == date(2027, 3, 31)

    def test_first_month_end(self):
        assert BillingCycle(start=CycleStart.APRIL, year=2026).first_month_end == date(2026, 4, 30)
        assert BillingCycle(start=CycleStart.OCTOBER, year=2026).first_month_end == date(2026, 10, 31)

    def test_label_round_trip(self):
        cycle = BillingCycle(start=CycleStart.OCTOBER, year=2026)
        assert BillingCycle.from_label(cycle.label) == cycle

    def test_free_text_label_is_not_a_cycle(self):
        assert BillingCycle.from_label("Rent for May") is None
        assert BillingCycle.from_label("01 October 2026 to 31 March 2030") is None
        assert BillingCycle.from_label(None) is None

    def test_selectable_cycles(self):
        current, following = selectable_cycles(date(2026, 10, 19))
        assert current.label == "01 October 2026 to 31 March 2027"
        assert following.label == "01 April 2027 to 30 September 2027"
        assert current.contains(date(2027, 3, 31))
        assert not current.contains(date(2027, 4, 1))


class TestDueDatePolicies:
    """Tests for due-date derivation."""

    def test_cycle_month_end(self):
        cycle = cycle_for_date(TODAY)
        assert CycleMonthEndPolicy().due_date(cycle, TODAY) == date(2026, 10, 31)

    def test_net_days(self):
        cycle = cycle_for_date(TODAY)
        assert NetDaysPolicy(7).due_date(cycle, TODAY) == date(2026, 10, 26)

    def test_manual_gives_nothing(self):
        assert ManualDueDatePolicy().due_date(cycle_for_date(TODAY), TODAY) is None

    def test_policy_from_name(self):
        assert isinstance(get_due_date_policy("net_days", 10), NetDaysPolicy)
        assert get_due_date_policy("net_days", 10).days == 10
        with pytest.raises(ValueError):
            get_due_date_policy("whenever")


class TestFormatting:
    """Tests for printed dates and amounts."""

    def test_date(self):
        assert format_date(date(2026, 4, 5)) == "05-04-2026"
        assert format_date(None, "-") == "-"

    def test_indian_grouping(self):
        assert format_inr(Decimal("1234567")) == "Rs. 12,34,567"
        assert format_inr(Decimal("999")) == "Rs. 999"

    def test_paise_only_when_present(self):
        assert format_inr(Decimal("1500.5")) == "Rs. 1,500.50"
        assert format_inr(Decimal("1500.00")) == "Rs. 1,500"

    def test_plain_decimal(self):
        assert plain_decimal(Decimal("1500")) == "1500.00"


class TestBillingEngine:
    """Tests for invoice creation and editing."""

    def test_create_first_invoice(self, engine, store):
        invoice = engine.create_invoice(rent_draft())
        assert invoice.id == "INV-001"
        assert invoice.total_amount == Decimal("15500")
        assert invoice.created_date == TODAY
        assert invoice.billing_period == "01 October 2026 to 31 March 2027"
        assert invoice.due_date == date(2026, 10, 31)
        assert invoice.status == InvoiceStatus.DRAFT
        assert store.get_invoice("INV-001") == invoice

    def test_sequential_ids(self, engine):
        ids = [engine.create_invoice(rent_draft()).id for _ in range(5)]
        assert ids == ["INV-001", "INV-002", "INV-003", "INV-004", "INV-005"]

    def test_ids_survive_deletion(self, engine):
        for _ in range(3):
            engine.create_invoice(rent_draft())
        engine.delete_invoice("INV-002")
        assert engine.create_invoice(rent_draft()).id == "INV-004"

    def test_policy_uses_selected_cycle(self, engine):
        invoice = engine.create_invoice(
            rent_draft(billing_period="01 April 2027 to 30 September 2027")
        )
        assert invoice.due_date == date(2027, 4, 30)

    def test_free_text_period_uses_current_cycle(self, engine):
        invoice = engine.create_invoice(rent_draft(billing_period="Arrears 2025"))
        assert invoice.billing_period == "Arrears 2025"
        assert invoice.due_date == date(2026, 10, 31)

    def test_explicit_due_date_wins(self, engine):
        invoice = engine.create_invoice(rent_draft(due_date=date(2026, 11, 15)))
        assert invoice.due_date == date(2026, 11, 15)

    def test_manual_policy_requires_date(self, store):
        engine = BillingEngine(store, ManualDueDatePolicy(), today=lambda: TODAY)
        with pytest.raises(InvoiceValidationError):
            engine.create_invoice(rent_draft())
        assert store.list_invoices() == []

    def test_unknown_tenant_rejected(self, engine, store):
        with pytest.raises(InvoiceValidationError):
            engine.create_invoice(rent_draft(tenant_id="t-missing"))
        assert store.list_invoices() == []

    def test_created_paid_records_receipt(self, engine):
        invoice = engine.create_invoice(rent_draft(status=InvoiceStatus.PAID))
        assert invoice.received_date == TODAY

    def test_update_applies_only_set_fields(self, engine):
        engine.create_invoice(rent_draft(notes="Original"))
        updated = engine.update_invoice(
            "INV-001",
            InvoiceUpdate(items=[LineItem(description="Rent Charges", amount=Decimal("16000"))]),
        )
        assert updated.total_amount == Decimal("16000")
        assert updated.notes == "Original"
        assert updated.id == "INV-001"

    def test_update_unknown_invoice(self, engine):
        with pytest.raises(NotFoundError):
            engine.update_invoice("INV-404", InvoiceUpdate(notes="x"))

    def test_mark_paid_fills_received_date(self, engine):
        engine.create_invoice(rent_draft())
        paid = engine.set_status("INV-001", InvoiceStatus.PAID)
        assert paid.status == InvoiceStatus.PAID
        assert paid.received_date == TODAY

    def test_mark_paid_keeps_given_date(self, engine):
        engine.create_invoice(rent_draft())
        paid = engine.set_status("INV-001", InvoiceStatus.PAID, date(2026, 10, 20))
        assert paid.received_date == date(2026, 10, 20)

    def test_other_status_leaves_received_date_empty(self, engine):
        engine.create_invoice(rent_draft())
        assert engine.set_status("INV-001", InvoiceStatus.SENT).received_date is None

    def test_delete_unknown_invoice(self, engine):
        with pytest.raises(NotFoundError):
            engine.delete_invoice("INV-001")

    def test_concurrent_creation_yields_unique_ids(self, engine, store):
        """Test that parallel sessions never share an invoice number."""
        def worker():
            for _ in range(10):
                engine.create_invoice(rent_draft())

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        ids = sorted(invoice_number(inv.id) for inv in store.list_invoices())
        assert ids == list(range(1, 41))
