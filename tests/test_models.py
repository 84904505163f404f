"""
Tests for RentBook models

Test strategy:
1. Unit tests for individual components (models, billing rules)
2. Service tests against in-memory or temporary-file stores
3. No network calls in tests (Google Sheets is never touched)
"""

import pytest
from datetime import date
from decimal import Decimal

from pydantic import ValidationError

from rentbook.models.invoice import (
    DocumentType,
    Invoice,
    InvoiceDraft,
    InvoiceStatus,
    InvoiceUpdate,
    LineItem,
)
from rentbook.models.records import (
    CompanyInfo,
    Expense,
    ExpenseCategory,
    HeaderLayout,
    InvoiceSettings,
    Property,
    PropertyType,
    Tenant,
    TenantStatus,
)
from rentbook.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


def make_invoice(**overrides) -> Invoice:
    data = dict(
        id="INV-001",
        tenant_id="t-1",
        items=[
            LineItem(description="Rent Charges", amount=Decimal("15000")),
            LineItem(description="Repair & Municipal Tax", amount=Decimal("1200.50")),
        ],
        created_date=date(2026, 4, 2),
        due_date=date(2026, 4, 30),
        billing_period="01 April 2026 to 30 September 2026",
    )
    data.update(overrides)
    return Invoice(**data)


class TestLineItem:
    """Tests for invoice particulars."""

    def test_line_item_strips_whitespace(self):
        """Test that whitespace is stripped from the description."""
        item = LineItem(description="  Rent Charges  ", amount=Decimal("100"))
        assert item.description == "Rent Charges"

    def test_line_item_rejects_negative_amount(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValueError):
            LineItem(description="Rent", amount=Decimal("-1"))

    def test_line_item_rejects_more_than_two_decimals(self):
        with pytest.raises(ValueError):
            LineItem(description="Rent", amount=Decimal("10.001"))


class TestInvoice:
    """Tests for the Invoice model."""

    def test_total_is_sum_of_items(self):
        """Test that the total follows the line items."""
        invoice = make_invoice()
        assert invoice.total_amount == Decimal("16200.50")

    def test_total_of_empty_invoice_is_zero(self):
        assert make_invoice(items=[]).total_amount == Decimal("0")

    def test_total_follows_item_changes(self):
        """Test that replacing the items changes the total."""
        invoice = make_invoice()
        changed = invoice.model_copy(
            update={"items": invoice.items + [LineItem(description="Service", amount=Decimal("800"))]}
        )
        assert changed.total_amount == Decimal("17000.50")

    def test_total_appears_in_serialized_output(self):
        data = make_invoice().model_dump(mode="json")
        assert data["total_amount"] == "16200.50"
        assert data["created_date"] == "2026-04-02"

    def test_stored_total_is_ignored_on_input(self):
        """Test that a stale stored total never overrides the items."""
        data = make_invoice().model_dump(mode="json")
        data["total_amount"] = "1.00"
        restored = Invoice.model_validate(data)
        assert restored.total_amount == Decimal("16200.50")

    def test_defaults(self):
        invoice = make_invoice()
        assert invoice.status == InvoiceStatus.DRAFT
        assert invoice.document_type == DocumentType.RENT_INVOICE
        assert invoice.received_date is None

    def test_legacy_keys_accepted(self):
        """Test that camelCase payloads from the old app are read."""
        invoice = Invoice.model_validate({
            "id": "INV-007",
            "tenantId": "t1",
            "items": [{"description": "Rent Charges", "amount": 5000}],
            "totalAmount": 9999,
            "createdAt": "2025-10-03",
            "dueDate": "2025-10-31",
            "dateOfReceipt": "",
            "billingPeriod": "01 October 2025 to 31 March 2026",
            "invoiceType": "Tax Receipt",
            "status": "Paid",
        })
        assert invoice.tenant_id == "t1"
        assert invoice.created_date == date(2025, 10, 3)
        assert invoice.received_date is None
        assert invoice.document_type == DocumentType.TAX_RECEIPT
        assert invoice.status == InvoiceStatus.PAID
        assert invoice.total_amount == Decimal("5000")

    def test_invalid_status_rejected(self):
        with pytest.raises(ValidationError):
            make_invoice(status="Cancelled")


class TestInvoiceDraftAndUpdate:
    """Tests for invoice input models."""

    def test_blank_billing_period_becomes_none(self):
        draft = InvoiceDraft(tenant_id="t-1", billing_period="   ")
        assert draft.billing_period is None

    def test_update_tracks_only_set_fields(self):
        update = InvoiceUpdate(notes="Paid by cheque")
        assert update.model_dump(exclude_unset=True) == {"notes": "Paid by cheque"}


class TestRecords:
    """Tests for property, tenant, expense and company models."""

    def test_property_display_name(self):
        prop = Property(name="A-101", type=PropertyType.FLAT)
        assert prop.display_name == "Flat A-101"

    def test_generated_ids_are_unique(self):
        assert Property(name="A").id != Property(name="A").id
        assert Tenant(name="X").id.startswith("t-")
        assert Expense(amount=Decimal("1"), spent_on=date(2026, 1, 1)).id.startswith("EXP-")

    def test_tenant_defaults(self):
        tenant = Tenant(name="Ramesh Kumar")
        assert tenant.status == TenantStatus.ACTIVE
        assert tenant.is_active
        assert tenant.property_id == ""

    def test_tenant_legacy_keys(self):
        tenant = Tenant.model_validate(
            {"id": "t1", "name": "Asha", "propertyId": "p1", "moveInDate": "", "status": "Former"}
        )
        assert tenant.property_id == "p1"
        assert tenant.move_in_date is None
        assert not tenant.is_active

    def test_tenant_requires_name(self):
        with pytest.raises(ValidationError):
            Tenant(name="  ")

    def test_expense_legacy_date_key(self):
        expense = Expense.model_validate(
            {"amount": "2500", "date": "2026-02-10", "category": "Tax", "propertyId": "p1"}
        )
        assert expense.spent_on == date(2026, 2, 10)
        assert expense.category == ExpenseCategory.TAX

    def test_expense_rejects_negative_amount(self):
        with pytest.raises(ValueError):
            Expense(amount=Decimal("-5"), spent_on=date(2026, 1, 1))


class TestCompanyInfo:
    """Tests for the company profile and invoice settings."""

    def test_defaults(self):
        company = CompanyInfo()
        assert company.name == "My Properties"
        assert company.invoice_settings.header_layout == HeaderLayout.STANDARD
        assert company.invoice_settings.show_bank_details

    def test_null_invoice_settings_fall_back_to_default(self):
        company = CompanyInfo.model_validate({"name": "Sharma Estates", "invoiceSettings": None})
        assert company.invoice_settings == InvoiceSettings()

    def test_legacy_invoice_settings(self):
        company = CompanyInfo.model_validate({
            "name": "Sharma Estates",
            "invoiceSettings": {"primaryColor": "#ff0000", "headerLayout": "modern"},
        })
        assert company.invoice_settings.primary_rgb == (255, 0, 0)
        assert company.invoice_settings.header_layout == HeaderLayout.MODERN

    def test_invalid_colour_rejected(self):
        with pytest.raises(ValidationError):
            InvoiceSettings(primary_color="blue")


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent creation."""
        event = AuditEvent(
            event_type=AuditEventType.INVOICE_CREATED,
            description="Invoice created",
            entity_type="invoice",
            entity_id="INV-001",
        )
        assert event.severity == AuditSeverity.INFO
        assert event.is_user_action

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEventBuilder.invoice_created("INV-004", "t-1", "16200.50")
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "invoice_created"
        assert log_dict["entity_id"] == "INV-004"
        assert log_dict["details"]["total_amount"] == "16200.50"

    def test_audit_event_to_sheets_row(self):
        """Test conversion to spreadsheet row."""
        event = AuditEventBuilder.property_delete_rejected("p-1", ["t-1", "t-2"])
        row = event.to_sheets_row()
        assert len(row) == 10
        assert row[2] == "property_delete_rejected"
        assert row[3] == "warning"
        assert "t-2" in row[7]

    def test_record_saved_picks_event_type(self):
        assert (
            AuditEventBuilder.record_saved("tenant", "t-1", "Asha").event_type
            == AuditEventType.TENANT_SAVED
        )
        assert (
            AuditEventBuilder.record_deleted("expense", "EXP-1").event_type
            == AuditEventType.EXPENSE_DELETED
        )

    def test_system_error_is_not_user_action(self):
        event = AuditEventBuilder.system_error("RenderError", "boom")
        assert event.severity == AuditSeverity.ERROR
        assert not event.is_user_action
        assert event.error_message == "boom"
