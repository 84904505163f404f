"""
Tests for invoice document assembly and PDF rendering.
"""

from datetime import date
from decimal import Decimal

import pytest

from rentbook.billing import assemble_invoice_document, document_filename
from rentbook.models import (
    CompanyInfo,
    DocumentType,
    HeaderLayout,
    Invoice,
    InvoiceSettings,
    LineItem,
    Property,
    PropertyType,
    Tenant,
)
from rentbook.rendering import PdfInvoiceRenderer, latin1
from rentbook.reports import ReportTable


@pytest.fixture
def invoice():
    return Invoice(
        id="INV-004",
        tenant_id="t-1",
        items=[
            LineItem(description="Rent Charges", amount=Decimal("1200000")),
            LineItem(description="Repair & Municipal Tax", amount=Decimal("34567")),
        ],
        created_date=date(2026, 10, 2),
        due_date=date(2026, 10, 31),
        billing_period="01 October 2026 to 31 March 2027",
    )


@pytest.fixture
def tenant():
    return Tenant(
        id="t-1",
        name="Ramesh  Kumar",
        email="ramesh@example.com",
        phone="98450 00000",
        address="12 MG Road, Bengaluru",
        property_id="p-1",
    )


@pytest.fixture
def flat():
    return Property(id="p-1", name="A-101", type=PropertyType.FLAT)


@pytest.fixture
def company():
    return CompanyInfo(name="Sharma Estates", address="Indiranagar", email="office@example.com")


class TestDocumentFilename:
    """Tests for generated PDF file names."""

    def test_whitespace_runs_become_underscores(self, invoice, tenant):
        assert document_filename(invoice, tenant) == "INV-004_Ramesh_Kumar.pdf"

    def test_unknown_tenant(self, invoice):
        assert document_filename(invoice, None) == "INV-004_Invoice.pdf"

    def test_path_separators_replaced(self, invoice, tenant):
        traders = tenant.model_copy(update={"name": "M/s Sharma Traders"})
        assert document_filename(invoice, traders) == "INV-004_M_s_Sharma_Traders.pdf"

    def test_name_cannot_leave_directory(self, invoice, tenant):
        """Test that relative path segments in a name stay inside the file name."""
        sneaky = tenant.model_copy(update={"name": "x/../../escaped"})
        filename = document_filename(invoice, sneaky)
        assert filename == "INV-004_x_.._.._escaped.pdf"
        assert "/" not in filename

    def test_characters_not_allowed_in_file_names(self, invoice, tenant):
        odd = tenant.model_copy(update={"name": 'Rao: "Unit" <2>?'})
        assert document_filename(invoice, odd) == "INV-004_Rao_Unit_2_.pdf"

    def test_mixed_runs_collapse_to_one_underscore(self, invoice, tenant):
        shop = tenant.model_copy(update={"name": "Shop  / 7"})
        assert document_filename(invoice, shop) == "INV-004_Shop_7.pdf"


class TestAssembly:
    """Tests for the block layout of an invoice."""

    def test_block_order(self, invoice, tenant, flat, company):
        document = assemble_invoice_document(
            invoice, tenant, flat, company, default_notes="Issued by Landlord",
            default_bank_details="HDFC 0001",
        )
        assert document.kinds == [
            "header",
            "bill_to",
            "line_items",
            "amount_in_words",
            "notes",
            "bank_details",
            "signature",
        ]

    def test_total_and_words_agree(self, invoice, tenant, flat, company):
        """Test that the footer and the words block carry the same total."""
        document = assemble_invoice_document(invoice, tenant, flat, company)
        table = document.block("line_items")
        words = document.block("amount_in_words")
        assert table.total_amount == invoice.total_amount == Decimal("1234567")
        assert table.total_text == "Rs. 12,34,567"
        assert words.text == (
            "Rupees Twelve Lakh Thirty Four Thousand Five Hundred and Sixty Seven Only"
        )

    def test_header_fields(self, invoice, tenant, flat, company):
        header = assemble_invoice_document(invoice, tenant, flat, company).block("header")
        assert header.title == "Rental Invoice"
        assert header.invoice_id == "INV-004"
        assert header.created_date == "02-10-2026"
        assert header.due_date == "31-10-2026"
        assert header.received_date is None
        assert header.company_name == "Sharma Estates"

    def test_tax_receipt_title(self, invoice, tenant, flat, company):
        receipt = invoice.model_copy(update={"document_type": DocumentType.TAX_RECEIPT})
        header = assemble_invoice_document(receipt, tenant, flat, company).block("header")
        assert header.title == "Tax Receipt"

    def test_missing_tenant_and_property(self, invoice, company):
        bill_to = assemble_invoice_document(invoice, None, None, company).block("bill_to")
        assert bill_to.tenant_name == "Valued Tenant"
        assert bill_to.rented_unit == "Unassigned"
        assert bill_to.contact_lines[0] == "No Address Provided"

    def test_property_display_name(self, invoice, tenant, flat, company):
        bill_to = assemble_invoice_document(invoice, tenant, flat, company).block("bill_to")
        assert bill_to.rented_unit == "Flat A-101"

    def test_bank_details_hidden_by_setting(self, invoice, tenant, flat):
        company = CompanyInfo(invoice_settings=InvoiceSettings(show_bank_details=False))
        document = assemble_invoice_document(
            invoice, tenant, flat, company, default_bank_details="HDFC 0001"
        )
        assert "bank_details" not in document.kinds

    def test_tenant_contact_hidden_by_setting(self, invoice, tenant, flat):
        company = CompanyInfo(invoice_settings=InvoiceSettings(show_tenant_contact=False))
        bill_to = assemble_invoice_document(invoice, tenant, flat, company).block("bill_to")
        assert bill_to.contact_lines == []

    def test_invoice_notes_override_default(self, invoice, tenant, flat, company):
        own = invoice.model_copy(update={"notes": "Paid by cheque"})
        notes = assemble_invoice_document(
            own, tenant, flat, company, default_notes="Issued by Landlord"
        ).block("notes")
        assert notes.text == "Paid by cheque"

    def test_no_notes_block_without_text(self, invoice, tenant, flat, company):
        document = assemble_invoice_document(invoice, tenant, flat, company)
        assert "notes" not in document.kinds


class TestPdfRendering:
    """Tests for the fpdf2 renderer."""

    @pytest.mark.parametrize("layout", list(HeaderLayout))
    def test_renders_pdf_bytes(self, invoice, tenant, flat, layout):
        company = CompanyInfo(
            name="Sharma Estates",
            invoice_settings=InvoiceSettings(header_layout=layout, font_family="times"),
        )
        document = assemble_invoice_document(
            invoice, tenant, flat, company, default_notes="Issued by Landlord ₹"
        )
        data = PdfInvoiceRenderer().render(document)
        assert isinstance(data, bytes)
        assert data.startswith(b"%PDF")

    def test_renders_report(self):
        table = ReportTable(
            title="Tenants",
            header=["Name", "Email"],
            rows=[["Ramesh Kumar", "ramesh@example.com"]],
        )
        assert PdfInvoiceRenderer().render_report(table).startswith(b"%PDF")

    def test_renders_empty_wide_report(self):
        table = ReportTable(title="Invoices", header=[f"Column {i}" for i in range(9)])
        assert PdfInvoiceRenderer().render_report(table).startswith(b"%PDF")

    def test_latin1_sanitising(self):
        assert latin1("₹ 500 – “paid”") == 'Rs. 500 - "paid"'
        assert latin1(None) == ""
