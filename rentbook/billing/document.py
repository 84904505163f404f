"""
Invoice Document Assembly

Turns a fully-resolved invoice (plus its tenant, property and the
company profile) into an ordered list of layout blocks:

    header -> bill_to -> line_items -> amount_in_words -> notes
           -> bank_details -> signature

The assembler does no business computation of its own. It reads the
invoice's derived total once and spells it once; the table footer and
the words block both carry those exact values, and the PDF renderer only
draws what is in the blocks.
"""

import re
from decimal import Decimal
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

from rentbook.billing.formatting import format_date, format_inr
from rentbook.billing.words import amount_in_words
from rentbook.models.invoice import DocumentType, Invoice
from rentbook.models.records import CompanyInfo, HeaderLayout, InvoiceSettings, Property, Tenant

# Runs of whitespace, path separators and characters Windows rejects in file names
_FILENAME_BREAKS = re.compile(r'[\s\\/:*?"<>|\x00-\x1f]+')

TITLES = {
    DocumentType.RENT_INVOICE: "Rental Invoice",
    DocumentType.TAX_RECEIPT: "Tax Receipt",
}


class HeaderBlock(BaseModel):
    kind: Literal["header"] = "header"
    layout: HeaderLayout
    title: str
    company_name: str
    company_address: str
    company_email: str
    invoice_id: str
    created_date: str
    due_date: str
    received_date: Optional[str] = None
    billing_period: str


class BillToBlock(BaseModel):
    kind: Literal["bill_to"] = "bill_to"
    tenant_name: str
    # Empty when the company hides tenant contact details
    contact_lines: list[str] = Field(default_factory=list)
    rented_unit: str


class LineItemTableBlock(BaseModel):
    kind: Literal["line_items"] = "line_items"
    columns: tuple[str, str] = ("Particulars", "Amount")
    rows: list[tuple[str, str]]
    total_label: str = "Total Amount"
    total_amount: Decimal
    total_text: str


class AmountInWordsBlock(BaseModel):
    kind: Literal["amount_in_words"] = "amount_in_words"
    label: str = "Amount in words:"
    text: str


class NotesBlock(BaseModel):
    kind: Literal["notes"] = "notes"
    text: str


class BankDetailsBlock(BaseModel):
    kind: Literal["bank_details"] = "bank_details"
    label: str = "Bank Details:"
    text: str


class SignatureBlock(BaseModel):
    kind: Literal["signature"] = "signature"
    label: str = "Landlord Signature"


LayoutBlock = Annotated[
    Union[
        HeaderBlock,
        BillToBlock,
        LineItemTableBlock,
        AmountInWordsBlock,
        NotesBlock,
        BankDetailsBlock,
        SignatureBlock,
    ],
    Field(discriminator="kind"),
]


class InvoiceDocument(BaseModel):
    """Everything a renderer needs to draw one invoice."""

    invoice_id: str
    filename: str
    style: InvoiceSettings
    blocks: list[LayoutBlock]

    def block(self, kind: str) -> Optional[BaseModel]:
        """First block of the given kind, or None if it was left out."""
        for block in self.blocks:
            if block.kind == kind:
                return block
        return None

    @property
    def kinds(self) -> list[str]:
        return [block.kind for block in self.blocks]


def document_filename(invoice: Invoice, tenant: Optional[Tenant]) -> str:
    """
    ``INV-004_Ramesh_Kumar.pdf``; runs of whitespace and of characters
    not allowed in file names become a single ``_``.
    """
    name = tenant.name.strip() if tenant and tenant.name.strip() else "Invoice"
    stem = _FILENAME_BREAKS.sub("_", f"{invoice.id}_{name}")
    return f"{stem}.pdf"


def assemble_invoice_document(
    invoice: Invoice,
    tenant: Optional[Tenant],
    rented_property: Optional[Property],
    company: CompanyInfo,
    default_notes: str = "",
    default_bank_details: str = "",
) -> InvoiceDocument:
    """
    Build the layout blocks for an invoice.

    Args:
        invoice: The invoice to print
        tenant: The invoice's tenant, None if it has since been deleted
        rented_property: The tenant's property, None if unassigned
        company: Company profile and presentation settings
        default_notes: Printed when the invoice has no notes of its own
        default_bank_details: Printed when the invoice has no bank details

    Returns:
        The assembled document
    """
    settings = company.invoice_settings
    total = invoice.total_amount
    total_text = format_inr(total)

    blocks: list[BaseModel] = [
        HeaderBlock(
            layout=settings.header_layout,
            title=TITLES[invoice.document_type],
            company_name=company.name,
            company_address=company.address,
            company_email=company.email,
            invoice_id=invoice.id,
            created_date=format_date(invoice.created_date),
            due_date=format_date(invoice.due_date),
            received_date=format_date(invoice.received_date) or None,
            billing_period=invoice.billing_period,
        ),
    ]

    contact_lines = []
    if settings.show_tenant_contact:
        contact_lines = [
            (tenant.address if tenant else "") or "No Address Provided",
            f"Email: {(tenant.email if tenant else '') or 'N/A'}",
            f"Contact: {(tenant.phone if tenant else '') or 'N/A'}",
        ]
    blocks.append(
        BillToBlock(
            tenant_name=tenant.name if tenant else "Valued Tenant",
            contact_lines=contact_lines,
            rented_unit=rented_property.display_name if rented_property else "Unassigned",
        )
    )

    blocks.append(
        LineItemTableBlock(
            rows=[(item.description, format_inr(item.amount)) for item in invoice.items],
            total_amount=total,
            total_text=total_text,
        )
    )
    blocks.append(AmountInWordsBlock(text=f"Rupees {amount_in_words(total)}"))

    notes = invoice.notes or default_notes
    if notes:
        blocks.append(NotesBlock(text=notes))

    bank_details = invoice.bank_details or default_bank_details
    if settings.show_bank_details and bank_details:
        blocks.append(BankDetailsBlock(text=bank_details))

    blocks.append(SignatureBlock())

    return InvoiceDocument(
        invoice_id=invoice.id,
        filename=document_filename(invoice, tenant),
        style=settings,
        blocks=blocks,
    )
