"""
Invoice Models for RentBook

An invoice bills one tenant for one half-year billing cycle. It is made
of ordered line items ("particulars") and is printed either as a rent
invoice or as a tax receipt.

DESIGN DECISION: The invoice total is a computed field. It is derived
from the line items every time it is read and is never accepted as
input, so the on-screen total, the stored total and the printed total
can never drift apart.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

from rentbook.models.records import rename_legacy_keys


_LEGACY_INVOICE_KEYS = {
    "tenantId": "tenant_id",
    "createdAt": "created_date",
    "createdDate": "created_date",
    "dueDate": "due_date",
    "dateOfReceipt": "received_date",
    "receivedDate": "received_date",
    "billingPeriod": "billing_period",
    "billingPeriodLabel": "billing_period",
    "invoiceType": "document_type",
    "documentType": "document_type",
    "bankDetails": "bank_details",
}


class InvoiceStatus(str, Enum):
    """
    Invoice lifecycle status.

    Statuses are set by the user. The system never moves an invoice
    between statuses on its own.
    """
    DRAFT = "Draft"
    SENT = "Sent"
    PAID = "Paid"
    OVERDUE = "Overdue"


class DocumentType(str, Enum):
    """What the generated document is titled as."""
    RENT_INVOICE = "Rent Invoice"
    TAX_RECEIPT = "Tax Receipt"


class LineItem(BaseModel):
    """A single particular on an invoice, e.g. "Rent Charges"."""
    model_config = ConfigDict(str_strip_whitespace=True)

    description: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Description of the particular"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        decimal_places=2,
        description="Amount in INR"
    )


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class Invoice(BaseModel):
    """
    A rent invoice.

    Created only by the billing engine (which allocates the id); edited
    through explicit user actions afterwards.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(
        ...,
        min_length=1,
        description="Human readable id, INV-001 onwards"
    )
    tenant_id: str = Field(..., min_length=1)
    items: list[LineItem] = Field(default_factory=list)
    created_date: date
    due_date: date
    received_date: Optional[date] = Field(
        default=None,
        description="When payment was received"
    )
    status: InvoiceStatus = InvoiceStatus.DRAFT
    billing_period: str = Field(
        default="",
        description="Cycle label, e.g. 01 April 2026 to 30 September 2026"
    )
    notes: Optional[str] = None
    bank_details: Optional[str] = None
    document_type: DocumentType = DocumentType.RENT_INVOICE

    @model_validator(mode="before")
    @classmethod
    def accept_legacy_keys(cls, data: Any) -> Any:
        return rename_legacy_keys(data, _LEGACY_INVOICE_KEYS)

    @field_validator("received_date", mode="before")
    @classmethod
    def blank_received_date(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @computed_field
    @property
    def total_amount(self) -> Decimal:
        """Sum of the line item amounts."""
        return sum((item.amount for item in self.items), Decimal("0"))


class InvoiceDraft(BaseModel):
    """
    What the user submits to create an invoice.

    Billing period and due date are optional here: when omitted the
    billing engine derives them from the current date and the configured
    due-date policy.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    tenant_id: str = Field(..., min_length=1)
    items: list[LineItem] = Field(default_factory=list)
    billing_period: Optional[str] = None
    due_date: Optional[date] = None
    status: InvoiceStatus = InvoiceStatus.DRAFT
    notes: Optional[str] = None
    bank_details: Optional[str] = None
    document_type: DocumentType = DocumentType.RENT_INVOICE

    @field_validator("billing_period", mode="before")
    @classmethod
    def blank_billing_period(cls, v: Any) -> Any:
        return _blank_to_none(v)


class InvoiceUpdate(BaseModel):
    """
    A user edit to an existing invoice.

    Only fields that were explicitly set are applied.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    tenant_id: Optional[str] = Field(default=None, min_length=1)
    items: Optional[list[LineItem]] = None
    billing_period: Optional[str] = None
    due_date: Optional[date] = None
    received_date: Optional[date] = None
    status: Optional[InvoiceStatus] = None
    notes: Optional[str] = None
    bank_details: Optional[str] = None
    document_type: Optional[DocumentType] = None
