"""
Data Models Package

This package contains all Pydantic models used in RentBook.
All data flowing through the system must conform to these schemas.
"""

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
    FontFamily,
    HeaderLayout,
    InvoiceSettings,
    Property,
    PropertyType,
    Tenant,
    TenantStatus,
    new_record_id,
)
from rentbook.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Invoice models
    "DocumentType",
    "Invoice",
    "InvoiceDraft",
    "InvoiceStatus",
    "InvoiceUpdate",
    "LineItem",
    # Portfolio records
    "CompanyInfo",
    "Expense",
    "ExpenseCategory",
    "FontFamily",
    "HeaderLayout",
    "InvoiceSettings",
    "Property",
    "PropertyType",
    "Tenant",
    "TenantStatus",
    "new_record_id",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
