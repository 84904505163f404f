"""
Audit Models for RentBook

Every mutation of the portfolio is logged for audit purposes.
This provides:
1. Traceability of who-billed-what-when
2. Debugging information when things go wrong
3. A history the landlord can look back over

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Invoices
    INVOICE_CREATED = "invoice_created"
    INVOICE_UPDATED = "invoice_updated"
    INVOICE_STATUS_CHANGED = "invoice_status_changed"
    INVOICE_DELETED = "invoice_deleted"
    INVOICE_RENDERED = "invoice_rendered"

    # Records
    PROPERTY_SAVED = "property_saved"
    PROPERTY_DELETED = "property_deleted"
    PROPERTY_DELETE_REJECTED = "property_delete_rejected"
    TENANT_SAVED = "tenant_saved"
    TENANT_DELETED = "tenant_deleted"
    EXPENSE_SAVED = "expense_saved"
    EXPENSE_DELETED = "expense_deleted"
    COMPANY_UPDATED = "company_updated"

    # Interchange
    CSV_IMPORTED = "csv_imported"
    REPORT_EXPORTED = "report_exported"
    BACKUP_RESTORED = "backup_restored"
    FACTORY_RESET = "factory_reset"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what record is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of record (e.g., 'invoice', 'tenant', 'property')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the record this event relates to"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    # Error information (if applicable)
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=True,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, entity_type, entity_id,
         description, details_json, error_message, is_user_action]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            self.entity_id or "",
            self.description,
            json.dumps(self.details, default=str) if self.details else "",
            self.error_message or "",
            str(self.is_user_action),
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.invoice_created(invoice_id, tenant_id, total)
        event = AuditEventBuilder.property_delete_rejected(property_id, tenant_ids)
    """

    @staticmethod
    def invoice_created(invoice_id: str, tenant_id: str, total: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVOICE_CREATED,
            entity_type="invoice",
            entity_id=invoice_id,
            description=f"Invoice {invoice_id} created for ₹{total}",
            details={"tenant_id": tenant_id, "total_amount": total},
        )

    @staticmethod
    def invoice_updated(invoice_id: str, fields: list[str], total: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVOICE_UPDATED,
            entity_type="invoice",
            entity_id=invoice_id,
            description=f"Invoice {invoice_id} edited",
            details={"fields": fields, "total_amount": total},
        )

    @staticmethod
    def invoice_status_changed(
        invoice_id: str,
        old_status: str,
        new_status: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVOICE_STATUS_CHANGED,
            entity_type="invoice",
            entity_id=invoice_id,
            description=f"Invoice {invoice_id} marked {new_status}",
            details={"from": old_status, "to": new_status},
        )

    @staticmethod
    def invoice_deleted(invoice_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVOICE_DELETED,
            severity=AuditSeverity.WARNING,
            entity_type="invoice",
            entity_id=invoice_id,
            description=f"Invoice {invoice_id} deleted",
        )

    @staticmethod
    def invoice_rendered(invoice_id: str, filename: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVOICE_RENDERED,
            entity_type="invoice",
            entity_id=invoice_id,
            description=f"PDF generated: {filename}",
            details={"filename": filename},
        )

    @staticmethod
    def record_saved(entity_type: str, entity_id: str, name: str) -> AuditEvent:
        event_type = {
            "property": AuditEventType.PROPERTY_SAVED,
            "tenant": AuditEventType.TENANT_SAVED,
            "expense": AuditEventType.EXPENSE_SAVED,
        }[entity_type]
        return AuditEvent(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} saved: {name}",
        )

    @staticmethod
    def record_deleted(entity_type: str, entity_id: str) -> AuditEvent:
        event_type = {
            "property": AuditEventType.PROPERTY_DELETED,
            "tenant": AuditEventType.TENANT_DELETED,
            "expense": AuditEventType.EXPENSE_DELETED,
        }[entity_type]
        return AuditEvent(
            event_type=event_type,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} deleted: {entity_id}",
        )

    @staticmethod
    def property_delete_rejected(property_id: str, tenant_ids: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROPERTY_DELETE_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="property",
            entity_id=property_id,
            description=f"Refused to delete property {property_id}: still rented",
            details={"tenant_ids": tenant_ids},
        )

    @staticmethod
    def company_updated(name: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COMPANY_UPDATED,
            entity_type="company",
            description=f"Company profile updated: {name}",
        )

    @staticmethod
    def csv_imported(entity_type: str, imported: int, skipped: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CSV_IMPORTED,
            entity_type=entity_type,
            description=f"Imported {imported} {entity_type} records from CSV",
            details={"imported": imported, "skipped": skipped},
        )

    @staticmethod
    def report_exported(report: str, row_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REPORT_EXPORTED,
            entity_type="report",
            entity_id=report,
            description=f"Report exported: {report} ({row_count} rows)",
            details={"row_count": row_count},
        )

    @staticmethod
    def backup_restored(counts: dict[str, int]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BACKUP_RESTORED,
            severity=AuditSeverity.WARNING,
            description="Portfolio restored from backup",
            details=counts,
        )

    @staticmethod
    def factory_reset() -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FACTORY_RESET,
            severity=AuditSeverity.CRITICAL,
            description="All tenant, property, invoice and expense records wiped",
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            is_user_action=False,
        )
