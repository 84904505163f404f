"""
Audit Logger

DESIGN DECISION: Every change to the portfolio is logged.
This provides:
1. Complete traceability of what was billed and when
2. Debugging capability
3. The landlord can see the history of their records

The audit logger:
- Gracefully handles failures (a broken audit sheet never blocks billing)
- Always writes a structured local log line, persistent storage is optional
"""

from typing import Optional

import structlog

from rentbook.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from rentbook.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. The audit storage backend (for persistence and the history page)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("rentbook.audit")

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def recent_events(self, limit: int = 50) -> list[AuditEvent]:
        """Newest events first; empty when nothing is persisted."""
        if not self._storage:
            return []
        try:
            return self._storage.get_recent_events(limit=limit)
        except Exception as e:
            self._logger.error("audit_read_failed", error=str(e))
            return []

    def log_record_saved(self, entity_type: str, entity_id: str, name: str) -> None:
        """Log a property, tenant or expense save."""
        self.log(AuditEventBuilder.record_saved(entity_type, entity_id, name))

    def log_record_deleted(self, entity_type: str, entity_id: str) -> None:
        self.log(AuditEventBuilder.record_deleted(entity_type, entity_id))

    def log_invoice_created(self, invoice_id: str, tenant_id: str, total: str) -> None:
        self.log(AuditEventBuilder.invoice_created(invoice_id, tenant_id, total))

    def log_invoice_status_changed(
        self,
        invoice_id: str,
        old_status: str,
        new_status: str,
    ) -> None:
        """Log an invoice status transition."""
        self.log(
            AuditEventBuilder.invoice_status_changed(invoice_id, old_status, new_status)
        )

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
        )
        self.log(event)
