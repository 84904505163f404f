"""
Billing Engine

Creates and edits invoices against a record store.

DESIGN DECISION: The engine is the only code that allocates invoice
ids. Allocation reads the store's current invoices and the new invoice
is saved before the lock is released, so two sessions clicking
"Create" at the same moment never receive the same number.
"""

import threading
from datetime import date
from typing import Callable, Optional

import structlog

from rentbook.billing.cycles import (
    BillingCycle,
    CycleMonthEndPolicy,
    DueDatePolicy,
    cycle_for_date,
)
from rentbook.billing.identifiers import next_invoice_id
from rentbook.models.invoice import (
    Invoice,
    InvoiceDraft,
    InvoiceStatus,
    InvoiceUpdate,
)
from rentbook.services.storage import Collection, NotFoundError, RecordStore

logger = structlog.get_logger(__name__)


class InvoiceValidationError(ValueError):
    """An invoice cannot be created or edited as requested."""
    pass


class BillingEngine:
    """
    Invoice creation, editing and status changes.

    Args:
        store: Where invoices are read from and saved to
        due_date_policy: Derives the due date when the user gives none
        today: Clock, injectable for tests
    """

    def __init__(
        self,
        store: RecordStore,
        due_date_policy: Optional[DueDatePolicy] = None,
        today: Callable[[], date] = date.today,
    ):
        self._store = store
        self._policy = due_date_policy or CycleMonthEndPolicy()
        self._today = today
        self._lock = threading.Lock()

    @property
    def due_date_policy(self) -> DueDatePolicy:
        return self._policy

    def today(self) -> date:
        return self._today()

    def next_invoice_id(self) -> str:
        """The id the next created invoice will get."""
        return next_invoice_id(self._store.list_invoices())

    def resolve_due_date(self, billing_period: str, requested: Optional[date]) -> date:
        """
        Explicit date first, then the policy.

        The policy is applied to the cycle named by the billing period;
        free-text periods fall back to the cycle containing today.

        Raises:
            InvoiceValidationError: If neither gives a date
        """
        if requested is not None:
            return requested
        today = self.today()
        cycle = BillingCycle.from_label(billing_period) or cycle_for_date(today)
        due = self._policy.due_date(cycle, today)
        if due is None:
            raise InvoiceValidationError(
                "A due date is required when the due date policy is manual"
            )
        return due

    def create_invoice(self, draft: InvoiceDraft) -> Invoice:
        """
        Create and save a new invoice.

        Raises:
            InvoiceValidationError: If the tenant is unknown or no due date
                can be resolved
        """
        if self._store.get_tenant(draft.tenant_id) is None:
            raise InvoiceValidationError(f"Unknown tenant: {draft.tenant_id}")

        today = self.today()
        billing_period = draft.billing_period or cycle_for_date(today).label
        due_date = self.resolve_due_date(billing_period, draft.due_date)

        with self._lock:
            invoice = Invoice(
                id=self.next_invoice_id(),
                tenant_id=draft.tenant_id,
                items=draft.items,
                created_date=today,
                due_date=due_date,
                received_date=today if draft.status == InvoiceStatus.PAID else None,
                status=draft.status,
                billing_period=billing_period,
                notes=draft.notes,
                bank_details=draft.bank_details,
                document_type=draft.document_type,
            )
            self._store.save_record(Collection.INVOICES, invoice)

        logger.info(
            "invoice_created",
            invoice_id=invoice.id,
            tenant_id=invoice.tenant_id,
            total=str(invoice.total_amount),
        )
        return invoice

    def _require(self, invoice_id: str) -> Invoice:
        invoice = self._store.get_invoice(invoice_id)
        if invoice is None:
            raise NotFoundError(f"Invoice not found: {invoice_id}")
        return invoice

    def update_invoice(self, invoice_id: str, update: InvoiceUpdate) -> Invoice:
        """
        Apply the fields set on ``update``.

        Raises:
            NotFoundError: If no invoice has that id
            InvoiceValidationError: If the new tenant is unknown
        """
        invoice = self._require(invoice_id)
        changes = update.model_dump(exclude_unset=True)
        if "tenant_id" in changes and self._store.get_tenant(changes["tenant_id"]) is None:
            raise InvoiceValidationError(f"Unknown tenant: {changes['tenant_id']}")
        if changes.get("due_date", date.min) is None:
            raise InvoiceValidationError("Due date cannot be cleared")

        data = invoice.model_dump(exclude={"total_amount"})
        data.update(changes)
        updated = Invoice.model_validate(data)
        self._store.save_record(Collection.INVOICES, updated)
        return updated

    def set_status(
        self,
        invoice_id: str,
        status: InvoiceStatus,
        received_date: Optional[date] = None,
    ) -> Invoice:
        """
        Change an invoice's status.

        Marking an invoice Paid records the received date (today unless
        given).

        Raises:
            NotFoundError: If no invoice has that id
        """
        invoice = self._require(invoice_id)
        if status == InvoiceStatus.PAID:
            received_date = received_date or invoice.received_date or self.today()
        else:
            received_date = received_date or invoice.received_date
        updated = invoice.model_copy(
            update={"status": status, "received_date": received_date}
        )
        self._store.save_record(Collection.INVOICES, updated)
        return updated

    def delete_invoice(self, invoice_id: str) -> None:
        """
        Raises:
            NotFoundError: If no invoice has that id
        """
        if not self._store.delete_record(Collection.INVOICES, invoice_id):
            raise NotFoundError(f"Invoice not found: {invoice_id}")
