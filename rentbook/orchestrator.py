"""
Main Orchestrator for RentBook

This module ties together all the components and owns the application
state: the record store, the billing engine, the audit logger and the
PDF renderer. The Streamlit app talks only to PortfolioService.

DESIGN DECISION: The orchestrator enforces the boundaries:
- Invoice ids are allocated only by the billing engine
- A property still rented by a tenant cannot be deleted
- Restores are validated in full before anything is replaced
- Every mutation is audited
"""

from datetime import date
from pathlib import Path
from typing import Any, Callable, Optional, Union

import structlog

from rentbook.audit import AuditLogger
from rentbook.billing import (
    BillingEngine,
    DueDatePolicy,
    InvoiceValidationError,
    assemble_invoice_document,
    get_due_date_policy,
)
from rentbook.billing.document import InvoiceDocument
from rentbook.config import get_settings
from rentbook.interchange import (
    ImportResult,
    PortfolioSnapshot,
    export_snapshot,
    export_table,
    import_properties,
    import_tenants,
    restore_snapshot,
)
from rentbook.models.audit import AuditEventBuilder
from rentbook.models.invoice import Invoice, InvoiceDraft, InvoiceStatus, InvoiceUpdate
from rentbook.models.records import CompanyInfo, Expense, Property, Tenant
from rentbook.rendering import PdfInvoiceRenderer
from rentbook.reports import (
    DashboardSummary,
    ReportTable,
    TenantStatement,
    build_dashboard,
    build_report,
    build_tenant_statement,
    ledger_table,
)
from rentbook.services.storage import (
    AuditStorageInterface,
    Collection,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsRecordStore,
    InMemoryAuditStorage,
    InMemoryRecordStore,
    JsonFileRecordStore,
    NotFoundError,
    RecordStore,
)

logger = structlog.get_logger(__name__)


class PortfolioError(Exception):
    """A portfolio operation was refused."""
    pass


class PropertyInUseError(PortfolioError):
    """The property is still assigned to one or more tenants."""

    def __init__(self, rented_property: Property, tenants: list[Tenant]):
        self.property_id = rented_property.id
        self.tenant_ids = [t.id for t in tenants]
        names = ", ".join(t.name for t in tenants)
        super().__init__(
            f"Cannot delete {rented_property.display_name}: it is assigned to {names}. "
            "Reassign or remove these tenants first."
        )


class PortfolioService:
    """
    Application state owner.

    Flow for invoices:
    1. Draft -> BillingEngine allocates the id, resolves period and due date
    2. Saved -> status and fields edited on explicit user action only
    3. Render -> document assembled from the stored invoice, drawn to PDF
    """

    def __init__(
        self,
        store: RecordStore,
        audit_logger: Optional[AuditLogger] = None,
        due_date_policy: Optional[DueDatePolicy] = None,
        renderer: Optional[PdfInvoiceRenderer] = None,
        default_notes: str = "",
        default_bank_details: str = "",
        today: Callable[[], date] = date.today,
    ):
        self._store = store
        self._audit = audit_logger or AuditLogger()
        self._engine = BillingEngine(store, due_date_policy, today=today)
        self._renderer = renderer or PdfInvoiceRenderer()
        self._default_notes = default_notes
        self._default_bank_details = default_bank_details

    @property
    def store(self) -> RecordStore:
        return self._store

    @property
    def engine(self) -> BillingEngine:
        return self._engine

    @property
    def audit(self) -> AuditLogger:
        return self._audit

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    def list_properties(self) -> list[Property]:
        return self._store.list_properties()

    def save_property(self, rented_property: Property) -> Property:
        """Add or update a property."""
        self._store.save_record(Collection.PROPERTIES, rented_property)
        self._audit.log_record_saved("property", rented_property.id, rented_property.display_name)
        return rented_property

    def tenants_of_property(self, property_id: str) -> list[Tenant]:
        return [t for t in self._store.list_tenants() if t.property_id == property_id]

    def delete_property(self, property_id: str) -> None:
        """
        Delete a property nobody is assigned to.

        Raises:
            NotFoundError: If no property has that id
            PropertyInUseError: If any tenant, active or former, still
                references the property
        """
        rented_property = self._store.get_property(property_id)
        if rented_property is None:
            raise NotFoundError(f"Property not found: {property_id}")

        tenants = self.tenants_of_property(property_id)
        if tenants:
            self._audit.log(
                AuditEventBuilder.property_delete_rejected(
                    property_id, [t.id for t in tenants]
                )
            )
            raise PropertyInUseError(rented_property, tenants)

        self._store.delete_record(Collection.PROPERTIES, property_id)
        self._audit.log_record_deleted("property", property_id)

    # =========================================================================
    # TENANTS
    # =========================================================================

    def list_tenants(self) -> list[Tenant]:
        return self._store.list_tenants()

    def save_tenant(self, tenant: Tenant) -> Tenant:
        """
        Add or update a tenant.

        Raises:
            NotFoundError: If the tenant references an unknown property
        """
        if tenant.property_id and self._store.get_property(tenant.property_id) is None:
            raise NotFoundError(f"Property not found: {tenant.property_id}")
        self._store.save_record(Collection.TENANTS, tenant)
        self._audit.log_record_saved("tenant", tenant.id, tenant.name)
        return tenant

    def delete_tenant(self, tenant_id: str) -> None:
        """
        Delete a tenant. Their invoices are kept and print as
        "Valued Tenant".
        """
        if not self._store.delete_record(Collection.TENANTS, tenant_id):
            raise NotFoundError(f"Tenant not found: {tenant_id}")
        self._audit.log_record_deleted("tenant", tenant_id)

    # =========================================================================
    # EXPENSES
    # =========================================================================

    def list_expenses(self) -> list[Expense]:
        return sorted(self._store.list_expenses(), key=lambda e: e.spent_on, reverse=True)

    def save_expense(self, expense: Expense) -> Expense:
        self._store.save_record(Collection.EXPENSES, expense)
        self._audit.log_record_saved("expense", expense.id, expense.description or expense.category.value)
        return expense

    def delete_expense(self, expense_id: str) -> None:
        if not self._store.delete_record(Collection.EXPENSES, expense_id):
            raise NotFoundError(f"Expense not found: {expense_id}")
        self._audit.log_record_deleted("expense", expense_id)

    # =========================================================================
    # INVOICES
    # =========================================================================

    def list_invoices(self) -> list[Invoice]:
        """Newest first."""
        return sorted(
            self._store.list_invoices(),
            key=lambda inv: (inv.created_date, inv.id),
            reverse=True,
        )

    def create_invoice(self, draft: InvoiceDraft) -> Invoice:
        """
        Raises:
            InvoiceValidationError: If the tenant is unknown or no due
                date can be resolved
        """
        invoice = self._engine.create_invoice(draft)
        self._audit.log_invoice_created(
            invoice.id, invoice.tenant_id, str(invoice.total_amount)
        )
        return invoice

    def update_invoice(self, invoice_id: str, update: InvoiceUpdate) -> Invoice:
        invoice = self._engine.update_invoice(invoice_id, update)
        self._audit.log(
            AuditEventBuilder.invoice_updated(
                invoice_id,
                sorted(update.model_fields_set),
                str(invoice.total_amount),
            )
        )
        return invoice

    def set_invoice_status(
        self,
        invoice_id: str,
        status: InvoiceStatus,
        received_date: Optional[date] = None,
    ) -> Invoice:
        previous = self._store.get_invoice(invoice_id)
        invoice = self._engine.set_status(invoice_id, status, received_date)
        self._audit.log_invoice_status_changed(
            invoice_id,
            previous.status.value if previous else "",
            invoice.status.value,
        )
        return invoice

    def delete_invoice(self, invoice_id: str) -> None:
        self._engine.delete_invoice(invoice_id)
        self._audit.log(AuditEventBuilder.invoice_deleted(invoice_id))

    def invoice_document(self, invoice_id: str) -> InvoiceDocument:
        """Assemble the printable document for a stored invoice."""
        invoice = self._store.get_invoice(invoice_id)
        if invoice is None:
            raise NotFoundError(f"Invoice not found: {invoice_id}")
        tenant = self._store.get_tenant(invoice.tenant_id)
        rented_property = (
            self._store.get_property(tenant.property_id)
            if tenant and tenant.property_id
            else None
        )
        return assemble_invoice_document(
            invoice,
            tenant,
            rented_property,
            self._store.get_company(),
            default_notes=self._default_notes,
            default_bank_details=self._default_bank_details,
        )

    def render_invoice_pdf(self, invoice_id: str) -> tuple[str, bytes]:
        """
        Returns:
            (filename, pdf_bytes)
        """
        document = self.invoice_document(invoice_id)
        try:
            data = self._renderer.render(document)
        except Exception as e:
            self._audit.log_error(
                error_type="RenderError",
                error_message=str(e),
                details={"invoice_id": invoice_id},
            )
            raise
        self._audit.log(AuditEventBuilder.invoice_rendered(invoice_id, document.filename))
        return document.filename, data

    def save_invoice_pdf(self, invoice_id: str, output_dir: Union[str, Path]) -> Path:
        """
        Render an invoice and write it into ``output_dir``.

        Raises:
            PortfolioError: If the file name would place the PDF outside
                ``output_dir``
        """
        filename, data = self.render_invoice_pdf(invoice_id)
        directory = Path(output_dir)
        directory.mkdir(parents=True, exist_ok=True)
        path = (directory / filename).resolve()
        if path.parent != directory.resolve():
            raise PortfolioError(f"Refusing to write {filename!r} outside {directory}")
        path.write_bytes(data)
        return path

    # =========================================================================
    # COMPANY
    # =========================================================================

    def get_company(self) -> CompanyInfo:
        return self._store.get_company()

    def update_company(self, **changes: Any) -> CompanyInfo:
        """
        Update company profile fields (``name``, ``address``, ``email``,
        ``invoice_settings``).

        Raises:
            pydantic.ValidationError: If a value is invalid
        """
        data = self._store.get_company().model_dump()
        data.update(changes)
        company = CompanyInfo.model_validate(data)
        self._store.save_company(company)
        self._audit.log(AuditEventBuilder.company_updated(company.name))
        return company

    # =========================================================================
    # REPORTS
    # =========================================================================

    def dashboard(self) -> DashboardSummary:
        return build_dashboard(
            self._store.list_properties(),
            self._store.list_tenants(),
            self._store.list_invoices(),
            self._store.list_expenses(),
        )

    def tenant_statement(self, tenant_id: str) -> TenantStatement:
        tenant = self._store.get_tenant(tenant_id)
        if tenant is None:
            raise NotFoundError(f"Tenant not found: {tenant_id}")
        rented_property = (
            self._store.get_property(tenant.property_id) if tenant.property_id else None
        )
        return build_tenant_statement(tenant, self._store.list_invoices(), rented_property)

    def report(self, name: str, tenant_id: Optional[str] = None) -> ReportTable:
        """
        Build a report table: ``tenants``, ``properties``, ``invoices``,
        ``expenses`` or ``ledger`` (which needs ``tenant_id``).

        Raises:
            ValueError: For an unknown report name
        """
        if name == "ledger":
            if not tenant_id:
                raise ValueError("The ledger report needs a tenant")
            return ledger_table(self.tenant_statement(tenant_id))
        table = build_report(
            name,
            self._store.list_properties(),
            self._store.list_tenants(),
            self._store.list_invoices(),
            self._store.list_expenses(),
        )
        if table is None:
            raise ValueError(f"Unknown report: {name}")
        return table

    def export_report_csv(self, name: str, tenant_id: Optional[str] = None) -> tuple[str, str]:
        """
        Returns:
            (filename, csv_text)
        """
        table = self.report(name, tenant_id)
        self._audit.log(AuditEventBuilder.report_exported(table.slug, table.row_count))
        filename = f"report_{table.slug}_{self._engine.today().isoformat()}.csv"
        return filename, export_table(table)

    def export_report_pdf(self, name: str, tenant_id: Optional[str] = None) -> tuple[str, bytes]:
        table = self.report(name, tenant_id)
        company = self._store.get_company()
        data = self._renderer.render_report(table, subtitle=company.name)
        self._audit.log(AuditEventBuilder.report_exported(table.slug, table.row_count))
        return f"report_{table.slug}_{self._engine.today().isoformat()}.pdf", data

    # =========================================================================
    # CSV IMPORT
    # =========================================================================

    def import_tenants_csv(self, text: str) -> ImportResult:
        """Parse tenants from CSV and add them all."""
        result = import_tenants(text, self._store.list_properties())
        for tenant in result.records:
            self._store.save_record(Collection.TENANTS, tenant)
        self._audit.log(AuditEventBuilder.csv_imported("tenant", result.imported, result.skipped))
        return result

    def import_properties_csv(self, text: str) -> ImportResult:
        result = import_properties(text)
        for rented_property in result.records:
            self._store.save_record(Collection.PROPERTIES, rented_property)
        self._audit.log(AuditEventBuilder.csv_imported("property", result.imported, result.skipped))
        return result

    # =========================================================================
    # BACKUP / RESET
    # =========================================================================

    def export_backup(self) -> PortfolioSnapshot:
        return export_snapshot(self._store)

    def restore_backup(self, payload: Union[str, bytes, dict]) -> PortfolioSnapshot:
        """
        Replace everything with the contents of a backup.

        Raises:
            pydantic.ValidationError: If the backup is malformed (nothing
                is replaced)
            ValueError: If the payload is not JSON
        """
        snapshot = restore_snapshot(self._store, payload)
        self._audit.log(AuditEventBuilder.backup_restored(snapshot.counts()))
        logger.info("backup_restored", **snapshot.counts())
        return snapshot

    def factory_reset(self) -> None:
        """Wipe every record and the company profile."""
        self._store.clear()
        self._audit.log(AuditEventBuilder.factory_reset())


def create_record_store(
    backend: str,
    data_file: Union[str, Path] = "",
) -> tuple[RecordStore, Optional[AuditStorageInterface]]:
    """
    Build the configured record store and its audit storage.

    Raises:
        ValueError: For an unknown backend name
    """
    if backend == "google_sheets":
        client = GoogleSheetsClient()
        return GoogleSheetsRecordStore(client), GoogleSheetsAuditStorage(client)
    if backend == "local":
        return JsonFileRecordStore(data_file), InMemoryAuditStorage()
    if backend == "memory":
        return InMemoryRecordStore(), InMemoryAuditStorage()
    raise ValueError(f"Unknown storage backend: {backend}")


def create_app_components() -> PortfolioService:
    """
    Factory function to create the application service from settings.

    Raises:
        StorageError: If the configured store cannot be opened
    """
    app_settings = get_settings().app
    store, audit_storage = create_record_store(
        app_settings.storage_backend, app_settings.data_file
    )

    return PortfolioService(
        store=store,
        audit_logger=AuditLogger(audit_storage),
        due_date_policy=get_due_date_policy(
            app_settings.due_date_policy, app_settings.due_date_net_days
        ),
        default_notes=app_settings.default_notes,
        default_bank_details=app_settings.default_bank_details,
    )


__all__ = [
    "InvoiceValidationError",
    "PortfolioError",
    "PortfolioService",
    "PropertyInUseError",
    "create_app_components",
    "create_record_store",
]
