"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the portfolio in a local JSON file or a hosted spreadsheet
2. Use in-memory storage for testing
3. Keep the billing rules decoupled from how records are persisted

The interface is intentionally simple - we're not building an ORM.
Four record collections keyed by id, plus the single company profile.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from rentbook.models.audit import AuditEvent
from rentbook.models.invoice import Invoice
from rentbook.models.records import CompanyInfo, Expense, Property, Tenant


class Collection(str, Enum):
    """Record collections held by a store."""
    PROPERTIES = "properties"
    TENANTS = "tenants"
    INVOICES = "invoices"
    EXPENSES = "expenses"

    @property
    def model(self) -> type[BaseModel]:
        return {
            Collection.PROPERTIES: Property,
            Collection.TENANTS: Tenant,
            Collection.INVOICES: Invoice,
            Collection.EXPENSES: Expense,
        }[self]


class RecordStore(ABC):
    """
    Abstract interface for portfolio storage.

    Any storage implementation (JSON file, Google Sheets, etc.)
    must implement the abstract methods. The typed accessors below
    are conveniences built on top of them.
    """

    @abstractmethod
    def list_records(self, collection: Collection) -> list[BaseModel]:
        """
        All records of a collection, in insertion order.

        Raises:
            StorageError: If the backend cannot be read
        """

    @abstractmethod
    def get_record(self, collection: Collection, record_id: str) -> Optional[BaseModel]:
        """
        Retrieve one record by id.

        Returns:
            The record if found, None otherwise
        """

    @abstractmethod
    def save_record(self, collection: Collection, record: BaseModel) -> None:
        """
        Insert a record, or replace the record with the same id.

        Raises:
            StorageError: If save fails
        """

    @abstractmethod
    def delete_record(self, collection: Collection, record_id: str) -> bool:
        """
        Delete a record by id.

        Returns:
            True if a record was deleted, False if none had that id
        """

    @abstractmethod
    def get_company(self) -> CompanyInfo:
        """The company profile (defaults when none has been saved)."""

    @abstractmethod
    def save_company(self, company: CompanyInfo) -> None:
        """Replace the company profile."""

    @abstractmethod
    def replace_all(
        self,
        company: CompanyInfo,
        records: dict[Collection, list[BaseModel]],
    ) -> None:
        """
        Replace the entire portfolio in one step (restore / factory reset).

        Collections missing from ``records`` are emptied.
        """

    # ------------------------------------------------------------------
    # Typed accessors
    # ------------------------------------------------------------------

    def list_properties(self) -> list[Property]:
        return self.list_records(Collection.PROPERTIES)

    def list_tenants(self) -> list[Tenant]:
        return self.list_records(Collection.TENANTS)

    def list_invoices(self) -> list[Invoice]:
        return self.list_records(Collection.INVOICES)

    def list_expenses(self) -> list[Expense]:
        return self.list_records(Collection.EXPENSES)

    def get_property(self, property_id: str) -> Optional[Property]:
        return self.get_record(Collection.PROPERTIES, property_id)

    def get_tenant(self, tenant_id: str) -> Optional[Tenant]:
        return self.get_record(Collection.TENANTS, tenant_id)

    def get_invoice(self, invoice_id: str) -> Optional[Invoice]:
        return self.get_record(Collection.INVOICES, invoice_id)

    def get_expense(self, expense_id: str) -> Optional[Expense]:
        return self.get_record(Collection.EXPENSES, expense_id)

    def clear(self) -> None:
        """Wipe every record and reset the company profile."""
        self.replace_all(CompanyInfo(), {})


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """

    @abstractmethod
    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """

    def get_events_by_entity(self, entity_type: str, entity_id: str) -> list[AuditEvent]:
        """All events for one record, oldest first."""
        events = [
            event
            for event in self.get_recent_events(limit=10_000)
            if event.entity_type == entity_type and event.entity_id == entity_id
        ]
        events.sort(key=lambda e: e.timestamp)
        return events


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Record not found in storage."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
