"""
Portfolio Backup and Restore

A backup is the whole portfolio as one JSON document. Restoring
validates the complete document first and only then replaces the
store's contents, so a bad file never leaves a half-restored portfolio.
"""

import json
from datetime import datetime
from typing import Any, Union

from pydantic import BaseModel, Field

from rentbook.models.invoice import Invoice
from rentbook.models.records import CompanyInfo, Expense, Property, Tenant
from rentbook.services.storage import Collection, RecordStore


SNAPSHOT_VERSION = 1


class PortfolioSnapshot(BaseModel):
    """Everything the application stores."""

    version: int = SNAPSHOT_VERSION
    exported_at: datetime = Field(default_factory=datetime.utcnow)
    company: CompanyInfo = Field(default_factory=CompanyInfo)
    properties: list[Property] = Field(default_factory=list)
    tenants: list[Tenant] = Field(default_factory=list)
    invoices: list[Invoice] = Field(default_factory=list)
    expenses: list[Expense] = Field(default_factory=list)

    def counts(self) -> dict[str, int]:
        return {collection.value: len(getattr(self, collection.value)) for collection in Collection}


def export_snapshot(store: RecordStore) -> PortfolioSnapshot:
    return PortfolioSnapshot(
        company=store.get_company(),
        properties=store.list_properties(),
        tenants=store.list_tenants(),
        invoices=store.list_invoices(),
        expenses=store.list_expenses(),
    )


def snapshot_to_json(snapshot: PortfolioSnapshot) -> str:
    return snapshot.model_dump_json(indent=2)


def restore_snapshot(
    store: RecordStore,
    payload: Union[str, bytes, dict[str, Any]],
) -> PortfolioSnapshot:
    """
    Replace the store's contents with a backup.

    Args:
        payload: Backup JSON text, or the already-decoded document

    Raises:
        pydantic.ValidationError: If the backup is malformed; the store
            is not touched
        ValueError: If the text is not JSON
    """
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as e:
            raise ValueError(f"Backup is not valid JSON: {e}")

    snapshot = PortfolioSnapshot.model_validate(payload)
    store.replace_all(
        snapshot.company,
        {collection: getattr(snapshot, collection.value) for collection in Collection},
    )
    return snapshot
