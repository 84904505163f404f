"""
In-Memory and JSON-File Storage

InMemoryRecordStore keeps the portfolio in plain dicts. It backs the
tests and is the base of JsonFileRecordStore, which mirrors every
change into a single JSON file on disk, the desktop equivalent of the
browser local storage the first version of the app used.
"""

import json
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Union

import structlog
from pydantic import BaseModel, ValidationError

from rentbook.models.audit import AuditEvent
from rentbook.models.records import CompanyInfo
from rentbook.services.storage.interface import (
    AuditStorageInterface,
    Collection,
    RecordStore,
    StorageError,
)

logger = structlog.get_logger(__name__)


class InMemoryRecordStore(RecordStore):
    """Portfolio held in process memory."""

    def __init__(self):
        self._company = CompanyInfo()
        self._records: dict[Collection, dict[str, BaseModel]] = {
            collection: {} for collection in Collection
        }

    def list_records(self, collection: Collection) -> list[BaseModel]:
        return [record.model_copy(deep=True) for record in self._records[collection].values()]

    def get_record(self, collection: Collection, record_id: str) -> Optional[BaseModel]:
        record = self._records[collection].get(record_id)
        return record.model_copy(deep=True) if record else None

    def save_record(self, collection: Collection, record: BaseModel) -> None:
        if not isinstance(record, collection.model):
            raise StorageError(
                f"Cannot store {type(record).__name__} in {collection.value}"
            )
        with self._mutation():
            self._records[collection][record.id] = record.model_copy(deep=True)

    def delete_record(self, collection: Collection, record_id: str) -> bool:
        if record_id not in self._records[collection]:
            return False
        with self._mutation():
            del self._records[collection][record_id]
        return True

    def get_company(self) -> CompanyInfo:
        return self._company.model_copy(deep=True)

    def save_company(self, company: CompanyInfo) -> None:
        with self._mutation():
            self._company = company.model_copy(deep=True)

    def replace_all(
        self,
        company: CompanyInfo,
        records: dict[Collection, list[BaseModel]],
    ) -> None:
        with self._mutation():
            self._company = company.model_copy(deep=True)
            self._records = {
                collection: {
                    record.id: record.model_copy(deep=True)
                    for record in records.get(collection, [])
                }
                for collection in Collection
            }

    @contextmanager
    def _mutation(self):
        """
        Apply a change, then call ``_changed``.

        If ``_changed`` raises StorageError the previous state is put
        back, so memory never runs ahead of what was persisted. Stored
        records are never modified in place, so shallow copies suffice.
        """
        company = self._company
        records = {collection: dict(items) for collection, items in self._records.items()}
        yield
        try:
            self._changed()
        except StorageError:
            self._company = company
            self._records = records
            raise

    def _changed(self) -> None:
        """Hook called after every mutation."""

    def to_payload(self) -> dict:
        """The whole portfolio as JSON-compatible data."""
        payload = {"company": self._company.model_dump(mode="json")}
        for collection in Collection:
            payload[collection.value] = [
                record.model_dump(mode="json")
                for record in self._records[collection].values()
            ]
        return payload

    def load_payload(self, payload: dict) -> None:
        """
        Replace the portfolio from JSON-compatible data.

        Raises:
            pydantic.ValidationError: If any record is malformed; the
                store is left untouched in that case
        """
        company = CompanyInfo.model_validate(payload.get("company") or {})
        records = {
            collection: [
                collection.model.model_validate(item)
                for item in payload.get(collection.value) or []
            ]
            for collection in Collection
        }
        self.replace_all(company, records)


class JsonFileRecordStore(InMemoryRecordStore):
    """
    Portfolio persisted to a JSON file.

    The file is rewritten after every change. Writes go to a temporary
    file in the same directory which then replaces the original, so a
    crash mid-write never leaves a truncated file behind.
    """

    def __init__(self, path: Union[str, Path]):
        super().__init__()
        self._path = Path(path)
        self._loading = False
        if self._path.exists():
            self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> None:
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Failed to read {self._path}: {e}")

        self._loading = True
        try:
            self.load_payload(payload)
        except ValidationError as e:
            raise StorageError(f"Malformed data in {self._path}: {e}")
        finally:
            self._loading = False

        logger.info(
            "portfolio_loaded",
            path=str(self._path),
            invoices=len(self._records[Collection.INVOICES]),
        )

    def _changed(self) -> None:
        if self._loading:
            return
        data = json.dumps(self.to_payload(), indent=2, ensure_ascii=False)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
            )
        except OSError as e:
            raise StorageError(f"Failed to write {self._path}: {e}")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(data)
            os.replace(tmp_name, self._path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise StorageError(f"Failed to write {self._path}: {e}")


class InMemoryAuditStorage(AuditStorageInterface):
    """Audit trail kept in memory (tests, local-only runs)."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]
