"""Services package."""

from rentbook.services.storage import (
    AuditStorageInterface,
    Collection,
    ConnectionError,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsRecordStore,
    InMemoryAuditStorage,
    InMemoryRecordStore,
    JsonFileRecordStore,
    NotFoundError,
    RecordStore,
    StorageError,
)

__all__ = [
    "AuditStorageInterface",
    "Collection",
    "ConnectionError",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsRecordStore",
    "InMemoryAuditStorage",
    "InMemoryRecordStore",
    "JsonFileRecordStore",
    "NotFoundError",
    "RecordStore",
    "StorageError",
]
