"""
Storage Services Package

Provides the abstract record store and its implementations: in-memory,
a local JSON file, and Google Sheets as the hosted backend.
"""

from rentbook.services.storage.interface import (
    AuditStorageInterface,
    Collection,
    ConnectionError,
    NotFoundError,
    RecordStore,
    StorageError,
)
from rentbook.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryRecordStore,
    JsonFileRecordStore,
)
from rentbook.services.storage.google_sheets import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsRecordStore,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "Collection",
    "RecordStore",
    # Exceptions
    "ConnectionError",
    "NotFoundError",
    "StorageError",
    # Local implementations
    "InMemoryAuditStorage",
    "InMemoryRecordStore",
    "JsonFileRecordStore",
    # Google Sheets implementation
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsRecordStore",
]
