"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is the hosted backend because:
1. The landlord can look at the records directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Not suitable for high-volume data (a few dozen units is fine)
- No transactions (restore clears and rewrites each sheet in turn)
- Limited query capabilities (we filter in Python)

Each collection lives in its own worksheet with one record per row:
[id, record_json, updated_at]. Storing the record as JSON keeps line
items and nested settings intact without a column per field.
"""

import json
from datetime import datetime
from typing import Optional

import gspread
from google.oauth2.service_account import Credentials
from pydantic import BaseModel, ValidationError
from tenacity import retry, stop_after_attempt, wait_exponential

import structlog

from rentbook.config import get_settings
from rentbook.models.audit import AuditEvent, AuditEventType, AuditSeverity
from rentbook.models.records import CompanyInfo
from rentbook.services.storage.interface import (
    AuditStorageInterface,
    Collection,
    ConnectionError,
    RecordStore,
    StorageError,
)

logger = structlog.get_logger(__name__)

RECORD_COLUMNS = ["id", "record_json", "updated_at"]

AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "entity_type",
    "entity_id",
    "description",
    "details_json",
    "error_message",
    "is_user_action",
]

_COMPANY_ROW_ID = "company"

_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    reraise=True,
)


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = get_settings().google_sheets

    @_retry
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_worksheet(self, title: str, columns: list[str], rows: int = 1000) -> gspread.Worksheet:
        """Get or create a worksheet with the given header row."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=rows,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def sheet_name(self, collection: Collection) -> str:
        return {
            Collection.PROPERTIES: self._settings.properties_sheet_name,
            Collection.TENANTS: self._settings.tenants_sheet_name,
            Collection.INVOICES: self._settings.invoices_sheet_name,
            Collection.EXPENSES: self._settings.expenses_sheet_name,
        }[collection]

    def get_collection_sheet(self, collection: Collection) -> gspread.Worksheet:
        return self.get_worksheet(self.sheet_name(collection), RECORD_COLUMNS)

    def get_company_sheet(self) -> gspread.Worksheet:
        return self.get_worksheet(self._settings.company_sheet_name, RECORD_COLUMNS, rows=10)

    def get_audit_sheet(self) -> gspread.Worksheet:
        """Get or create the Audit worksheet."""
        return self.get_worksheet(self._settings.audit_sheet_name, AUDIT_COLUMNS, rows=5000)


def _record_to_row(record: BaseModel) -> list:
    return [
        record.id,
        record.model_dump_json(),
        datetime.utcnow().isoformat(),
    ]


class GoogleSheetsRecordStore(RecordStore):
    """
    Google Sheets implementation of the record store.

    Reads fetch the whole worksheet; the data set is small enough that
    this is simpler than maintaining an index.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _rows(self, sheet: gspread.Worksheet) -> list[list[str]]:
        # Skip header
        return sheet.get_all_values()[1:]

    def list_records(self, collection: Collection) -> list[BaseModel]:
        try:
            sheet = self._client.get_collection_sheet(collection)
            rows = self._rows(sheet)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to list {collection.value}: {e}")

        records = []
        for row in rows:
            if len(row) < 2 or not row[0]:
                continue
            try:
                records.append(collection.model.model_validate_json(row[1]))
            except ValidationError as e:
                # Hand-edited rows should not take the whole app down
                logger.warning(
                    "malformed_sheet_row",
                    collection=collection.value,
                    record_id=row[0],
                    error=str(e),
                )
        return records

    def get_record(self, collection: Collection, record_id: str) -> Optional[BaseModel]:
        for record in self.list_records(collection):
            if record.id == record_id:
                return record
        return None

    @_retry
    def save_record(self, collection: Collection, record: BaseModel) -> None:
        try:
            sheet = self._client.get_collection_sheet(collection)
            row = _record_to_row(record)
            for idx, existing in enumerate(self._rows(sheet), start=2):  # Row 1 is header
                if existing and existing[0] == record.id:
                    sheet.update(
                        range_name=f"A{idx}:C{idx}",
                        values=[row],
                        value_input_option="RAW",
                    )
                    return
            sheet.append_row(row, value_input_option="RAW")
        except Exception as e:
            raise StorageError(f"Failed to save {collection.value} record {record.id}: {e}")

    def delete_record(self, collection: Collection, record_id: str) -> bool:
        try:
            sheet = self._client.get_collection_sheet(collection)
            for idx, row in enumerate(self._rows(sheet), start=2):
                if row and row[0] == record_id:
                    sheet.delete_rows(idx)
                    return True
            return False
        except Exception as e:
            raise StorageError(f"Failed to delete {collection.value} record {record_id}: {e}")

    def get_company(self) -> CompanyInfo:
        try:
            rows = self._rows(self._client.get_company_sheet())
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read company profile: {e}")
        for row in rows:
            if len(row) >= 2 and row[0] == _COMPANY_ROW_ID:
                return CompanyInfo.model_validate_json(row[1])
        return CompanyInfo()

    @_retry
    def save_company(self, company: CompanyInfo) -> None:
        row = [_COMPANY_ROW_ID, company.model_dump_json(), datetime.utcnow().isoformat()]
        try:
            sheet = self._client.get_company_sheet()
            sheet.batch_clear(["A2:C"])
            sheet.append_row(row, value_input_option="RAW")
        except Exception as e:
            raise StorageError(f"Failed to save company profile: {e}")

    def replace_all(
        self,
        company: CompanyInfo,
        records: dict[Collection, list[BaseModel]],
    ) -> None:
        self.save_company(company)
        for collection in Collection:
            rows = [_record_to_row(record) for record in records.get(collection, [])]
            try:
                sheet = self._client.get_collection_sheet(collection)
                sheet.batch_clear(["A2:C"])
                if rows:
                    sheet.append_rows(rows, value_input_option="RAW")
            except Exception as e:
                raise StorageError(f"Failed to replace {collection.value}: {e}")


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _row_to_event(self, row: list) -> AuditEvent:
        """Convert a spreadsheet row to an AuditEvent."""
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        return AuditEvent(
            event_id=safe_get(0),
            timestamp=datetime.fromisoformat(safe_get(1)),
            event_type=AuditEventType(safe_get(2)),
            severity=AuditSeverity(safe_get(3)),
            entity_type=safe_get(4) or None,
            entity_id=safe_get(5) or None,
            description=safe_get(6),
            details=json.loads(safe_get(7)) if safe_get(7) else {},
            error_message=safe_get(8) or None,
            is_user_action=safe_get(9).lower() == "true",
        )

    @_retry
    def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        try:
            sheet = self._client.get_audit_sheet()
            sheet.append_row(event.to_sheets_row(), value_input_option="RAW")
            return True
        except Exception as e:
            raise StorageError(f"Failed to write audit event: {e}")

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """Get recent events."""
        try:
            sheet = self._client.get_audit_sheet()
            all_rows = sheet.get_all_values()[1:]
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")

        events = []
        for row in all_rows:
            if row and row[0]:
                try:
                    events.append(self._row_to_event(row))
                except (ValueError, ValidationError):
                    continue

        # Sort newest first
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
