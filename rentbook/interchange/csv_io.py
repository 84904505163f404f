"""
CSV Import and Export

Imports accept spreadsheets exported by hand, so header matching is
forgiving: names are compared case-insensitively after trimming and a
few common synonyms are recognised. Quoting follows RFC 4180 via the
csv module, so fields may contain commas and doubled quotes.

Exports quote every field and write money as plain decimals.
"""

import csv
import io
from datetime import date, datetime
from typing import Optional

import structlog
from pydantic import BaseModel, Field, ValidationError

from rentbook.models.records import Property, PropertyType, Tenant, TenantStatus
from rentbook.reports.tables import ReportTable

logger = structlog.get_logger(__name__)


TENANT_COLUMNS = {
    "name": ("name",),
    "email": ("email",),
    "phone": ("phone", "mobile", "contact"),
    "address": ("address", "billing address"),
    "property_id": ("propertyid", "property id", "unit id"),
    "property": ("property",),
    "status": ("status",),
    "move_in_date": ("move in date", "moveindate", "move-in date"),
}

PROPERTY_COLUMNS = {
    "name": ("name",),
    "type": ("type",),
    "address": ("address",),
    "unit_number": ("unit number", "unitnumber", "unit"),
}

_DATE_FORMATS = ("%Y-%m-%d", "%d-%m-%Y", "%d/%m/%Y")


class ImportResult(BaseModel):
    """Outcome of a CSV import."""

    records: list = Field(default_factory=list)
    imported: int = 0
    skipped: int = 0
    message: str = ""


def _read_rows(text: str, columns: dict[str, tuple[str, ...]]) -> tuple[list[dict[str, str]], int]:
    """
    Parse CSV text into dicts keyed by canonical column names.

    Returns the rows that carry at least one recognised value and the
    number of rows skipped for being empty.
    """
    reader = csv.reader(io.StringIO(text.lstrip("\ufeff")))
    try:
        header = next(reader)
    except StopIteration:
        return [], 0

    normalized = [h.strip().lower() for h in header]
    positions: dict[str, int] = {}
    for field, synonyms in columns.items():
        for synonym in synonyms:
            if synonym in normalized:
                positions[field] = normalized.index(synonym)
                break

    rows = []
    skipped = 0
    for values in reader:
        if not any(v.strip() for v in values):
            skipped += 1
            continue
        row = {
            field: values[idx].strip() if idx < len(values) else ""
            for field, idx in positions.items()
        }
        for field in columns:
            row.setdefault(field, "")
        if not any(row.values()):
            skipped += 1
            continue
        rows.append(row)
    return rows, skipped


def parse_date(value: str) -> Optional[date]:
    """Parse ISO or DD-MM-YYYY dates; None when blank or unrecognised."""
    value = value.strip()
    if not value:
        return None
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


def _match_property(reference: str, properties: list[Property]) -> str:
    wanted = reference.strip().lower()
    for prop in properties:
        if wanted in (prop.name.lower(), prop.display_name.lower()):
            return prop.id
    return ""


def import_tenants(text: str, properties: Optional[list[Property]] = None) -> ImportResult:
    """
    Build tenants from CSV text.

    The property is taken from a property id column when present,
    otherwise by matching a ``property`` column against property names.
    Ids that match no known property are dropped.
    """
    properties = properties or []
    known_ids = {prop.id for prop in properties}
    rows, skipped = _read_rows(text, TENANT_COLUMNS)

    tenants = []
    for row in rows:
        property_id = row["property_id"] if row["property_id"] in known_ids else ""
        if not property_id and row["property"]:
            property_id = _match_property(row["property"], properties)
        status = (
            TenantStatus.FORMER
            if row["status"].lower() == TenantStatus.FORMER.value.lower()
            else TenantStatus.ACTIVE
        )
        try:
            tenants.append(Tenant(
                name=row["name"] or "Unknown",
                email=row["email"],
                phone=row["phone"],
                address=row["address"],
                property_id=property_id,
                status=status,
                move_in_date=parse_date(row["move_in_date"]),
            ))
        except ValidationError as e:
            logger.warning("csv_row_rejected", entity="tenant", error=str(e))
            skipped += 1

    return ImportResult(
        records=tenants,
        imported=len(tenants),
        skipped=skipped,
        message=f"Successfully imported {len(tenants)} tenants.",
    )


def _property_type(value: str) -> PropertyType:
    for kind in PropertyType:
        if value.strip().lower() == kind.value.lower():
            return kind
    return PropertyType.FLAT


def import_properties(text: str) -> ImportResult:
    """Build properties from CSV text. Unknown types become Flat."""
    rows, skipped = _read_rows(text, PROPERTY_COLUMNS)

    properties = []
    for row in rows:
        try:
            properties.append(Property(
                name=row["name"] or "Unknown Unit",
                type=_property_type(row["type"]),
                address=row["address"],
                unit_number=row["unit_number"],
            ))
        except ValidationError as e:
            logger.warning("csv_row_rejected", entity="property", error=str(e))
            skipped += 1

    return ImportResult(
        records=properties,
        imported=len(properties),
        skipped=skipped,
        message=f"Successfully imported {len(properties)} units.",
    )


def export_table(table: ReportTable) -> str:
    """Serialize a report table as CSV with every field quoted."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(table.header)
    writer.writerows(table.rows)
    return buffer.getvalue()
