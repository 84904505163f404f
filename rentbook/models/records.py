"""
Portfolio Records

Flat records that carry no business rules of their own: properties,
tenants, expenses and the company profile printed on every invoice.
They are referenced by invoices through opaque string identifiers.

DESIGN DECISION: Payloads coming from CSV files or from backups of the
earlier browser-based version of the app are untyped key/value maps with
camelCase keys. Every model accepts both spellings in a "before"
validator, so the rest of the system only ever sees typed records with
explicit defaults.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def new_record_id(prefix: str) -> str:
    """Generate an opaque identifier such as ``t-3f2a9c1b7d4e``."""
    return f"{prefix}-{uuid4().hex[:12]}"


def rename_legacy_keys(data: Any, aliases: dict[str, str]) -> Any:
    """
    Map camelCase keys of legacy payloads onto field names.

    Keys that are already present under the field name win over their
    legacy spelling.
    """
    if not isinstance(data, dict):
        return data
    renamed = dict(data)
    for legacy, field_name in aliases.items():
        if legacy in renamed:
            value = renamed.pop(legacy)
            renamed.setdefault(field_name, value)
    return renamed


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


# =============================================================================
# ENUMS
# =============================================================================

class PropertyType(str, Enum):
    """Kinds of rentable unit in the portfolio."""
    FLAT = "Flat"
    GARAGE = "Garage"
    GODOWN = "Godown"


class TenantStatus(str, Enum):
    ACTIVE = "Active"
    FORMER = "Former"


class ExpenseCategory(str, Enum):
    """
    Expense categories.

    DESIGN DECISION: Explicit categories rather than free text keep the
    expense report groupable.
    """
    MAINTENANCE = "Maintenance"
    TAX = "Tax"
    INSURANCE = "Insurance"
    UTILITIES = "Utilities"
    LEGAL = "Legal"
    MANAGEMENT_FEE = "Management Fee"
    OTHER = "Other"


class FontFamily(str, Enum):
    HELVETICA = "helvetica"
    TIMES = "times"
    COURIER = "courier"


class HeaderLayout(str, Enum):
    STANDARD = "standard"
    MODERN = "modern"


# =============================================================================
# RECORDS
# =============================================================================

class Property(BaseModel):
    """A rentable unit."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=lambda: new_record_id("p"), min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    type: PropertyType = PropertyType.FLAT
    address: str = ""
    unit_number: str = ""

    @model_validator(mode="before")
    @classmethod
    def accept_legacy_keys(cls, data: Any) -> Any:
        return rename_legacy_keys(data, {"unitNumber": "unit_number"})

    @property
    def display_name(self) -> str:
        """Name as printed on invoices, e.g. ``Flat A-101``."""
        return f"{self.type.value} {self.name}"


class Tenant(BaseModel):
    """A tenant occupying (or formerly occupying) a property."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=lambda: new_record_id("t"), min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    email: str = ""
    phone: str = ""
    address: str = ""
    property_id: str = Field(
        default="",
        description="Property the tenant rents; empty when unassigned"
    )
    status: TenantStatus = TenantStatus.ACTIVE
    move_in_date: Optional[date] = None

    @model_validator(mode="before")
    @classmethod
    def accept_legacy_keys(cls, data: Any) -> Any:
        return rename_legacy_keys(
            data,
            {"propertyId": "property_id", "moveInDate": "move_in_date"},
        )

    @field_validator("move_in_date", mode="before")
    @classmethod
    def blank_move_in_date(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @property
    def is_active(self) -> bool:
        return self.status == TenantStatus.ACTIVE


class Expense(BaseModel):
    """Money spent on a property."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(default_factory=lambda: new_record_id("EXP"), min_length=1)
    property_id: str = ""
    amount: Decimal = Field(
        ...,
        ge=0,
        decimal_places=2,
        description="Amount in INR"
    )
    category: ExpenseCategory = ExpenseCategory.MAINTENANCE
    spent_on: date
    description: str = ""

    @model_validator(mode="before")
    @classmethod
    def accept_legacy_keys(cls, data: Any) -> Any:
        return rename_legacy_keys(
            data,
            {"propertyId": "property_id", "date": "spent_on"},
        )


class InvoiceSettings(BaseModel):
    """Presentation options for generated invoice PDFs."""

    primary_color: str = Field(
        default="#4f46e5",
        pattern=r"^#[0-9a-fA-F]{6}$",
        description="Accent colour as #rrggbb"
    )
    font_family: FontFamily = FontFamily.HELVETICA
    header_layout: HeaderLayout = HeaderLayout.STANDARD
    show_bank_details: bool = True
    show_tenant_contact: bool = True

    @model_validator(mode="before")
    @classmethod
    def accept_legacy_keys(cls, data: Any) -> Any:
        return rename_legacy_keys(
            data,
            {
                "primaryColor": "primary_color",
                "fontFamily": "font_family",
                "headerLayout": "header_layout",
                "showBankDetails": "show_bank_details",
                "showTenantContact": "show_tenant_contact",
            },
        )

    @property
    def primary_rgb(self) -> tuple[int, int, int]:
        """Accent colour as an (r, g, b) tuple."""
        hex_value = self.primary_color.lstrip("#")
        return (
            int(hex_value[0:2], 16),
            int(hex_value[2:4], 16),
            int(hex_value[4:6], 16),
        )


class CompanyInfo(BaseModel):
    """The landlord's business profile, printed in invoice headers."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(default="My Properties", min_length=1)
    address: str = ""
    email: str = ""
    invoice_settings: InvoiceSettings = Field(default_factory=InvoiceSettings)

    @model_validator(mode="before")
    @classmethod
    def accept_legacy_keys(cls, data: Any) -> Any:
        data = rename_legacy_keys(data, {"invoiceSettings": "invoice_settings"})
        # Older backups stored the settings as null
        if isinstance(data, dict) and data.get("invoice_settings") is None:
            data.pop("invoice_settings", None)
        return data
