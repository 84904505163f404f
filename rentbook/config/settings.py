"""
Configuration Management for RentBook

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Billing policy knobs (due-date rule, default particulars, default notes)
live next to the storage configuration so a deployment is described by
a single .env file.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets storage configuration (hosted backend)."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )

    # Worksheet names within the spreadsheet
    properties_sheet_name: str = Field(default="Properties")
    tenants_sheet_name: str = Field(default="Tenants")
    invoices_sheet_name: str = Field(default="Invoices")
    expenses_sheet_name: str = Field(default="Expenses")
    company_sheet_name: str = Field(default="Company")
    audit_sheet_name: str = Field(
        default="AuditLog",
        description="Name of the sheet for audit logs"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Make sure it exists before running the application."
            )
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="RENTBOOK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Storage
    storage_backend: Literal["local", "google_sheets", "memory"] = Field(
        default="local",
        description="Where records are persisted"
    )
    data_file: str = Field(
        default="data/rentbook.json",
        description="JSON file used by the local storage backend"
    )
    output_dir: str = Field(
        default="data/invoices",
        description="Directory generated PDFs are written to"
    )

    # Billing policy
    due_date_policy: Literal["cycle_month_end", "net_days", "manual"] = Field(
        default="cycle_month_end",
        description="How the due date of a new invoice is derived"
    )
    due_date_net_days: int = Field(
        default=7,
        ge=0,
        le=365,
        description="Days after creation used by the net_days policy"
    )
    default_line_items: str = Field(
        default="Rent Charges,Repair & Municipal Tax,Service charges for common area",
        description="Comma-separated particulars pre-filled on a new invoice"
    )
    default_notes: str = Field(
        default="Issued by Landlord",
        description="Notes printed when an invoice carries none"
    )
    default_bank_details: str = Field(
        default="",
        description="Bank details printed when an invoice carries none"
    )

    @property
    def default_line_items_list(self) -> list[str]:
        """Get default particulars as a list."""
        return [item.strip() for item in self.default_line_items.split(",") if item.strip()]


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Note: These are loaded lazily to allow partial configuration

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        app = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)
        return results

    # Sheets credentials only matter when that backend is selected
    if app.storage_backend == "google_sheets":
        try:
            _ = settings.google_sheets
            results["google_sheets"] = True
        except Exception as e:
            results["google_sheets"] = False
            results["google_sheets_error"] = str(e)

    return results
