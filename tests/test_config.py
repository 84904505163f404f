"""
Tests for configuration loading.
"""

import pytest
from pydantic import ValidationError

from rentbook.config import AppSettings, GoogleSheetsSettings, get_settings, validate_all_settings


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Run each test away from any real .env file."""
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestAppSettings:
    """Tests for RENTBOOK_ settings."""

    def test_defaults(self):
        settings = AppSettings()
        assert settings.storage_backend == "local"
        assert settings.due_date_policy == "cycle_month_end"
        assert settings.due_date_net_days == 7
        assert settings.default_notes == "Issued by Landlord"
        assert settings.default_line_items_list == [
            "Rent Charges",
            "Repair & Municipal Tax",
            "Service charges for common area",
        ]

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("RENTBOOK_STORAGE_BACKEND", "memory")
        monkeypatch.setenv("RENTBOOK_DUE_DATE_POLICY", "net_days")
        monkeypatch.setenv("RENTBOOK_DUE_DATE_NET_DAYS", "14")
        monkeypatch.setenv("RENTBOOK_DEFAULT_LINE_ITEMS", "Rent, ,Parking")
        settings = AppSettings()
        assert settings.storage_backend == "memory"
        assert settings.due_date_net_days == 14
        assert settings.default_line_items_list == ["Rent", "Parking"]

    def test_unknown_backend_rejected(self, monkeypatch):
        monkeypatch.setenv("RENTBOOK_STORAGE_BACKEND", "postgres")
        with pytest.raises(ValidationError):
            AppSettings()

    def test_env_file(self):
        with open(".env", "w", encoding="utf-8") as handle:
            handle.write("RENTBOOK_DEFAULT_NOTES=Thank you\n")
        assert AppSettings().default_notes == "Thank you"


class TestGoogleSheetsSettings:
    """Tests for GOOGLE_SHEETS_ settings."""

    def test_required_fields(self, monkeypatch):
        monkeypatch.delenv("GOOGLE_SHEETS_CREDENTIALS_PATH", raising=False)
        monkeypatch.delenv("GOOGLE_SHEETS_SPREADSHEET_ID", raising=False)
        with pytest.raises(ValidationError):
            GoogleSheetsSettings()

    def test_missing_credentials_file_only_warns(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_SHEETS_CREDENTIALS_PATH", "missing.json")
        monkeypatch.setenv("GOOGLE_SHEETS_SPREADSHEET_ID", "abc123")
        with pytest.warns(UserWarning):
            settings = GoogleSheetsSettings()
        assert settings.invoices_sheet_name == "Invoices"


class TestValidateAllSettings:
    """Tests for the startup check."""

    def test_local_backend_needs_no_sheets(self, monkeypatch):
        monkeypatch.delenv("RENTBOOK_STORAGE_BACKEND", raising=False)
        assert validate_all_settings() == {"app": True}

    def test_sheets_backend_reports_missing_configuration(self, monkeypatch):
        monkeypatch.setenv("RENTBOOK_STORAGE_BACKEND", "google_sheets")
        monkeypatch.delenv("GOOGLE_SHEETS_CREDENTIALS_PATH", raising=False)
        monkeypatch.delenv("GOOGLE_SHEETS_SPREADSHEET_ID", raising=False)
        status = validate_all_settings()
        assert status["google_sheets"] is False
        assert "google_sheets_error" in status
