"""
Tests for settings loading.
"""

import pytest
from pydantic import ValidationError

from family_finance.config import (
    AppSettings,
    GoogleSheetsSettings,
    LocalStorageSettings,
    Settings,
    get_settings,
    sync_enabled,
    validate_all_settings,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate from the developer's environment and .env file."""
    monkeypatch.chdir(tmp_path)
    for name in (
        "GOOGLE_SHEETS_ENABLED",
        "GOOGLE_SHEETS_CREDENTIALS_PATH",
        "GOOGLE_SHEETS_SPREADSHEET_ID",
        "GOOGLE_SHEETS_FAMILY_SECRET",
        "FAMILY_FINANCE_DATA_DIR",
    ):
        monkeypatch.delenv(name, raising=False)


class TestSettings:
    """Tests for the settings sections."""

    def test_app_defaults(self):
        settings = AppSettings()

        assert settings.currency_symbol == "R$"
        assert settings.max_transaction_amount == 100000.0
        assert settings.future_date_tolerance_days == 366

    def test_data_dir_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("FAMILY_FINANCE_DATA_DIR", str(tmp_path / "finance"))
        assert LocalStorageSettings().data_dir == tmp_path / "finance"

    def test_family_secret_rejects_sheet_title_characters(self, tmp_path):
        with pytest.raises(ValidationError):
            GoogleSheetsSettings(
                credentials_path=str(tmp_path),
                spreadsheet_id="abc",
                family_secret="silva/2024",
            )

    def test_family_secret_minimum_length(self, tmp_path):
        with pytest.raises(ValidationError):
            GoogleSheetsSettings(
                credentials_path=str(tmp_path),
                spreadsheet_id="abc",
                family_secret="abc",
            )


class TestSyncEnabled:
    """Tests for sync_enabled."""

    def test_unconfigured_sync_is_off(self):
        assert sync_enabled(Settings()) is False

    def test_configured_but_switched_off(self, monkeypatch, tmp_path):
        monkeypatch.setenv("GOOGLE_SHEETS_CREDENTIALS_PATH", str(tmp_path))
        monkeypatch.setenv("GOOGLE_SHEETS_SPREADSHEET_ID", "abc")
        monkeypatch.setenv("GOOGLE_SHEETS_FAMILY_SECRET", "silva-2024")

        assert sync_enabled(Settings()) is False

    def test_configured_and_enabled(self, monkeypatch, tmp_path):
        monkeypatch.setenv("GOOGLE_SHEETS_ENABLED", "true")
        monkeypatch.setenv("GOOGLE_SHEETS_CREDENTIALS_PATH", str(tmp_path))
        monkeypatch.setenv("GOOGLE_SHEETS_SPREADSHEET_ID", "abc")
        monkeypatch.setenv("GOOGLE_SHEETS_FAMILY_SECRET", "silva-2024")

        assert sync_enabled(Settings()) is True


class TestValidateAllSettings:
    """Tests for the startup check."""

    def test_reports_unconfigured_sync(self):
        get_settings.cache_clear()
        try:
            results = validate_all_settings()
        finally:
            get_settings.cache_clear()

        assert results["storage"] is True
        assert results["app"] is True
        assert results["google_sheets"] is False
        assert "google_sheets_error" in results
