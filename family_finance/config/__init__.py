"""Configuration package."""

from family_finance.config.settings import (
    AppSettings,
    GoogleSheetsSettings,
    LocalStorageSettings,
    Settings,
    get_settings,
    sync_enabled,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "GoogleSheetsSettings",
    "LocalStorageSettings",
    "Settings",
    "get_settings",
    "sync_enabled",
    "validate_all_settings",
]
