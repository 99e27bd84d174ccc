"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Local JSON files hold the data; Google Sheets mirrors it for the family.
"""

from family_finance.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    DuplicateError,
    InvalidRecordError,
    MinimumPeopleError,
    NotFoundError,
    ReferenceStorageInterface,
    RemoteSyncInterface,
    SnapshotStorageInterface,
    StorageError,
    TransactionStorageInterface,
)
from family_finance.services.storage.local_json import (
    JsonFileStore,
    JsonLinesAuditStorage,
)
from family_finance.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsFamilySync,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "ReferenceStorageInterface",
    "RemoteSyncInterface",
    "SnapshotStorageInterface",
    "TransactionStorageInterface",
    # Exceptions
    "ConnectionError",
    "DuplicateError",
    "InvalidRecordError",
    "MinimumPeopleError",
    "NotFoundError",
    "StorageError",
    # Local implementation
    "JsonFileStore",
    "JsonLinesAuditStorage",
    # Google Sheets implementation
    "GoogleSheetsClient",
    "GoogleSheetsFamilySync",
]
