"""Services package."""

from family_finance.services.storage import (
    AuditStorageInterface,
    ConnectionError,
    DuplicateError,
    InvalidRecordError,
    GoogleSheetsClient,
    GoogleSheetsFamilySync,
    JsonFileStore,
    JsonLinesAuditStorage,
    MinimumPeopleError,
    NotFoundError,
    ReferenceStorageInterface,
    RemoteSyncInterface,
    SnapshotStorageInterface,
    StorageError,
    TransactionStorageInterface,
)

__all__ = [
    "AuditStorageInterface",
    "ConnectionError",
    "DuplicateError",
    "InvalidRecordError",
    "GoogleSheetsClient",
    "GoogleSheetsFamilySync",
    "JsonFileStore",
    "JsonLinesAuditStorage",
    "MinimumPeopleError",
    "NotFoundError",
    "ReferenceStorageInterface",
    "RemoteSyncInterface",
    "SnapshotStorageInterface",
    "StorageError",
    "TransactionStorageInterface",
]
