"""
Google Sheets Family Sync

DESIGN DECISION: The shared family store is a Google Sheets spreadsheet because:
1. Family members can look at the data directly in Sheets
2. No server or database setup required
3. Built-in backup (Google's infrastructure)

Each collection lives in its own worksheet, titled
"<family secret>.<collection>", so one spreadsheet can hold several
households without their data ever mixing.

TRADEOFFS:
- Writes rewrite a whole worksheet (fine for one household)
- No transactions: the local store stays the source of truth and a
  failed push only produces a notice
"""

from typing import Optional

import gspread
import structlog
from google.oauth2.service_account import Credentials
from pydantic import ValidationError
from tenacity import retry, stop_after_attempt, wait_exponential

from family_finance.config import GoogleSheetsSettings, get_settings
from family_finance.models.finance import FamilySnapshot
from family_finance.services.storage.interface import (
    ConnectionError,
    RemoteSyncInterface,
    StorageError,
)
from family_finance.services.storage.local_json import COLLECTIONS

logger = structlog.get_logger(__name__)


# Column order of each worksheet (camelCase record keys)
COLUMNS = {
    "transactions": [
        "id",
        "date",
        "description",
        "amount",
        "type",
        "category",
        "paymentMethod",
        "cardId",
        "isPaid",
        "personId",
        "installmentsId",
        "installmentNumber",
        "totalInstallments",
        "isFixed",
    ],
    "people": ["id", "name", "color"],
    "cards": ["id", "name", "personId", "type", "lastDigits"],
    "categories": ["id", "name"],
}


def _to_cell(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    return str(value)


def record_to_row(record: dict, columns: list[str]) -> list[str]:
    """Convert a serialized record to a spreadsheet row."""
    return [_to_cell(record.get(column)) for column in columns]


def row_to_record(header: list[str], row: list[str]) -> dict:
    """
    Convert a spreadsheet row back to a record.

    Columns are matched by header name, and empty cells are treated as
    absent fields.
    """
    return {
        column: value
        for column, value in zip(header, row)
        if column and value != ""
    }


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @property
    def family_secret(self) -> str:
        return self._settings.family_secret

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
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

    def worksheet_title(self, collection: str) -> str:
        return f"{self.family_secret}.{collection}"

    def get_collection_sheet(
        self,
        collection: str,
        create: bool = False,
    ) -> Optional[gspread.Worksheet]:
        """Get (or optionally create) the worksheet of one collection."""
        spreadsheet = self.get_spreadsheet()
        title = self.worksheet_title(collection)
        try:
            return spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            if not create:
                return None
            return spreadsheet.add_worksheet(
                title=title,
                rows=1000,
                cols=len(COLUMNS[collection]),
            )


class GoogleSheetsFamilySync(RemoteSyncInterface):
    """
    Replace-on-read, write-on-change mirror of the family dataset.

    A worksheet is never cleared before it is written: each one is
    overwritten from A1 and then resized to the new row count, so a
    failed write leaves the previous contents in place.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _read_collection(self, name: str, sheet: gspread.Worksheet) -> Optional[list]:
        """Items of one worksheet, or None if it has no header row."""
        model = COLLECTIONS[name]
        rows = sheet.get_all_values()
        if not rows or rows[0][:1] != ["id"]:
            return None
        header, body = rows[0], rows[1:]

        items = []
        for row in body:
            if not row or not row[0]:  # Skip empty rows
                continue
            try:
                items.append(model.from_record(row_to_record(header, row)))
            except ValidationError as e:
                logger.warning(
                    "remote_row_skipped",
                    collection=name,
                    row_id=row[0],
                    error=str(e),
                )
        return items

    async def pull(self) -> Optional[FamilySnapshot]:
        """
        Read the whole family dataset.

        Returns None unless every collection has a worksheet with a
        header row; a partial remote is never allowed to replace local data.
        """
        try:
            data = {}
            for name in COLLECTIONS:
                sheet = self._client.get_collection_sheet(name)
                items = self._read_collection(name, sheet) if sheet is not None else None
                if items is None:
                    logger.info("remote_dataset_incomplete", collection=name)
                    return None
                data[name] = items
            return FamilySnapshot(**data)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to pull family data: {e}") from e

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def push(self, snapshot: FamilySnapshot) -> bool:
        collections = {
            "transactions": snapshot.transactions,
            "people": snapshot.people,
            "cards": snapshot.cards,
            "categories": snapshot.categories,
        }
        payloads = {
            name: [COLUMNS[name]] + [
                record_to_row(item.to_record(), COLUMNS[name]) for item in items
            ]
            for name, items in collections.items()
        }
        try:
            for name, values in payloads.items():
                sheet = self._client.get_collection_sheet(name, create=True)
                sheet.update(
                    values=values,
                    range_name="A1",
                    value_input_option="RAW",
                )
                sheet.resize(rows=len(values))
            return True
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to push family data: {e}") from e
