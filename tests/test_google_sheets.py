"""
Tests for the Google Sheets family sync.

The spreadsheet is a MagicMock holding in-memory worksheets; nothing
reaches Google.
"""

from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

import gspread
import pytest
from tenacity import stop_after_attempt

from family_finance.config import GoogleSheetsSettings
from family_finance.models.finance import (
    FamilySnapshot,
    PaymentMethod,
    Person,
    Transaction,
    TransactionType,
)
from family_finance.orchestrator import SyncFlow
from family_finance.services.storage import (
    ConnectionError,
    GoogleSheetsClient,
    GoogleSheetsFamilySync,
    StorageError,
)
from family_finance.services.storage.google_sheets import (
    COLUMNS,
    record_to_row,
    row_to_record,
)


class FakeWorksheet:
    """Keeps cell values in memory; update() can be made to fail."""

    def __init__(self, values=None):
        self.values = [list(row) for row in values or []]
        self.fail = False
        self.resized_to = None

    def get_all_values(self):
        return [list(row) for row in self.values]

    def update(self, values, range_name, value_input_option):
        assert range_name == "A1"
        if self.fail:
            raise gspread.exceptions.GSpreadException("quota")
        for index, row in enumerate(values):
            if index < len(self.values):
                self.values[index] = list(row)
            else:
                self.values.append(list(row))

    def resize(self, rows):
        self.resized_to = rows
        del self.values[rows:]


class SingleAttemptSync(GoogleSheetsFamilySync):
    """Pushes once, without the retry waits."""

    async def push(self, snapshot):
        return await GoogleSheetsFamilySync.push.retry_with(
            stop=stop_after_attempt(1),
        )(self, snapshot)


@pytest.fixture
def sheets_settings(tmp_path):
    credentials = tmp_path / "credentials.json"
    credentials.write_text("{}", encoding="utf-8")
    return GoogleSheetsSettings(
        enabled=True,
        credentials_path=str(credentials),
        spreadsheet_id="sheet-123",
        family_secret="silva-2024",
    )


@pytest.fixture
def spreadsheet():
    """A spreadsheet whose worksheets are created on demand."""
    worksheets = {}
    mock = MagicMock()

    def worksheet(title):
        if title not in worksheets:
            raise gspread.WorksheetNotFound(title)
        return worksheets[title]

    def add_worksheet(title, rows, cols):
        sheet = FakeWorksheet()
        worksheets[title] = sheet
        return sheet

    mock.worksheet.side_effect = worksheet
    mock.add_worksheet.side_effect = add_worksheet
    mock.worksheets_by_title = worksheets
    return mock


@pytest.fixture
def client(sheets_settings, spreadsheet):
    client = GoogleSheetsClient(sheets_settings)
    client._spreadsheet = spreadsheet
    return client


def installment(id: str, number: int) -> Transaction:
    return Transaction(
        id=id,
        transaction_date=date(2024, number, 15),
        description=f"TV ({number}/2)",
        amount=Decimal("600.00"),
        type=TransactionType.EXPENSE,
        category="Compras Gerais",
        payment_method=PaymentMethod.CREDIT,
        card_id="c1",
        is_paid=number == 1,
        person_id="1",
        installments_id="g1",
        installment_number=number,
        total_installments=2,
    )


class TestRowConversion:
    """Tests for record <-> row helpers."""

    def test_record_to_row_follows_columns(self):
        row = record_to_row(installment("t1", 1).to_record(), COLUMNS["transactions"])

        assert row[:4] == ["t1", "2024-01-15", "TV (1/2)", "600.00"]
        assert row[COLUMNS["transactions"].index("isPaid")] == "TRUE"
        assert row[COLUMNS["transactions"].index("isFixed")] == "FALSE"

    def test_missing_optional_values_become_empty_cells(self):
        row = record_to_row({"id": "p1", "name": "Eu"}, COLUMNS["people"])
        assert row == ["p1", "Eu", ""]

    def test_row_to_record_matches_by_header(self):
        """Test reordered columns and blank cells."""
        record = row_to_record(["name", "id", "color"], ["Eu", "p1", ""])
        assert record == {"name": "Eu", "id": "p1"}


class TestGoogleSheetsClient:
    """Tests for worksheet lookup."""

    def test_worksheet_title_is_partitioned_by_secret(self, client):
        assert client.worksheet_title("transactions") == "silva-2024.transactions"

    def test_missing_sheet_returns_none(self, client):
        assert client.get_collection_sheet("people") is None

    def test_create_missing_sheet(self, client, spreadsheet):
        sheet = client.get_collection_sheet("people", create=True)

        assert sheet is spreadsheet.worksheets_by_title["silva-2024.people"]
        spreadsheet.add_worksheet.assert_called_once_with(
            title="silva-2024.people", rows=1000, cols=3,
        )

    def test_missing_credentials_file(self, sheets_settings):
        sheets_settings.credentials_path = "/nonexistent/credentials.json"
        client = GoogleSheetsClient(sheets_settings)

        with pytest.raises(ConnectionError):
            GoogleSheetsClient.connect.retry_with(stop=stop_after_attempt(1))(client)


class TestGoogleSheetsFamilySync:
    """Tests for replace-on-read / write-on-change."""

    @pytest.mark.asyncio
    async def test_pull_without_any_sheet_returns_none(self, client):
        assert await GoogleSheetsFamilySync(client).pull() is None

    @pytest.mark.asyncio
    async def test_push_then_pull(self, client, spreadsheet):
        """Test pushed rows read back into the same snapshot."""
        sync = GoogleSheetsFamilySync(client)
        snapshot = FamilySnapshot(
            transactions=[installment("t1", 1), installment("t2", 2)],
            people=[Person(id="1", name="Eu", color="#3b82f6")],
        )

        assert await sync.push(snapshot) is True

        sheet = spreadsheet.worksheets_by_title["silva-2024.transactions"]
        assert sheet.values[0] == COLUMNS["transactions"]
        assert len(sheet.values) == 3
        assert sheet.resized_to == 3

        pulled = await sync.pull()
        assert pulled.transactions == snapshot.transactions
        assert pulled.people == snapshot.people
        assert pulled.cards == []

    @pytest.mark.asyncio
    async def test_shorter_push_drops_old_rows(self, client, spreadsheet):
        sync = GoogleSheetsFamilySync(client)
        await sync.push(FamilySnapshot(
            transactions=[installment("t1", 1), installment("t2", 2)],
        ))

        await sync.push(FamilySnapshot(transactions=[installment("t2", 2)]))

        pulled = await sync.pull()
        assert [t.id for t in pulled.transactions] == ["t2"]

    @pytest.mark.asyncio
    async def test_invalid_rows_are_skipped(self, client, spreadsheet):
        for name in COLUMNS:
            client.get_collection_sheet(name, create=True).values = [COLUMNS[name]]
        spreadsheet.worksheets_by_title["silva-2024.people"].values = [
            ["id", "name", "color"],
            ["1", "Eu", "#3b82f6"],
            ["2", "Cônjuge", "not-a-color"],
            ["", "", ""],
        ]

        pulled = await GoogleSheetsFamilySync(client).pull()

        assert [p.id for p in pulled.people] == ["1"]
        assert pulled.transactions == []

    @pytest.mark.asyncio
    async def test_headerless_sheet_is_not_remote_data(self, client, spreadsheet):
        """Test a blank worksheet never reads as an empty collection."""
        sync = GoogleSheetsFamilySync(client)
        await sync.push(FamilySnapshot(transactions=[installment("t1", 1)]))
        spreadsheet.worksheets_by_title["silva-2024.transactions"].values = []

        assert await sync.pull() is None

    @pytest.mark.asyncio
    async def test_failed_push_keeps_previous_rows(self, client, spreadsheet):
        sync = SingleAttemptSync(client)
        await sync.push(FamilySnapshot(transactions=[installment("t1", 1)]))
        spreadsheet.worksheets_by_title["silva-2024.transactions"].fail = True

        with pytest.raises(StorageError):
            await sync.push(FamilySnapshot())

        pulled = await sync.pull()
        assert [t.id for t in pulled.transactions] == ["t1"]

    @pytest.mark.asyncio
    async def test_failed_push_then_pull_keeps_local_data(self, client, spreadsheet, store):
        """Test a quota error on push cannot wipe the local store on the next pull."""
        sync = SyncFlow(store, remote=SingleAttemptSync(client))
        await sync.push_changes()
        await store.add_transactions([installment("t1", 1)])
        spreadsheet.worksheets_by_title["silva-2024.transactions"].fail = True

        assert await sync.push_changes() is False
        assert sync.has_pending_changes is True
        assert await sync.pull_remote() is False

        assert [t.id for t in await store.list_transactions()] == ["t1"]
        assert sync.last_notice is not None

    @pytest.mark.asyncio
    async def test_pull_failure_is_a_storage_error(self):
        client = MagicMock()
        client.get_collection_sheet.side_effect = ConnectionError("offline")

        with pytest.raises(StorageError):
            await GoogleSheetsFamilySync(client).pull()

    @pytest.mark.asyncio
    async def test_transport_errors_become_storage_errors(self):
        """Test network and auth errors from the Google libraries are wrapped."""
        client = MagicMock()
        client.get_collection_sheet.side_effect = TimeoutError("offline")

        with pytest.raises(StorageError):
            await GoogleSheetsFamilySync(client).pull()

    @pytest.mark.asyncio
    async def test_transport_error_on_pull_is_only_a_notice(self, store):
        client = MagicMock()
        client.get_collection_sheet.side_effect = OSError("Network is unreachable")
        sync = SyncFlow(store, remote=GoogleSheetsFamilySync(client))

        assert await sync.pull_remote() is False

        assert sync.last_notice is not None
        assert len(await store.list_people()) == 2
