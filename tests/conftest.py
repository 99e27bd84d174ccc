"""
Shared fixtures.

No test talks to Google: the remote store is replaced by FakeRemote or by
in-memory worksheets.
"""

import itertools
from typing import Optional

import pytest

from family_finance.config import AppSettings
from family_finance.models.finance import (
    Card,
    CardType,
    Category,
    FamilySnapshot,
    Person,
)
from family_finance.services.storage import (
    JsonFileStore,
    JsonLinesAuditStorage,
    RemoteSyncInterface,
    StorageError,
)


class FakeRemote(RemoteSyncInterface):
    """In-memory stand-in for the family spreadsheet."""

    def __init__(self, snapshot: Optional[FamilySnapshot] = None, fail: bool = False):
        self.snapshot = snapshot
        self.fail = fail
        self.pushes: list[FamilySnapshot] = []

    async def pull(self) -> Optional[FamilySnapshot]:
        if self.fail:
            raise StorageError("Remote unavailable")
        return self.snapshot

    async def push(self, snapshot: FamilySnapshot) -> bool:
        if self.fail:
            raise StorageError("Remote unavailable")
        self.pushes.append(snapshot)
        self.snapshot = snapshot
        return True


@pytest.fixture
def id_factory():
    """Deterministic ids: id-1, id-2, ..."""
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def app_settings():
    return AppSettings(max_transaction_amount=100000.0, future_date_tolerance_days=366)


@pytest.fixture
def store(tmp_path):
    return JsonFileStore(data_dir=tmp_path / "data")


@pytest.fixture
def audit_storage(tmp_path):
    return JsonLinesAuditStorage(tmp_path / "data" / "audit.jsonl")


@pytest.fixture
def people():
    return [
        Person(id="1", name="Eu", color="#3b82f6"),
        Person(id="2", name="Cônjuge", color="#ec4899"),
    ]


@pytest.fixture
def cards():
    return [
        Card(id="c1", name="Nubank", person_id="1", type=CardType.CREDIT, last_digits="1234"),
        Card(id="c2", name="Itaú", person_id="1", type=CardType.BOTH),
        Card(id="c3", name="Inter", person_id="2", type=CardType.DEBIT),
    ]


@pytest.fixture
def categories():
    return [
        Category(id="1", name="Alimentação"),
        Category(id="2", name="Moradia"),
        Category(id="3", name="Salário"),
        Category(id="4", name="Outros"),
    ]


@pytest.fixture
def make_remote():
    """Factory for FakeRemote instances."""
    return FakeRemote
