"""
Local JSON Storage Implementation

DESIGN DECISION: The family data lives in plain JSON files because:
1. The dataset is small (one household)
2. Files are human-readable and trivially backed up
3. The whole dataset is replaced at once when pulling from the family
   spreadsheet, which maps naturally onto one document per collection

Collections are rewritten atomically (temp file + os.replace), so a
crash mid-write never leaves a half-written collection behind. A write
that touches several collections stages every temp file before the first
one replaces its target.
"""

import json
import os
from decimal import Decimal
from pathlib import Path
from typing import Optional
from uuid import UUID

import structlog
from pydantic import ValidationError

from family_finance.config import get_settings
from family_finance.models.audit import AuditEvent
from family_finance.models.finance import (
    DEFAULT_CATEGORIES,
    PERSON_COLORS,
    Card,
    Category,
    FamilySnapshot,
    FinanceModel,
    Person,
    Transaction,
    TransactionType,
)
from family_finance.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    InvalidRecordError,
    MinimumPeopleError,
    NotFoundError,
    ReferenceStorageInterface,
    SnapshotStorageInterface,
    StorageError,
    TransactionStorageInterface,
)
from family_finance.utils.money import round_currency

logger = structlog.get_logger(__name__)

COLLECTIONS: dict[str, type[FinanceModel]] = {
    "transactions": Transaction,
    "people": Person,
    "cards": Card,
    "categories": Category,
}


def initial_people() -> list[Person]:
    return [
        Person(id="1", name="Eu", color=PERSON_COLORS[0]),
        Person(id="2", name="Cônjuge", color=PERSON_COLORS[5]),
    ]


def initial_categories() -> list[Category]:
    return [
        Category(id=str(index), name=name)
        for index, name in enumerate(DEFAULT_CATEGORIES, start=1)
    ]


def _write_json_atomic(files: dict[Path, list]) -> None:
    """Write one or more JSON files; no target is touched unless every temp file was written."""
    staged = []
    try:
        for path, payload in files.items():
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp = path.with_suffix(".tmp")
            staged.append(tmp)
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False, indent=2)
        for path in files:
            os.replace(path.with_suffix(".tmp"), path)
    except OSError as e:
        for tmp in staged:
            tmp.unlink(missing_ok=True)
        names = ", ".join(path.name for path in files)
        raise StorageError(f"Failed to write {names}: {e}")


class JsonFileStore(
    TransactionStorageInterface,
    ReferenceStorageInterface,
    SnapshotStorageInterface,
):
    """
    One JSON array per collection under a data directory.

    Collections are loaded lazily on first access and kept in memory;
    every mutation rewrites the affected collection file.
    """

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        seed_defaults: bool = True,
    ):
        self._data_dir = Path(data_dir or get_settings().storage.data_dir)
        self._seed_defaults = seed_defaults
        self._collections: Optional[dict[str, list]] = None

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _path(self, name: str) -> Path:
        return self._data_dir / f"{name}.json"

    def _read_collection(self, name: str) -> Optional[list]:
        path = self._path(name)
        if not path.exists():
            return None
        model = COLLECTIONS[name]
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            return [model.from_record(item) for item in raw]
        except (OSError, json.JSONDecodeError, ValidationError, TypeError) as e:
            raise StorageError(f"Failed to read {path}: {e}")

    def _write_collection(self, *names: str) -> None:
        data = self._data()
        _write_json_atomic({
            self._path(name): [item.to_record() for item in data[name]]
            for name in names
        })

    def _data(self) -> dict[str, list]:
        if self._collections is None:
            loaded = {name: self._read_collection(name) for name in COLLECTIONS}
            seeded = []
            if self._seed_defaults:
                if loaded["people"] is None:
                    loaded["people"] = initial_people()
                    seeded.append("people")
                if loaded["categories"] is None:
                    loaded["categories"] = initial_categories()
                    seeded.append("categories")
            self._collections = {
                name: items if items is not None else []
                for name, items in loaded.items()
            }
            if seeded:
                self._write_collection(*seeded)
            logger.debug(
                "local_store_loaded",
                data_dir=str(self._data_dir),
                seeded=seeded,
                transactions=len(self._collections["transactions"]),
            )
        return self._collections

    def _replace_item(self, name: str, index: int, item) -> None:
        items = self._data()[name]
        previous = items[index]
        items[index] = item
        try:
            self._write_collection(name)
        except StorageError:
            items[index] = previous
            raise

    def _find_index(self, name: str, item_id: str) -> Optional[int]:
        for index, item in enumerate(self._data()[name]):
            if item.id == item_id:
                return index
        return None

    def _append(self, name: str, new_items: list) -> None:
        items = self._data()[name]
        existing = {item.id for item in items}
        batch_ids = [item.id for item in new_items]
        duplicates = existing.intersection(batch_ids)
        if duplicates or len(set(batch_ids)) != len(batch_ids):
            raise DuplicateError(
                f"Duplicate {name} id(s): {sorted(duplicates) or batch_ids}"
            )
        items.extend(new_items)
        try:
            self._write_collection(name)
        except StorageError:
            del items[len(items) - len(new_items):]
            raise

    def _remove(self, name: str, item_id: str) -> bool:
        index = self._find_index(name, item_id)
        if index is None:
            return False
        items = self._data()[name]
        removed = items.pop(index)
        try:
            self._write_collection(name)
        except StorageError:
            items.insert(index, removed)
            raise
        return True

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    async def add_transactions(self, transactions: list[Transaction]) -> int:
        if not transactions:
            return 0
        self._append("transactions", list(transactions))
        return len(transactions)

    async def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        index = self._find_index("transactions", transaction_id)
        if index is None:
            return None
        return self._data()["transactions"][index]

    async def list_transactions(
        self,
        month: Optional[str] = None,
        person_id: Optional[str] = None,
        transaction_type: Optional[TransactionType] = None,
    ) -> list[Transaction]:
        results = []
        for transaction in self._data()["transactions"]:
            if month and transaction.month != month:
                continue
            if person_id and transaction.person_id != person_id:
                continue
            if transaction_type and transaction.type != transaction_type:
                continue
            results.append(transaction)
        return results

    async def delete_transaction(self, transaction_id: str) -> bool:
        return self._remove("transactions", transaction_id)

    async def toggle_paid(self, transaction_id: str) -> Transaction:
        index = self._find_index("transactions", transaction_id)
        if index is None:
            raise NotFoundError(f"Transaction not found: {transaction_id}")
        current = self._data()["transactions"][index]
        updated = current.model_copy(update={"is_paid": not current.is_paid})
        self._replace_item("transactions", index, updated)
        return updated

    async def update_amount(self, transaction_id: str, amount: Decimal) -> Transaction:
        index = self._find_index("transactions", transaction_id)
        if index is None:
            raise NotFoundError(f"Transaction not found: {transaction_id}")
        current = self._data()["transactions"][index]
        try:
            rounded = round_currency(amount)
        except (ArithmeticError, ValueError, TypeError) as e:
            raise InvalidRecordError(f"Invalid amount {amount!r}: {e}")
        if not rounded.is_finite():
            raise InvalidRecordError(f"Invalid amount {amount!r}: not a finite number")
        try:
            updated = Transaction.model_validate(
                {**current.model_dump(), "amount": rounded}
            )
        except ValidationError as e:
            raise InvalidRecordError(f"Invalid amount {amount!r}: {e}")
        self._replace_item("transactions", index, updated)
        return updated

    # -------------------------------------------------------------------------
    # Reference data
    # -------------------------------------------------------------------------

    async def list_people(self) -> list[Person]:
        return list(self._data()["people"])

    async def add_person(self, person: Person) -> Person:
        self._append("people", [person])
        return person

    async def remove_person(self, person_id: str) -> bool:
        if self._find_index("people", person_id) is None:
            return False
        if len(self._data()["people"]) <= 1:
            raise MinimumPeopleError("At least one person must remain")
        return self._remove("people", person_id)

    async def list_cards(self, person_id: Optional[str] = None) -> list[Card]:
        return [
            card for card in self._data()["cards"]
            if person_id is None or card.person_id == person_id
        ]

    async def add_card(self, card: Card) -> Card:
        self._append("cards", [card])
        return card

    async def remove_card(self, card_id: str) -> bool:
        return self._remove("cards", card_id)

    async def list_categories(self) -> list[Category]:
        return list(self._data()["categories"])

    async def add_category(self, category: Category) -> Category:
        self._append("categories", [category])
        return category

    async def remove_category(self, category_id: str) -> bool:
        return self._remove("categories", category_id)

    # -------------------------------------------------------------------------
    # Whole dataset
    # -------------------------------------------------------------------------

    async def snapshot(self) -> FamilySnapshot:
        data = self._data()
        return FamilySnapshot(
            transactions=list(data["transactions"]),
            people=list(data["people"]),
            cards=list(data["cards"]),
            categories=list(data["categories"]),
        )

    async def replace_all(self, snapshot: FamilySnapshot) -> None:
        """Replace every collection. An empty people list keeps the local one."""
        data = self._data()
        previous = {name: list(items) for name, items in data.items()}
        data["transactions"] = list(snapshot.transactions)
        data["cards"] = list(snapshot.cards)
        data["categories"] = list(snapshot.categories)
        if snapshot.people:
            data["people"] = list(snapshot.people)
        try:
            self._write_collection(*COLLECTIONS)
        except StorageError:
            self._collections = previous
            raise


class JsonLinesAuditStorage(AuditStorageInterface):
    """
    Append-only audit log, one JSON event per line.

    Audit events are append-only.
    """

    def __init__(self, path: Optional[Path] = None):
        if path is None:
            storage = get_settings().storage
            path = storage.data_dir / storage.audit_file_name
        self._path = Path(path)

    def _read_events(self) -> list[AuditEvent]:
        if not self._path.exists():
            return []
        events = []
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        events.append(AuditEvent.model_validate_json(line))
                    except ValidationError:
                        continue  # Skip malformed lines
        except OSError as e:
            raise StorageError(f"Failed to read audit log: {e}")
        return events

    async def append_event(self, event: AuditEvent) -> bool:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._path, "a", encoding="utf-8") as f:
                f.write(event.to_json_line() + "\n")
            return True
        except OSError as e:
            # Audit logging should not break the main flow
            logger.warning("audit_write_failed", error=str(e), event_id=str(event.event_id))
            return False

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        events = [e for e in self._read_events() if e.correlation_id == correlation_id]
        events.sort(key=lambda e: e.timestamp)
        return events

    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        events = [
            e for e in self._read_events()
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]
        events.sort(key=lambda e: e.timestamp)
        return events

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        events = self._read_events()
        # Newest first; file order breaks timestamp ties
        indexed = sorted(enumerate(events), key=lambda p: (p[1].timestamp, p[0]), reverse=True)
        return [event for _, event in indexed[:limit]]
