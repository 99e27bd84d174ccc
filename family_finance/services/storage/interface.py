"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the family data in local JSON files today
2. Use a temporary directory in tests
3. Mirror everything to the shared family spreadsheet
4. Keep business logic decoupled from storage implementation

The interface is intentionally simple - we're not building a full ORM.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional
from uuid import UUID

from family_finance.models.audit import AuditEvent
from family_finance.models.finance import (
    Card,
    Category,
    FamilySnapshot,
    Person,
    Transaction,
    TransactionType,
)


class TransactionStorageInterface(ABC):
    """
    Abstract interface for transaction storage.

    Records keep insertion order; display ordering is the caller's concern.
    """

    @abstractmethod
    async def add_transactions(self, transactions: list[Transaction]) -> int:
        """
        Append a batch of transactions.

        The batch is stored entirely or not at all, so the records of one
        installment expansion are never split.

        Returns:
            Number of records stored

        Raises:
            DuplicateError: If any id already exists (nothing is stored)
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        """Retrieve a transaction by id, None if absent."""
        pass

    @abstractmethod
    async def list_transactions(
        self,
        month: Optional[str] = None,
        person_id: Optional[str] = None,
        transaction_type: Optional[TransactionType] = None,
    ) -> list[Transaction]:
        """
        List transactions with optional filters.

        Args:
            month: 'YYYY-MM' bucket
            person_id: Responsible person
            transaction_type: INCOME, EXPENSE or SAVINGS

        Returns:
            Matching transactions in insertion order
        """
        pass

    @abstractmethod
    async def delete_transaction(self, transaction_id: str) -> bool:
        """
        Delete a single transaction.

        Installment siblings are left untouched.

        Returns:
            True if a record was removed
        """
        pass

    @abstractmethod
    async def toggle_paid(self, transaction_id: str) -> Transaction:
        """
        Flip the is_paid flag.

        Raises:
            NotFoundError: If the transaction doesn't exist
        """
        pass

    @abstractmethod
    async def update_amount(self, transaction_id: str, amount: Decimal) -> Transaction:
        """
        Overwrite the amount (manual correction).

        Raises:
            NotFoundError: If the transaction doesn't exist
            InvalidRecordError: If the amount is not a finite number
        """
        pass


class ReferenceStorageInterface(ABC):
    """
    Abstract interface for people, cards and categories.

    Simple id-keyed collections: append, list, remove.
    """

    @abstractmethod
    async def list_people(self) -> list[Person]:
        pass

    @abstractmethod
    async def add_person(self, person: Person) -> Person:
        pass

    @abstractmethod
    async def remove_person(self, person_id: str) -> bool:
        """
        Remove a person. Cards owned by them are kept.

        Raises:
            MinimumPeopleError: If this is the last person left
        """
        pass

    @abstractmethod
    async def list_cards(self, person_id: Optional[str] = None) -> list[Card]:
        pass

    @abstractmethod
    async def add_card(self, card: Card) -> Card:
        pass

    @abstractmethod
    async def remove_card(self, card_id: str) -> bool:
        pass

    @abstractmethod
    async def list_categories(self) -> list[Category]:
        pass

    @abstractmethod
    async def add_category(self, category: Category) -> Category:
        pass

    @abstractmethod
    async def remove_category(self, category_id: str) -> bool:
        pass


class SnapshotStorageInterface(ABC):
    """Whole-dataset access, used by remote synchronization."""

    @abstractmethod
    async def snapshot(self) -> FamilySnapshot:
        pass

    @abstractmethod
    async def replace_all(self, snapshot: FamilySnapshot) -> None:
        pass


class RemoteSyncInterface(ABC):
    """
    Abstract interface for the shared family store.

    Replace-on-read, write-on-change. The local data never depends on
    the remote being reachable.
    """

    @abstractmethod
    async def pull(self) -> Optional[FamilySnapshot]:
        """
        Read the family dataset.

        Returns:
            The remote snapshot, or None if the remote does not hold a
            complete dataset (nothing pushed yet, or an interrupted first push)
        """
        pass

    @abstractmethod
    async def push(self, snapshot: FamilySnapshot) -> bool:
        """Overwrite the remote dataset with the given snapshot."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """Get all events of one user action, in chronological order."""
        pass

    @abstractmethod
    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        """Get all events for a specific entity, in chronological order."""
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """Get the most recent audit events (newest first)."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass


class MinimumPeopleError(StorageError):
    """At least one person must always remain."""
    pass


class InvalidRecordError(StorageError):
    """A change would store a record that fails model validation."""
    pass
