"""
Main Orchestrator for Family Finance

This module ties together all the components and defines the
end-to-end flows for:
1. Recording a movement (intent -> validate -> expand -> store -> sync)
2. Editing transactions (delete, toggle paid, correct amount)
3. Managing people, cards and categories
4. Synchronizing with the shared family spreadsheet

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing is stored unless validation passes
- The records of one expansion are stored as one batch
- Every change is audited
- A remote failure never touches local data; it becomes a notice
"""

from decimal import Decimal
from typing import Optional, Union
from uuid import UUID

from family_finance.audit import AuditLogger, create_correlation_id
from family_finance.config import Settings, get_settings, sync_enabled
from family_finance.installments import IdFactory, expand_intent, generate_id
from family_finance.models.finance import (
    PERSON_COLORS,
    Card,
    CardType,
    Category,
    Person,
    Transaction,
    ValidationResult,
)
from family_finance.models.intent import (
    ExpenseIntent,
    IncomeIntent,
    InvalidIntentError,
    SavingsIntent,
)
from family_finance.reports import ReportBuilder
from family_finance.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsFamilySync,
    JsonFileStore,
    JsonLinesAuditStorage,
    MinimumPeopleError,
    NotFoundError,
    RemoteSyncInterface,
    StorageError,
)
from family_finance.validation import IntentValidator

AnyIntent = Union[ExpenseIntent, IncomeIntent, SavingsIntent]


class SyncFlow:
    """
    Keeps the local store and the shared family store in step.

    Replace-on-read: pull_remote() overwrites local data with the remote
    snapshot. Write-on-change: push_changes() runs after every local
    change. Failures are reported as notices, never raised.
    """

    def __init__(
        self,
        store: JsonFileStore,
        remote: Optional[RemoteSyncInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._remote = remote
        self._audit_logger = audit_logger
        self.last_notice: Optional[str] = None
        self.has_pending_changes = False

    @property
    def enabled(self) -> bool:
        return self._remote is not None

    async def _report_failure(
        self,
        direction: str,
        error: Exception,
        correlation_id: UUID,
    ) -> None:
        self.last_notice = (
            f"Could not {direction} the family data. "
            "Your changes are saved on this device."
        )
        if self._audit_logger:
            await self._audit_logger.log_sync_failed(
                direction=direction,
                error_message=str(error),
                correlation_id=correlation_id,
            )

    async def pull_remote(self, correlation_id: Optional[UUID] = None) -> bool:
        """
        Replace local data with the remote snapshot.

        An empty remote is seeded with the local data instead, and
        unpushed local changes are written before anything is read.

        Returns:
            True if local data was replaced
        """
        if not self._remote:
            return False
        correlation_id = correlation_id or create_correlation_id()

        if self.has_pending_changes:
            await self.push_changes(correlation_id)
            return False

        try:
            snapshot = await self._remote.pull()
        except StorageError as e:
            await self._report_failure("pull", e, correlation_id)
            return False

        if snapshot is None:
            await self.push_changes(correlation_id)
            return False

        await self._store.replace_all(snapshot)
        self.last_notice = None
        if self._audit_logger:
            await self._audit_logger.log_sync_pulled(
                transaction_count=len(snapshot.transactions),
                correlation_id=correlation_id,
            )
        return True

    async def push_changes(self, correlation_id: Optional[UUID] = None) -> bool:
        """Write the local data to the remote. Returns False on failure."""
        if not self._remote:
            return False
        correlation_id = correlation_id or create_correlation_id()

        snapshot = await self._store.snapshot()
        try:
            await self._remote.push(snapshot)
        except StorageError as e:
            self.has_pending_changes = True
            await self._report_failure("push", e, correlation_id)
            return False

        self.has_pending_changes = False
        self.last_notice = None
        if self._audit_logger:
            await self._audit_logger.log_sync_pushed(
                transaction_count=len(snapshot.transactions),
                correlation_id=correlation_id,
            )
        return True


class TransactionFlow:
    """
    Orchestrates recording and editing transactions.

    Flow for a new movement:
    1. Validate the intent against people, cards and categories
    2. Expand it into records (installments / fixed months)
    3. Store the records as one batch
    4. Audit, then push to the family store
    """

    def __init__(
        self,
        store: JsonFileStore,
        validator: Optional[IntentValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        sync: Optional[SyncFlow] = None,
        id_factory: IdFactory = generate_id,
    ):
        self._store = store
        self._validator = validator or IntentValidator()
        self._audit_logger = audit_logger
        self._sync = sync
        self._id_factory = id_factory

    async def _after_change(self, correlation_id: UUID) -> None:
        if self._sync:
            await self._sync.push_changes(correlation_id)

    async def validate_intent(self, intent: AnyIntent) -> tuple[ValidationResult, str]:
        """
        Validate an intent without storing anything.

        Returns:
            (validation_result, user_message)
        """
        result = self._validator.validate(
            intent,
            people=await self._store.list_people(),
            cards=await self._store.list_cards(),
            categories=await self._store.list_categories(),
        )
        return result, self._validator.get_user_friendly_summary(result)

    async def record_movement(
        self,
        intent: AnyIntent,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[list[Transaction], ValidationResult]:
        """
        Validate, expand and store one movement.

        Returns:
            (stored_records, validation_result) - warnings may be present

        Raises:
            InvalidIntentError: If validation found errors (nothing stored)
            StorageError: If the batch could not be stored (nothing stored)
        """
        correlation_id = correlation_id or create_correlation_id()

        result, message = await self.validate_intent(intent)
        if result.has_errors:
            issues = [
                {"field": i.field, "type": i.issue_type, "message": i.message}
                for i in result.issues
                if i.severity == "error"
            ]
            if self._audit_logger:
                await self._audit_logger.log_validation_failed(
                    issues=issues,
                    correlation_id=correlation_id,
                )
            raise InvalidIntentError(message, errors=issues)

        records = expand_intent(intent, id_factory=self._id_factory)
        await self._store.add_transactions(records)

        if self._audit_logger:
            await self._audit_logger.log_transactions_recorded(
                transactions=records,
                correlation_id=correlation_id,
            )
        await self._after_change(correlation_id)

        return records, result

    async def delete_transaction(
        self,
        transaction_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """Delete one record. Installment siblings are kept."""
        correlation_id = correlation_id or create_correlation_id()

        deleted = await self._store.delete_transaction(transaction_id)
        if deleted:
            if self._audit_logger:
                await self._audit_logger.log_transaction_deleted(
                    transaction_id=transaction_id,
                    correlation_id=correlation_id,
                )
            await self._after_change(correlation_id)
        return deleted

    async def toggle_paid(
        self,
        transaction_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> Transaction:
        correlation_id = correlation_id or create_correlation_id()

        updated = await self._store.toggle_paid(transaction_id)
        if self._audit_logger:
            await self._audit_logger.log_payment_toggled(
                transaction_id=transaction_id,
                is_paid=updated.is_paid,
                correlation_id=correlation_id,
            )
        await self._after_change(correlation_id)
        return updated

    async def update_amount(
        self,
        transaction_id: str,
        amount: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> Transaction:
        """
        Manually correct the amount of one record.

        Raises:
            NotFoundError: If the transaction doesn't exist
            InvalidRecordError: If the amount is NaN or infinite (nothing
                is stored, audited or pushed)
        """
        correlation_id = correlation_id or create_correlation_id()

        current = await self._store.get_transaction(transaction_id)
        if current is None:
            raise NotFoundError(f"Transaction not found: {transaction_id}")

        updated = await self._store.update_amount(transaction_id, amount)
        if self._audit_logger:
            await self._audit_logger.log_amount_corrected(
                transaction_id=transaction_id,
                old_amount=str(current.amount),
                new_amount=str(updated.amount),
                correlation_id=correlation_id,
            )
        await self._after_change(correlation_id)
        return updated


class ReferenceFlow:
    """
    Orchestrates the people, cards and categories settings.
    """

    def __init__(
        self,
        store: JsonFileStore,
        audit_logger: Optional[AuditLogger] = None,
        sync: Optional[SyncFlow] = None,
        id_factory: IdFactory = generate_id,
    ):
        self._store = store
        self._audit_logger = audit_logger
        self._sync = sync
        self._id_factory = id_factory

    async def _added(self, entity_type: str, entity_id: str, name: str, correlation_id: UUID) -> None:
        if self._audit_logger:
            await self._audit_logger.log_reference_added(
                entity_type=entity_type,
                entity_id=entity_id,
                name=name,
                correlation_id=correlation_id,
            )
        if self._sync:
            await self._sync.push_changes(correlation_id)

    async def _removed(self, entity_type: str, entity_id: str, correlation_id: UUID) -> None:
        if self._audit_logger:
            await self._audit_logger.log_reference_removed(
                entity_type=entity_type,
                entity_id=entity_id,
                correlation_id=correlation_id,
            )
        if self._sync:
            await self._sync.push_changes(correlation_id)

    async def add_person(
        self,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> Person:
        """Add a person; the chart color follows their position."""
        correlation_id = correlation_id or create_correlation_id()

        people = await self._store.list_people()
        person = Person(
            id=self._id_factory(),
            name=name,
            color=PERSON_COLORS[len(people) % len(PERSON_COLORS)],
        )
        await self._store.add_person(person)
        await self._added("person", person.id, person.name, correlation_id)
        return person

    async def remove_person(
        self,
        person_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """
        Remove a person. Their cards and transactions are kept.

        Raises:
            MinimumPeopleError: If this is the last person
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            removed = await self._store.remove_person(person_id)
        except MinimumPeopleError as e:
            if self._audit_logger:
                await self._audit_logger.log_reference_removal_refused(
                    entity_type="person",
                    entity_id=person_id,
                    reason=str(e),
                    correlation_id=correlation_id,
                )
            raise

        if removed:
            await self._removed("person", person_id, correlation_id)
        return removed

    async def add_card(
        self,
        name: str,
        person_id: str,
        card_type: CardType = CardType.BOTH,
        last_digits: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> Card:
        """
        Register a card for a person.

        Raises:
            NotFoundError: If the person doesn't exist
        """
        correlation_id = correlation_id or create_correlation_id()

        people = await self._store.list_people()
        if not any(person.id == person_id for person in people):
            raise NotFoundError(f"Person not found: {person_id}")

        card = Card(
            id=self._id_factory(),
            name=name,
            person_id=person_id,
            type=card_type,
            last_digits=last_digits,
        )
        await self._store.add_card(card)
        await self._added("card", card.id, card.name, correlation_id)
        return card

    async def remove_card(
        self,
        card_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        correlation_id = correlation_id or create_correlation_id()

        removed = await self._store.remove_card(card_id)
        if removed:
            await self._removed("card", card_id, correlation_id)
        return removed

    async def add_category(
        self,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> Category:
        correlation_id = correlation_id or create_correlation_id()

        category = Category(id=self._id_factory(), name=name)
        await self._store.add_category(category)
        await self._added("category", category.id, category.name, correlation_id)
        return category

    async def remove_category(
        self,
        category_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        correlation_id = correlation_id or create_correlation_id()

        removed = await self._store.remove_category(category_id)
        if removed:
            await self._removed("category", category_id, correlation_id)
        return removed


def create_app_components(
    use_sync: bool = True,
    settings: Optional[Settings] = None,
) -> tuple[TransactionFlow, ReferenceFlow, SyncFlow, ReportBuilder]:
    """
    Factory function to create all application components.

    Args:
        use_sync: Whether to mirror data to the family spreadsheet.
                  Ignored unless sync is enabled in settings.
        settings: Settings to use (defaults to the cached settings)

    Returns:
        (transaction_flow, reference_flow, sync_flow, report_builder)
    """
    settings = settings or get_settings()
    storage_settings = settings.storage

    store = JsonFileStore(data_dir=storage_settings.data_dir)
    audit_storage = JsonLinesAuditStorage(
        storage_settings.data_dir / storage_settings.audit_file_name
    )
    audit_logger = AuditLogger(audit_storage)

    remote = None
    if use_sync and sync_enabled(settings):
        remote = GoogleSheetsFamilySync(GoogleSheetsClient(settings.google_sheets))

    sync = SyncFlow(store, remote=remote, audit_logger=audit_logger)
    validator = IntentValidator(settings.app)

    transaction_flow = TransactionFlow(
        store,
        validator=validator,
        audit_logger=audit_logger,
        sync=sync,
    )
    reference_flow = ReferenceFlow(
        store,
        audit_logger=audit_logger,
        sync=sync,
    )
    report_builder = ReportBuilder(store, store)

    return transaction_flow, reference_flow, sync, report_builder
