"""
Audit Logger

DESIGN DECISION: Every change to the family dataset is logged.
This provides:
1. Complete traceability
2. Debugging capability when sync misbehaves
3. A history the family can look back on

The audit logger:
- Is async to match the storage interfaces
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from family_finance.models.audit import AuditEvent, AuditEventBuilder
from family_finance.models.finance import Transaction
from family_finance.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. The audit store (for persistence and user visibility)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger()

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_transactions_recorded(
        self,
        transactions: list[Transaction],
        correlation_id: UUID,
    ) -> None:
        """Log a recorded movement: one event, or one per expansion."""
        if not transactions:
            return
        first = transactions[0]
        if len(transactions) == 1:
            event = AuditEventBuilder.transaction_recorded(
                transaction_id=first.id,
                transaction_type=first.type.value.lower(),
                amount=str(first.amount),
                correlation_id=correlation_id,
            )
        else:
            total = sum(t.amount for t in transactions)
            event = AuditEventBuilder.installments_expanded(
                installments_id=first.installments_id or first.id,
                count=len(transactions),
                total=str(total),
                is_fixed=first.is_fixed,
                correlation_id=correlation_id,
            )
        await self.log(event)

    async def log_transaction_deleted(
        self,
        transaction_id: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.transaction_deleted(
            transaction_id=transaction_id,
            correlation_id=correlation_id,
        ))

    async def log_payment_toggled(
        self,
        transaction_id: str,
        is_paid: bool,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.payment_toggled(
            transaction_id=transaction_id,
            is_paid=is_paid,
            correlation_id=correlation_id,
        ))

    async def log_amount_corrected(
        self,
        transaction_id: str,
        old_amount: str,
        new_amount: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.amount_corrected(
            transaction_id=transaction_id,
            old_amount=old_amount,
            new_amount=new_amount,
            correlation_id=correlation_id,
        ))

    async def log_validation_failed(
        self,
        issues: list[dict],
        correlation_id: UUID,
    ) -> None:
        """Log validation failure."""
        await self.log(AuditEventBuilder.validation_failed(
            issues=issues,
            correlation_id=correlation_id,
        ))

    async def log_reference_added(
        self,
        entity_type: str,
        entity_id: str,
        name: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.reference_added(
            entity_type=entity_type,
            entity_id=entity_id,
            name=name,
            correlation_id=correlation_id,
        ))

    async def log_reference_removed(
        self,
        entity_type: str,
        entity_id: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.reference_removed(
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
        ))

    async def log_reference_removal_refused(
        self,
        entity_type: str,
        entity_id: str,
        reason: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.reference_removal_refused(
            entity_type=entity_type,
            entity_id=entity_id,
            reason=reason,
            correlation_id=correlation_id,
        ))

    async def log_sync_pulled(
        self,
        transaction_count: int,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.sync_pulled(
            transaction_count=transaction_count,
            correlation_id=correlation_id,
        ))

    async def log_sync_pushed(
        self,
        transaction_count: int,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.sync_pushed(
            transaction_count=transaction_count,
            correlation_id=correlation_id,
        ))

    async def log_sync_failed(
        self,
        direction: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        """Log a remote sync failure. Local data is unaffected."""
        await self.log(AuditEventBuilder.sync_failed(
            direction=direction,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        await self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., a form submission).
    Pass it through all subsequent operations.
    """
    return uuid4()
