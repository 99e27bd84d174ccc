"""
Audit Models for Family Finance

Every change to the family dataset is logged for audit purposes.
This provides:
1. Traceability of who recorded, edited or deleted what
2. Debugging information when sync goes wrong
3. Ability to reconstruct history

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Transactions
    TRANSACTION_RECORDED = "transaction_recorded"
    INSTALLMENTS_EXPANDED = "installments_expanded"
    TRANSACTION_DELETED = "transaction_deleted"
    PAYMENT_TOGGLED = "payment_toggled"
    AMOUNT_CORRECTED = "amount_corrected"
    VALIDATION_FAILED = "validation_failed"

    # Reference data
    REFERENCE_ADDED = "reference_added"
    REFERENCE_REMOVED = "reference_removed"
    REFERENCE_REMOVAL_REFUSED = "reference_removal_refused"

    # Remote sync
    SYNC_PULLED = "sync_pulled"
    SYNC_PUSHED = "sync_pushed"
    SYNC_FAILED = "sync_failed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'person', 'card')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one form submission)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_json_line(self) -> str:
        """One line of the append-only audit file."""
        return json.dumps(self.model_dump(mode="json"), ensure_ascii=False)


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_deleted(transaction_id, correlation_id)
    """

    @staticmethod
    def transaction_recorded(
        transaction_id: str,
        transaction_type: str,
        amount: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_RECORDED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"{transaction_type.capitalize()} recorded: R$ {amount}",
            details={
                "type": transaction_type,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def installments_expanded(
        installments_id: str,
        count: int,
        total: str,
        is_fixed: bool,
        correlation_id: UUID
    ) -> AuditEvent:
        kind = "fixed monthly expense" if is_fixed else "installment purchase"
        return AuditEvent(
            event_type=AuditEventType.INSTALLMENTS_EXPANDED,
            entity_type="installments",
            entity_id=installments_id,
            correlation_id=correlation_id,
            description=f"{kind.capitalize()} expanded into {count} records",
            details={
                "count": count,
                "total": total,
                "is_fixed": is_fixed,
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_deleted(
        transaction_id: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description="Transaction deleted",
            is_user_action=True,
        )

    @staticmethod
    def payment_toggled(
        transaction_id: str,
        is_paid: bool,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PAYMENT_TOGGLED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Transaction marked as {'paid' if is_paid else 'unpaid'}",
            details={"is_paid": is_paid},
            is_user_action=True,
        )

    @staticmethod
    def amount_corrected(
        transaction_id: str,
        old_amount: str,
        new_amount: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AMOUNT_CORRECTED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Amount corrected from R$ {old_amount} to R$ {new_amount}",
            details={
                "old_amount": old_amount,
                "new_amount": new_amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(
        issues: list[dict],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="intent",
            correlation_id=correlation_id,
            description=f"Movement rejected with {len(issues)} issues",
            details={"issues": issues},
            is_user_action=True,
        )

    @staticmethod
    def reference_added(
        entity_type: str,
        entity_id: str,
        name: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REFERENCE_ADDED,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"{entity_type.capitalize()} added: {name}",
            details={"name": name},
            is_user_action=True,
        )

    @staticmethod
    def reference_removed(
        entity_type: str,
        entity_id: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REFERENCE_REMOVED,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"{entity_type.capitalize()} removed",
            is_user_action=True,
        )

    @staticmethod
    def reference_removal_refused(
        entity_type: str,
        entity_id: str,
        reason: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REFERENCE_REMOVAL_REFUSED,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"Removal of {entity_type} refused",
            details={"reason": reason},
            is_user_action=True,
        )

    @staticmethod
    def sync_pulled(
        transaction_count: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYNC_PULLED,
            entity_type="family",
            correlation_id=correlation_id,
            description=f"Family data replaced from remote ({transaction_count} transactions)",
            details={"transaction_count": transaction_count},
        )

    @staticmethod
    def sync_pushed(
        transaction_count: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYNC_PUSHED,
            entity_type="family",
            correlation_id=correlation_id,
            description=f"Family data written to remote ({transaction_count} transactions)",
            details={"transaction_count": transaction_count},
        )

    @staticmethod
    def sync_failed(
        direction: str,
        error_message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYNC_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="family",
            correlation_id=correlation_id,
            description=f"Remote sync {direction} failed; local data unchanged",
            error_message=error_message,
            details={"direction": direction},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
