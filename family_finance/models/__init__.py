"""
Data Models Package

This package contains all Pydantic models used in the Family Finance system.
All data flowing through the system must conform to these schemas.
"""

from family_finance.models.finance import (
    DEFAULT_CATEGORIES,
    PAYMENT_METHOD_LABELS,
    PERSON_COLORS,
    SAVINGS_CATEGORY,
    UNKNOWN_PERSON_LABEL,
    AmountMode,
    BreakdownEntry,
    Card,
    CardType,
    Category,
    FamilySnapshot,
    MonthlyReport,
    PaymentMethod,
    Person,
    SummaryData,
    Transaction,
    TransactionType,
    ValidationIssue,
    ValidationResult,
)
from family_finance.models.intent import (
    ExpenseIntent,
    IncomeIntent,
    InvalidIntentError,
    SavingsIntent,
    TransactionIntent,
    build_intent,
)
from family_finance.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Constants
    "DEFAULT_CATEGORIES",
    "PAYMENT_METHOD_LABELS",
    "PERSON_COLORS",
    "SAVINGS_CATEGORY",
    "UNKNOWN_PERSON_LABEL",
    # Finance models
    "AmountMode",
    "BreakdownEntry",
    "Card",
    "CardType",
    "Category",
    "FamilySnapshot",
    "MonthlyReport",
    "PaymentMethod",
    "Person",
    "SummaryData",
    "Transaction",
    "TransactionType",
    "ValidationIssue",
    "ValidationResult",
    # Intents
    "ExpenseIntent",
    "IncomeIntent",
    "InvalidIntentError",
    "SavingsIntent",
    "TransactionIntent",
    "build_intent",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
