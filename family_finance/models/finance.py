"""
Core Data Models for Family Finance

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Be serializable for local storage and the shared family spreadsheet

DESIGN DECISION: Attributes are snake_case in Python, but every model
serializes with the camelCase names the family dataset has always used
(paymentMethod, isPaid, installmentsId...). Use to_record() / from_record().
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)
from pydantic.alias_generators import to_camel


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a movement."""
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    SAVINGS = "SAVINGS"


class PaymentMethod(str, Enum):
    """
    How an expense was paid.

    Only DEBIT and CREDIT link to a registered card.
    """
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"
    PIX = "PIX"
    CASH = "CASH"
    BOLETO = "BOLETO"
    TRANSFER = "TRANSFER"
    CARD = "CARD"

    @property
    def uses_card(self) -> bool:
        return self in (PaymentMethod.DEBIT, PaymentMethod.CREDIT)


class CardType(str, Enum):
    """Which payment methods a card can be used for."""
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"
    BOTH = "BOTH"


class AmountMode(str, Enum):
    """
    How the amount of a multi-installment expense was entered.

    TOTAL: the purchase price, split across installments.
    PER_INSTALLMENT: the value of each installment.
    """
    PER_INSTALLMENT = "PER_INSTALLMENT"
    TOTAL = "TOTAL"


SAVINGS_CATEGORY = "Savings"

UNKNOWN_PERSON_LABEL = "Outros"

DEFAULT_CATEGORIES = [
    "Alimentação",
    "Moradia",
    "Transporte",
    "Lazer",
    "Saúde",
    "Educação",
    "Assinaturas",
    "Compras Gerais",
    "Salário",
    "Freelance",
    "Investimento",
    "Outros",
]

PERSON_COLORS = [
    "#3b82f6", "#10b981", "#f59e0b", "#ef4444",
    "#8b5cf6", "#ec4899", "#06b6d4",
]

PAYMENT_METHOD_LABELS = {
    PaymentMethod.DEBIT: "Débito",
    PaymentMethod.CREDIT: "Crédito",
    PaymentMethod.PIX: "PIX",
    PaymentMethod.CASH: "Dinheiro",
    PaymentMethod.BOLETO: "Boleto",
    PaymentMethod.TRANSFER: "Transferência",
    PaymentMethod.CARD: "Cartão",
}


class FinanceModel(BaseModel):
    """Shared config: strip strings, camelCase wire names."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_record(self) -> dict[str, Any]:
        """Serialize to the camelCase JSON-safe record, omitting absent fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def from_record(cls, record: dict[str, Any]):
        return cls.model_validate(record)


# =============================================================================
# CORE TRANSACTION MODEL
# =============================================================================

class Transaction(FinanceModel):
    """
    The unit persisted and displayed.

    Records are created by the installment expander and afterwards only
    mutated in two ways: toggling is_paid and overwriting amount.
    """

    id: str = Field(
        ...,
        min_length=1,
        description="Unique identifier, one per record (including each installment)"
    )
    transaction_date: date = Field(
        ...,
        alias="date",
        description="Calendar date, serialized as YYYY-MM-DD"
    )
    description: str = Field(
        default="",
        max_length=200,
    )
    amount: Decimal = Field(
        ...,
        decimal_places=2,
        description="Signed amount in BRL, two decimal places"
    )
    type: TransactionType
    category: str = Field(
        ...,
        max_length=60,
    )
    payment_method: PaymentMethod
    card_id: Optional[str] = Field(
        default=None,
        description="Registered card, only for DEBIT/CREDIT"
    )
    is_paid: bool = False
    person_id: str = Field(
        ...,
        min_length=1,
        description="Responsible household member"
    )

    # Installment metadata
    installments_id: Optional[str] = Field(
        default=None,
        description="Shared by every record of one multi-installment or fixed intent"
    )
    installment_number: Optional[int] = Field(default=None, ge=1)
    total_installments: Optional[int] = Field(default=None, ge=1)
    is_fixed: bool = False

    @model_validator(mode='after')
    def validate_installment_numbering(self) -> 'Transaction':
        """Numbering comes in pairs and stays within range."""
        if (self.installment_number is None) != (self.total_installments is None):
            raise ValueError(
                "installment_number and total_installments must be set together"
            )
        if self.installment_number is not None:
            if self.installment_number > self.total_installments:
                raise ValueError("Installment number cannot exceed total installments")
            if self.is_fixed:
                raise ValueError("Fixed sequences are not numbered")
        return self

    @property
    def month(self) -> str:
        """The 'YYYY-MM' bucket used for period filtering."""
        return self.transaction_date.strftime("%Y-%m")


# =============================================================================
# REFERENCE MODELS
# =============================================================================

class Person(FinanceModel):
    """A household member."""

    id: str = Field(..., min_length=1)
    name: str = Field(
        ...,
        min_length=1,
        max_length=60,
    )
    color: str = Field(
        default=PERSON_COLORS[0],
        pattern=r"^#[0-9a-fA-F]{6}$",
        description="Chart color"
    )


class Card(FinanceModel):
    """
    A registered payment card.

    Cards reference their owner by id; removing the person does not
    remove the card.
    """

    id: str = Field(..., min_length=1)
    name: str = Field(
        ...,
        min_length=1,
        max_length=60,
    )
    person_id: str = Field(..., min_length=1)
    type: CardType = CardType.BOTH
    last_digits: Optional[str] = Field(
        default=None,
        pattern=r"^\d{4}$",
    )

    def supports(self, method: PaymentMethod) -> bool:
        """Can this card be used for the given payment method?"""
        if method == PaymentMethod.DEBIT:
            return self.type in (CardType.DEBIT, CardType.BOTH)
        if method == PaymentMethod.CREDIT:
            return self.type in (CardType.CREDIT, CardType.BOTH)
        return False


class Category(FinanceModel):
    """A free-text classification label."""

    id: str = Field(..., min_length=1)
    name: str = Field(
        ...,
        min_length=1,
        max_length=60,
    )


class FamilySnapshot(FinanceModel):
    """
    The whole family dataset at one point in time.

    Used for local persistence and for the remote replace-on-read /
    write-on-change synchronization.
    """

    transactions: list[Transaction] = Field(default_factory=list)
    people: list[Person] = Field(default_factory=list)
    cards: list[Card] = Field(default_factory=list)
    categories: list[Category] = Field(default_factory=list)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'unknown_reference', 'suspicious_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """
    Result of the two-stage intent validation.

    Stage 1: Schema validation (required values, references present)
    Stage 2: Semantic validation (consistency and sanity checks)
    """

    validated_at: datetime = Field(
        default_factory=datetime.utcnow
    )

    schema_valid: bool = Field(
        ...,
        description="Did schema validation pass?"
    )
    semantic_valid: bool = Field(
        ...,
        description="Did semantic validation pass?"
    )
    is_valid: bool = Field(
        ...,
        description="Overall validation result"
    )

    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )

    # Warnings don't block but should be shown
    warnings: list[str] = Field(
        default_factory=list,
        description="Non-blocking warnings"
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")


# =============================================================================
# REPORT MODELS
# =============================================================================

class SummaryData(BaseModel):
    """Totals for a period."""

    total_income: Decimal = Decimal("0.00")
    total_expense: Decimal = Decimal("0.00")
    total_savings: Decimal = Decimal("0.00")
    pending_expense: Decimal = Field(
        default=Decimal("0.00"),
        description="Expenses not yet marked as paid"
    )
    balance: Decimal = Field(
        default=Decimal("0.00"),
        description="Income minus expenses minus savings"
    )


class BreakdownEntry(BaseModel):
    """One slice/bar of a chart."""

    label: str
    value: Decimal
    color: Optional[str] = None


class MonthlyReport(BaseModel):
    """Everything the summary and dashboard screens need for one month."""

    month: str = Field(
        ...,
        pattern=r"^\d{4}-\d{2}$",
    )
    label: str
    summary: SummaryData
    transactions: list[Transaction] = Field(default_factory=list)
    by_category: list[BreakdownEntry] = Field(default_factory=list)
    by_person: list[BreakdownEntry] = Field(default_factory=list)
    by_payment_method: list[BreakdownEntry] = Field(default_factory=list)
    donut: list[BreakdownEntry] = Field(default_factory=list)
