"""
Movement Intents

An intent is the validated, in-memory form of one submitted movement,
before it is expanded into persisted Transaction records.

DESIGN DECISION: Intents are a discriminated union on `type`.
Only ExpenseIntent has installment fields, so an income or savings
intent with installments cannot even be constructed.
"""

from datetime import date
from decimal import Decimal
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import Field, TypeAdapter, ValidationError, field_validator

from family_finance.models.finance import (
    SAVINGS_CATEGORY,
    AmountMode,
    FinanceModel,
    PaymentMethod,
    TransactionType,
)


class InvalidIntentError(ValueError):
    """A movement intent cannot be expanded into transactions."""

    def __init__(self, message: str, errors: Optional[list[dict]] = None):
        self.errors = errors or []
        super().__init__(message)


class _IntentBase(FinanceModel):
    description: str = Field(
        default="",
        max_length=200,
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        allow_inf_nan=False,
        description="Positive amount as entered by the user"
    )
    start_date: date = Field(
        ...,
        description="Date of the first occurrence"
    )
    category: str = Field(
        default="Outros",
        max_length=60,
    )
    person_id: str = Field(
        ...,
        min_length=1,
    )
    is_paid: bool = True


class ExpenseIntent(_IntentBase):
    """An expense, possibly split in installments or recurring monthly."""

    type: Literal[TransactionType.EXPENSE] = TransactionType.EXPENSE
    payment_method: PaymentMethod = PaymentMethod.DEBIT
    card_id: Optional[str] = None
    installments: int = Field(
        default=1,
        ge=1,
        description="Number of monthly installments (ignored when fixed)"
    )
    amount_mode: AmountMode = AmountMode.TOTAL
    is_fixed: bool = Field(
        default=False,
        description="Recurring monthly bill, expanded over twelve months"
    )

    @field_validator('card_id')
    @classmethod
    def blank_card_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class IncomeIntent(_IntentBase):
    """Money received. Always a single record."""

    type: Literal[TransactionType.INCOME] = TransactionType.INCOME
    payment_method: PaymentMethod = PaymentMethod.TRANSFER


class SavingsIntent(_IntentBase):
    """Money set aside. Always a single record in the Savings category."""

    type: Literal[TransactionType.SAVINGS] = TransactionType.SAVINGS
    payment_method: PaymentMethod = PaymentMethod.TRANSFER
    category: str = SAVINGS_CATEGORY

    @field_validator('category')
    @classmethod
    def force_savings_category(cls, v: str) -> str:
        return SAVINGS_CATEGORY


TransactionIntent = Annotated[
    Union[ExpenseIntent, IncomeIntent, SavingsIntent],
    Field(discriminator="type"),
]

_intent_adapter: TypeAdapter = TypeAdapter(TransactionIntent)


def build_intent(data: dict[str, Any]) -> Union[ExpenseIntent, IncomeIntent, SavingsIntent]:
    """
    Build an intent from raw form data (camelCase or snake_case keys).

    Raises:
        InvalidIntentError: If the data does not describe a valid intent
    """
    try:
        return _intent_adapter.validate_python(data)
    except ValidationError as e:
        errors = [
            {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        raise InvalidIntentError(
            f"Invalid movement intent: {len(errors)} problem(s)",
            errors=errors,
        ) from e
