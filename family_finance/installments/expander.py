"""
Installment / Recurrence Expander

Turns one submitted movement intent into the ordered list of Transaction
records to persist.

GUARANTEES:
- The amounts of a TOTAL split add up to the entered total, to the cent.
  Any leftover cent goes to the first installment.
- Dates advance one calendar month per step, computed from the start date.
  A day missing from the target month is clamped to that month's last day.
- Only the first record carries the caller's is_paid; later ones are unpaid.
- Every record of a multi-record expansion shares one installments_id.

The expander is pure: identifiers come from an injected factory, and
nothing is read from settings or storage.
"""

from decimal import Decimal
from typing import Callable, Optional, Union
from uuid import uuid4

from family_finance.models.finance import AmountMode, Transaction
from family_finance.models.intent import (
    ExpenseIntent,
    IncomeIntent,
    InvalidIntentError,
    SavingsIntent,
)
from family_finance.utils.dates import add_months
from family_finance.utils.money import from_cents, round_currency, to_cents

FIXED_MONTHS = 12

IdFactory = Callable[[], str]

AnyIntent = Union[ExpenseIntent, IncomeIntent, SavingsIntent]


def generate_id() -> str:
    """Default identifier factory."""
    return str(uuid4())


def installment_count(intent: AnyIntent) -> int:
    """How many records the intent expands into."""
    if isinstance(intent, ExpenseIntent):
        return FIXED_MONTHS if intent.is_fixed else intent.installments
    return 1


def split_total(total: Decimal, count: int) -> list[Decimal]:
    """
    Split a total into `count` cent-exact parts.

    split_total(Decimal("100"), 3) -> [33.34, 33.33, 33.33]
    """
    if count < 1:
        raise InvalidIntentError(f"Cannot split into {count} installments")
    base, remainder = divmod(to_cents(total), count)
    amounts = [from_cents(base)] * count
    amounts[0] = from_cents(base + remainder)
    return amounts


def installment_amounts(intent: AnyIntent) -> list[Decimal]:
    """Per-record amounts, in index order."""
    count = installment_count(intent)
    if count == 1:
        return [round_currency(intent.amount)]
    if intent.is_fixed or intent.amount_mode == AmountMode.PER_INSTALLMENT:
        return [round_currency(intent.amount)] * count
    return split_total(intent.amount, count)


def _check_intent(intent: AnyIntent) -> None:
    """Reject malformed intents, including ones built without validation."""
    if not isinstance(intent, (ExpenseIntent, IncomeIntent, SavingsIntent)):
        raise InvalidIntentError(f"Unsupported intent: {type(intent).__name__}")

    amount = intent.amount
    if not isinstance(amount, Decimal):
        raise InvalidIntentError("Amount must be a Decimal")
    if not amount.is_finite() or amount <= 0:
        raise InvalidIntentError(f"Amount must be positive and finite, got {amount}")
    if round_currency(amount) <= 0:
        raise InvalidIntentError(f"Amount rounds to zero: {amount}")

    if isinstance(intent, ExpenseIntent) and intent.installments < 1:
        raise InvalidIntentError(
            f"Installments must be at least 1, got {intent.installments}"
        )


def _card_id(intent: AnyIntent) -> Optional[str]:
    if isinstance(intent, ExpenseIntent) and intent.payment_method.uses_card:
        return intent.card_id
    return None


def expand_intent(
    intent: AnyIntent,
    id_factory: IdFactory = generate_id,
) -> list[Transaction]:
    """
    Expand an intent into the Transaction records that represent it.

    Args:
        intent: A validated movement intent
        id_factory: Returns a fresh unique id on every call

    Returns:
        Records in index order (earliest first). The caller must persist
        them as one batch.

    Raises:
        InvalidIntentError: If the intent is malformed
    """
    _check_intent(intent)

    count = installment_count(intent)
    is_fixed = isinstance(intent, ExpenseIntent) and intent.is_fixed
    amounts = installment_amounts(intent)

    shared = {
        "type": intent.type,
        "category": intent.category,
        "payment_method": intent.payment_method,
        "card_id": _card_id(intent),
        "person_id": intent.person_id,
    }

    if count == 1:
        return [
            Transaction(
                id=id_factory(),
                transaction_date=intent.start_date,
                description=intent.description,
                amount=amounts[0],
                is_paid=intent.is_paid,
                **shared,
            )
        ]

    installments_id = id_factory()
    records = []
    for index, amount in enumerate(amounts):
        if is_fixed:
            description = intent.description
            number, total = None, None
        else:
            description = f"{intent.description} ({index + 1}/{count})"
            number, total = index + 1, count

        records.append(
            Transaction(
                id=id_factory(),
                transaction_date=add_months(intent.start_date, index),
                description=description,
                amount=amount,
                # Future installments are not settled yet
                is_paid=intent.is_paid if index == 0 else False,
                installments_id=installments_id,
                installment_number=number,
                total_installments=total,
                is_fixed=is_fixed,
                **shared,
            )
        )

    return records
