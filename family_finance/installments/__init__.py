"""Installment and recurring-expense expansion."""

from family_finance.installments.expander import (
    FIXED_MONTHS,
    IdFactory,
    expand_intent,
    generate_id,
    installment_amounts,
    installment_count,
    split_total,
)
from family_finance.models.intent import InvalidIntentError

__all__ = [
    "FIXED_MONTHS",
    "IdFactory",
    "InvalidIntentError",
    "expand_intent",
    "generate_id",
    "installment_amounts",
    "installment_count",
    "split_total",
]
