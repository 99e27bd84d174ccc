"""Intent validation package."""

from family_finance.validation.validator import IntentValidator

__all__ = ["IntentValidator"]
