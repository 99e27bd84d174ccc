"""
Two-Stage Intent Validation

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Required values present (description, person, card when paying by card)
- Referenced person exists

STAGE 2 - SEMANTIC VALIDATION:
- Card exists, belongs to the person, and supports the payment method
- Category is registered
- Absurd amount detection
- Far-future start date detection

WHY TWO STAGES:
1. Separation of concerns (structural vs logical)
2. Better error messages (know exactly what kind of issue)
3. Can skip stage 2 if stage 1 fails

Numeric bounds (positive amount, at least one installment) are already
enforced when the intent model is built.

IMPORTANT: Validation NEVER silently fixes issues.
It reports them so the form can be corrected.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Optional, Union

from family_finance.config import AppSettings, get_settings
from family_finance.installments import installment_count
from family_finance.models.finance import (
    AmountMode,
    Card,
    Category,
    Person,
    ValidationIssue,
    ValidationResult,
)
from family_finance.models.intent import ExpenseIntent, IncomeIntent, SavingsIntent
from family_finance.utils.money import format_brl

AnyIntent = Union[ExpenseIntent, IncomeIntent, SavingsIntent]


class IntentValidator:
    """
    Validates a movement intent against the family's reference data.

    Stage 1: Schema validation
    Stage 2: Semantic validation
    """

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    def _validate_schema(
        self,
        intent: AnyIntent,
        people: list[Person],
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 1: Schema validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        if not intent.description.strip():
            issues.append(ValidationIssue(
                field="description",
                issue_type="missing",
                message="Description is required",
                severity="error",
                suggested_fix="Describe the movement, e.g. 'Supermercado'",
            ))

        if not any(person.id == intent.person_id for person in people):
            issues.append(ValidationIssue(
                field="person_id",
                issue_type="unknown_reference",
                message=f"Person '{intent.person_id}' is not registered",
                severity="error",
                suggested_fix="Pick one of the registered people",
            ))

        if (
            isinstance(intent, ExpenseIntent)
            and intent.payment_method.uses_card
            and not intent.card_id
        ):
            issues.append(ValidationIssue(
                field="card_id",
                issue_type="missing",
                message=f"A card is required for {intent.payment_method.value.lower()} payments",
                severity="error",
                suggested_fix="Select one of the person's cards",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)

        return is_valid, issues

    def _validate_card(
        self,
        intent: ExpenseIntent,
        cards: list[Card],
    ) -> list[ValidationIssue]:
        issues = []
        card = next((c for c in cards if c.id == intent.card_id), None)

        if card is None:
            issues.append(ValidationIssue(
                field="card_id",
                issue_type="unknown_reference",
                message=f"Card '{intent.card_id}' is not registered",
                severity="error",
            ))
            return issues

        if card.person_id != intent.person_id:
            issues.append(ValidationIssue(
                field="card_id",
                issue_type="inconsistent",
                message=f"Card '{card.name}' belongs to someone else",
                severity="error",
                suggested_fix="Pick a card owned by the responsible person",
            ))

        if not card.supports(intent.payment_method):
            issues.append(ValidationIssue(
                field="card_id",
                issue_type="inconsistent",
                message=(
                    f"Card '{card.name}' cannot be used for "
                    f"{intent.payment_method.value.lower()} payments"
                ),
                severity="error",
            ))

        return issues

    def _validate_semantic(
        self,
        intent: AnyIntent,
        cards: list[Card],
        categories: list[Category],
        today: date,
    ) -> tuple[bool, list[ValidationIssue]]:
        """
        Stage 2: Semantic validation.

        Returns: (is_valid, list_of_issues)
        """
        issues = []

        if (
            isinstance(intent, ExpenseIntent)
            and intent.payment_method.uses_card
            and intent.card_id
        ):
            issues.extend(self._validate_card(intent, cards))

        if isinstance(intent, (ExpenseIntent, IncomeIntent)):
            names = {category.name.casefold() for category in categories}
            if intent.category.casefold() not in names:
                issues.append(ValidationIssue(
                    field="category",
                    issue_type="unknown_reference",
                    message=f"Category '{intent.category}' is not registered",
                    severity="warning",
                    suggested_fix="Add the category in settings to see it in charts",
                ))

        max_amount = Decimal(str(self._settings.max_transaction_amount))
        if intent.amount > max_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=(
                    f"Amount ({format_brl(intent.amount, self._settings.currency_symbol)}) "
                    "seems unusually high"
                ),
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        count = installment_count(intent)
        if (
            isinstance(intent, ExpenseIntent)
            and count > 1
            and not intent.is_fixed
            and intent.amount_mode == AmountMode.TOTAL
            and intent.amount * 100 < count
        ):
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message="Total is smaller than one cent per installment",
                severity="warning",
            ))

        max_future = today + timedelta(days=self._settings.future_date_tolerance_days)
        if intent.start_date > max_future:
            issues.append(ValidationIssue(
                field="start_date",
                issue_type="future_date",
                message=f"Start date ({intent.start_date}) is far in the future",
                severity="warning",
                suggested_fix="Please verify the date is correct",
            ))

        is_valid = not any(issue.severity == "error" for issue in issues)

        return is_valid, issues

    def validate(
        self,
        intent: AnyIntent,
        people: list[Person],
        cards: list[Card],
        categories: list[Category],
        today: Optional[date] = None,
    ) -> ValidationResult:
        """
        Run full two-stage validation pipeline.

        Args:
            intent: The movement intent to validate
            people, cards, categories: Current reference data
            today: Reference date for future-date checks

        Returns:
            ValidationResult with all issues found
        """
        all_issues = []

        schema_valid, schema_issues = self._validate_schema(intent, people)
        all_issues.extend(schema_issues)

        # Only run stage 2 if stage 1 passes
        semantic_valid = False
        if schema_valid:
            semantic_valid, semantic_issues = self._validate_semantic(
                intent, cards, categories, today or date.today()
            )
            all_issues.extend(semantic_issues)

        warnings = [
            issue.message for issue in all_issues if issue.severity == "warning"
        ]

        return ValidationResult(
            schema_valid=schema_valid,
            semantic_valid=semantic_valid,
            is_valid=schema_valid and semantic_valid,
            issues=all_issues,
            warnings=warnings,
        )

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """
        Generate a user-friendly summary of validation results.
        """
        if result.is_valid and not result.warnings:
            return "✅ All checks passed!"

        lines = []

        if result.has_errors:
            lines.append("❌ Please fix the following:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     💡 {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("⚠️ Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
