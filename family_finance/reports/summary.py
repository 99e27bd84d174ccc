"""
Period Summaries and Chart Breakdowns

DESIGN DECISION: Every figure shown on the summary and dashboard screens
is computed here, deterministically, from stored transactions.
Rendering is somebody else's job; this module only produces numbers.

All sums are Decimal, so totals match the stored cents exactly.
"""

from decimal import Decimal
from typing import Hashable, Iterable, Optional

from family_finance.models.finance import (
    PAYMENT_METHOD_LABELS,
    UNKNOWN_PERSON_LABEL,
    BreakdownEntry,
    MonthlyReport,
    Person,
    SummaryData,
    Transaction,
    TransactionType,
)
from family_finance.services.storage import (
    ReferenceStorageInterface,
    TransactionStorageInterface,
)
from family_finance.utils.dates import month_label

ZERO = Decimal("0.00")

DONUT_COLORS = {
    "Saídas": "#fca5a5",
    "Investido": "#fde047",
    "Saldo atual": "#86efac",
}

CHART_COLORS = [
    "#3b82f6", "#10b981", "#f59e0b", "#ef4444",
    "#8b5cf6", "#ec4899", "#06b6d4", "#475569",
]


def filter_by_month(transactions: Iterable[Transaction], month: str) -> list[Transaction]:
    """Keep the transactions dated within a 'YYYY-MM' month."""
    return [t for t in transactions if t.month == month]


def summarize(transactions: Iterable[Transaction]) -> SummaryData:
    """Totals by type, unpaid expenses, and the remaining balance."""
    income = expense = savings = pending = ZERO

    for transaction in transactions:
        if transaction.type == TransactionType.INCOME:
            income += transaction.amount
        elif transaction.type == TransactionType.EXPENSE:
            expense += transaction.amount
            if not transaction.is_paid:
                pending += transaction.amount
        elif transaction.type == TransactionType.SAVINGS:
            savings += transaction.amount

    return SummaryData(
        total_income=income,
        total_expense=expense,
        total_savings=savings,
        pending_expense=pending,
        balance=income - expense - savings,
    )


def _expenses(transactions: Iterable[Transaction]) -> list[Transaction]:
    return [t for t in transactions if t.type == TransactionType.EXPENSE]


def _grouped(pairs: Iterable[tuple[Hashable, Decimal]]) -> dict[Hashable, Decimal]:
    groups: dict[Hashable, Decimal] = {}
    for key, amount in pairs:
        groups[key] = groups.get(key, ZERO) + amount
    return groups


def expense_by_category(transactions: Iterable[Transaction]) -> list[BreakdownEntry]:
    """Expense totals per category, largest first."""
    groups = _grouped((t.category, t.amount) for t in _expenses(transactions))
    ordered = sorted(groups.items(), key=lambda item: item[1], reverse=True)
    return [BreakdownEntry(label=label, value=value) for label, value in ordered]


def expense_by_person(
    transactions: Iterable[Transaction],
    people: list[Person],
) -> list[BreakdownEntry]:
    """
    Expense totals per person, keyed by id and labelled with the name.

    Two people sharing a name stay separate; unknown ids are grouped
    together under UNKNOWN_PERSON_LABEL.
    """
    by_id = {person.id: person for person in people}
    groups = _grouped(
        (t.person_id if t.person_id in by_id else None, t.amount)
        for t in _expenses(transactions)
    )
    entries = []
    for person_id, value in groups.items():
        person = by_id.get(person_id)
        if person is None:
            entries.append(BreakdownEntry(label=UNKNOWN_PERSON_LABEL, value=value))
        else:
            entries.append(BreakdownEntry(label=person.name, value=value, color=person.color))
    return entries


def expense_by_payment_method(transactions: Iterable[Transaction]) -> list[BreakdownEntry]:
    """Expense totals per payment method, in first-seen order."""
    groups = _grouped(
        (PAYMENT_METHOD_LABELS[t.payment_method], t.amount)
        for t in _expenses(transactions)
    )
    return [
        BreakdownEntry(
            label=label,
            value=value,
            color=CHART_COLORS[index % len(CHART_COLORS)],
        )
        for index, (label, value) in enumerate(groups.items())
    ]


def donut_slices(summary: SummaryData) -> list[BreakdownEntry]:
    """Where the month's income went. A negative balance shows as zero."""
    values = {
        "Saídas": summary.total_expense,
        "Investido": summary.total_savings,
        "Saldo atual": max(ZERO, summary.balance),
    }
    return [
        BreakdownEntry(label=label, value=value, color=DONUT_COLORS[label])
        for label, value in values.items()
    ]


def sort_for_display(transactions: Iterable[Transaction]) -> list[Transaction]:
    """Newest date first; records of the same day keep insertion order."""
    # Negated ordinal instead of reverse=True, which would flip same-day ties
    return sorted(transactions, key=lambda t: -t.transaction_date.toordinal())


class ReportBuilder:
    """
    Builds period reports from stored data.

    GUARANTEES:
    - Only reports real data from storage
    - Months without data yield zero totals, never an error
    """

    def __init__(
        self,
        transactions: TransactionStorageInterface,
        references: ReferenceStorageInterface,
    ):
        self._transactions = transactions
        self._references = references

    async def monthly_report(
        self,
        month: str,
        person_id: Optional[str] = None,
    ) -> MonthlyReport:
        """Everything the summary and dashboard screens show for one month."""
        transactions = await self._transactions.list_transactions(
            month=month,
            person_id=person_id,
        )
        people = await self._references.list_people()
        summary = summarize(transactions)

        return MonthlyReport(
            month=month,
            label=month_label(month),
            summary=summary,
            transactions=sort_for_display(transactions),
            by_category=expense_by_category(transactions),
            by_person=expense_by_person(transactions, people),
            by_payment_method=expense_by_payment_method(transactions),
            donut=donut_slices(summary),
        )
