"""
Tests for period summaries and chart breakdowns.
"""

from datetime import date
from decimal import Decimal

import pytest

from family_finance.models.finance import PaymentMethod, Person, Transaction, TransactionType
from family_finance.reports import (
    ReportBuilder,
    donut_slices,
    expense_by_category,
    expense_by_payment_method,
    expense_by_person,
    filter_by_month,
    sort_for_display,
    summarize,
)


def tx(id: str, amount: str, type=TransactionType.EXPENSE, on=date(2024, 3, 10), **overrides):
    data = dict(
        id=id,
        transaction_date=on,
        description=id,
        amount=Decimal(amount),
        type=type,
        category="Alimentação",
        payment_method=PaymentMethod.PIX,
        person_id="1",
        is_paid=True,
    )
    data.update(overrides)
    return Transaction(**data)


@pytest.fixture
def month_transactions():
    return [
        tx("salario", "5000.00", type=TransactionType.INCOME, category="Salário"),
        tx("mercado", "800.00"),
        tx("aluguel", "1800.00", category="Moradia", is_paid=False),
        tx("cinema", "60.00", category="Lazer", person_id="2",
           payment_method=PaymentMethod.CREDIT, card_id="c1"),
        tx("reserva", "500.00", type=TransactionType.SAVINGS, category="Savings"),
    ]


class TestSummarize:
    """Tests for summarize."""

    def test_totals(self, month_transactions):
        summary = summarize(month_transactions)

        assert summary.total_income == Decimal("5000.00")
        assert summary.total_expense == Decimal("2660.00")
        assert summary.total_savings == Decimal("500.00")
        assert summary.pending_expense == Decimal("1800.00")
        assert summary.balance == Decimal("1840.00")

    def test_empty_month(self):
        summary = summarize([])
        assert summary.balance == Decimal("0")
        assert summary.total_expense == Decimal("0")

    def test_negative_balance(self):
        summary = summarize([
            tx("in", "100.00", type=TransactionType.INCOME),
            tx("out", "150.00"),
        ])
        assert summary.balance == Decimal("-50.00")


class TestBreakdowns:
    """Tests for chart breakdowns."""

    def test_filter_by_month(self):
        items = [tx("a", "1", on=date(2024, 3, 31)), tx("b", "1", on=date(2024, 4, 1))]
        assert [t.id for t in filter_by_month(items, "2024-03")] == ["a"]

    def test_by_category_largest_first(self, month_transactions):
        entries = expense_by_category(month_transactions)

        assert [(e.label, e.value) for e in entries] == [
            ("Moradia", Decimal("1800.00")),
            ("Alimentação", Decimal("800.00")),
            ("Lazer", Decimal("60.00")),
        ]

    def test_by_person_groups_unknown_ids(self, month_transactions, people):
        items = month_transactions + [tx("orfao", "40.00", person_id="deleted")]

        entries = {e.label: e for e in expense_by_person(items, people)}

        assert entries["Eu"].value == Decimal("2600.00")
        assert entries["Eu"].color == "#3b82f6"
        assert entries["Cônjuge"].value == Decimal("60.00")
        assert entries["Outros"].value == Decimal("40.00")
        assert entries["Outros"].color is None

    def test_by_person_keeps_namesakes_apart(self):
        people = [
            Person(id="1", name="Ana", color="#3b82f6"),
            Person(id="2", name="Ana", color="#ec4899"),
        ]
        items = [
            tx("a", "10.00", person_id="1"),
            tx("b", "25.00", person_id="2"),
            tx("c", "5.00", person_id="1"),
        ]

        entries = expense_by_person(items, people)

        assert [(e.label, e.value, e.color) for e in entries] == [
            ("Ana", Decimal("15.00"), "#3b82f6"),
            ("Ana", Decimal("25.00"), "#ec4899"),
        ]

    def test_by_payment_method_labels(self, month_transactions):
        entries = expense_by_payment_method(month_transactions)

        assert [(e.label, e.value) for e in entries] == [
            ("PIX", Decimal("2600.00")),
            ("Crédito", Decimal("60.00")),
        ]
        assert all(e.color for e in entries)

    def test_income_is_not_an_expense_slice(self, month_transactions):
        labels = [e.label for e in expense_by_category(month_transactions)]
        assert "Salário" not in labels
        assert "Savings" not in labels

    def test_donut_clamps_negative_balance(self):
        summary = summarize([tx("out", "150.00")])
        slices = {s.label: s.value for s in donut_slices(summary)}

        assert slices == {
            "Saídas": Decimal("150.00"),
            "Investido": Decimal("0.00"),
            "Saldo atual": Decimal("0.00"),
        }

    def test_sort_for_display_is_stable(self):
        items = [
            tx("first", "1", on=date(2024, 3, 1)),
            tx("late-a", "1", on=date(2024, 3, 20)),
            tx("late-b", "1", on=date(2024, 3, 20)),
        ]
        assert [t.id for t in sort_for_display(items)] == ["late-a", "late-b", "first"]


class TestReportBuilder:
    """Tests for the assembled monthly report."""

    @pytest.mark.asyncio
    async def test_monthly_report(self, store, month_transactions):
        await store.add_transactions(month_transactions + [
            tx("next", "99.00", on=date(2024, 4, 2)),
        ])

        report = await ReportBuilder(store, store).monthly_report("2024-03")

        assert report.label == "Março de 2024"
        assert len(report.transactions) == 5
        assert report.summary.balance == Decimal("1840.00")
        assert report.by_person[0].label == "Eu"
        assert len(report.donut) == 3

    @pytest.mark.asyncio
    async def test_report_for_one_person(self, store, month_transactions):
        await store.add_transactions(month_transactions)

        report = await ReportBuilder(store, store).monthly_report("2024-03", person_id="2")

        assert [t.id for t in report.transactions] == ["cinema"]
        assert report.summary.total_expense == Decimal("60.00")

    @pytest.mark.asyncio
    async def test_empty_month_is_not_an_error(self, store):
        report = await ReportBuilder(store, store).monthly_report("1999-01")

        assert report.transactions == []
        assert report.summary.total_income == Decimal("0")
