"""Period summaries and chart breakdowns."""

from family_finance.reports.summary import (
    ReportBuilder,
    donut_slices,
    expense_by_category,
    expense_by_payment_method,
    expense_by_person,
    filter_by_month,
    sort_for_display,
    summarize,
)

__all__ = [
    "ReportBuilder",
    "donut_slices",
    "expense_by_category",
    "expense_by_payment_method",
    "expense_by_person",
    "filter_by_month",
    "sort_for_display",
    "summarize",
]
