"""Money and calendar helpers."""

from family_finance.utils.dates import (
    add_months,
    format_display_date,
    month_key,
    month_label,
    parse_iso_date,
    shift_month,
)
from family_finance.utils.money import (
    format_brl,
    from_cents,
    round_currency,
    to_cents,
)

__all__ = [
    "add_months",
    "format_brl",
    "format_display_date",
    "from_cents",
    "month_key",
    "month_label",
    "parse_iso_date",
    "round_currency",
    "shift_month",
    "to_cents",
]
