"""
Tests for money and calendar helpers.
"""

import pytest
from datetime import date
from decimal import Decimal

from family_finance.utils.dates import (
    add_months,
    clamp_day_to_month,
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


class TestMoney:
    """Tests for cent arithmetic and formatting."""

    def test_round_half_up(self):
        assert round_currency(Decimal("10.005")) == Decimal("10.01")
        assert round_currency(Decimal("10.004")) == Decimal("10.00")

    def test_round_float_uses_shortest_repr(self):
        """Test 89.9 does not become 89.89999..."""
        assert round_currency(89.9) == Decimal("89.90")

    def test_to_cents(self):
        assert to_cents(Decimal("33.34")) == 3334
        assert to_cents("0.015") == 2

    def test_from_cents(self):
        assert from_cents(3333) == Decimal("33.33")
        assert from_cents(5) == Decimal("0.05")

    @pytest.mark.parametrize("value,expected", [
        (Decimal("1234.56"), "R$ 1.234,56"),
        (Decimal("0.5"), "R$ 0,50"),
        (Decimal("1000000"), "R$ 1.000.000,00"),
        (Decimal("-42.1"), "-R$ 42,10"),
    ])
    def test_format_brl(self, value, expected):
        assert format_brl(value) == expected


class TestDates:
    """Tests for calendar helpers."""

    def test_parse_iso_date_is_a_plain_date(self):
        assert parse_iso_date(" 2024-02-29 ") == date(2024, 2, 29)

    def test_parse_iso_date_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_iso_date("29/02/2024")

    def test_format_display_date(self):
        assert format_display_date(date(2024, 3, 7)) == "07/03/2024"

    def test_month_key(self):
        assert month_key(date(2024, 3, 7)) == "2024-03"

    def test_clamp_day_to_month(self):
        assert clamp_day_to_month(2023, 2, 31) == 28
        assert clamp_day_to_month(2024, 2, 31) == 29
        assert clamp_day_to_month(2024, 4, 15) == 15

    def test_add_months_clamps(self):
        assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)

    def test_add_months_from_start_not_chained(self):
        """Test the day recovers after a short month."""
        assert add_months(date(2024, 1, 31), 2) == date(2024, 3, 31)

    def test_add_months_crosses_years(self):
        assert add_months(date(2024, 12, 15), 1) == date(2025, 1, 15)
        assert add_months(date(2024, 1, 15), 25) == date(2026, 2, 15)
        assert add_months(date(2024, 1, 15), -1) == date(2023, 12, 15)

    def test_shift_month(self):
        assert shift_month("2024-01", -1) == "2023-12"
        assert shift_month("2024-12", 1) == "2025-01"

    def test_month_label(self):
        assert month_label("2026-02") == "Fevereiro de 2026"
        assert month_label("2024-03") == "Março de 2024"
