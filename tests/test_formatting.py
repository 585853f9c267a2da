"""Tests for display formatting helpers."""

import pytest
from datetime import date
from decimal import Decimal

from expenseflow.utils import (
    expense_row_html,
    format_currency,
    format_long_date,
    format_short_date,
    ordinal,
)


class TestFormatCurrency:

    def test_default_symbol_and_separators(self):
        assert format_currency(Decimal("1234.5")) == "₱1,234.50"

    def test_no_decimals(self):
        assert format_currency(Decimal("1234.5"), decimals=0) == "₱1,235"

    def test_other_symbol(self):
        assert format_currency(3, symbol="$") == "$3.00"

    def test_negative(self):
        assert format_currency(Decimal("-2.5")) == "-₱2.50"


class TestDates:

    @pytest.mark.parametrize("day, expected", [
        (1, "1st"), (2, "2nd"), (3, "3rd"), (4, "4th"),
        (11, "11th"), (12, "12th"), (13, "13th"),
        (21, "21st"), (22, "22nd"), (23, "23rd"), (31, "31st"),
    ])
    def test_ordinal(self, day, expected):
        assert ordinal(day) == expected

    def test_long_date(self):
        assert format_long_date(date(2024, 4, 29)) == "April 29th, 2024"

    def test_short_date(self):
        assert format_short_date(date(2024, 4, 9)) == "Apr 9, 2024"


class TestExpenseRowHtml:

    def test_escapes_user_text(self):
        row = expense_row_html('<img src=x onerror="alert(1)">', "₱5.00", "Food & Drink")
        assert "<img" not in row
        assert "&lt;img src=x onerror=&quot;alert(1)&quot;&gt;" in row
        assert "Food &amp; Drink" in row

    def test_closing_tags_cannot_break_out(self):
        row = expense_row_html("</div><b>bold</b>", "₱5.00", "details")
        assert row.count("</div>") == 1
        assert row.startswith('<div class="expense-row">')
        assert row.endswith("</div>")
