"""Utility helpers."""

from expenseflow.utils.formatting import (
    expense_row_html,
    format_currency,
    format_long_date,
    format_short_date,
    ordinal,
)

__all__ = [
    "expense_row_html",
    "format_currency",
    "format_long_date",
    "format_short_date",
    "ordinal",
]
