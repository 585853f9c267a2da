"""Display helpers for amounts and dates."""

import html
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Union


DEFAULT_CURRENCY_SYMBOL = "₱"


def format_currency(
    amount: Union[Decimal, int, float],
    decimals: int = 2,
    symbol: str = DEFAULT_CURRENCY_SYMBOL,
) -> str:
    """
    Format an amount with a currency symbol and thousands separators.

    >>> format_currency(Decimal("1234.5"))
    '₱1,234.50'
    """
    value = Decimal(str(amount))
    quantum = Decimal(1).scaleb(-decimals)
    value = value.quantize(quantum, rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.{decimals}f}"


def ordinal(day: int) -> str:
    """1 -> '1st', 12 -> '12th', 23 -> '23rd'."""
    if 11 <= day % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def format_long_date(day: date) -> str:
    """e.g. 'April 29th, 2024'."""
    return f"{day.strftime('%B')} {ordinal(day.day)}, {day.year}"


def format_short_date(day: date) -> str:
    """e.g. 'Apr 29, 2024'."""
    return f"{day.strftime('%b')} {day.day}, {day.year}"


def expense_row_html(description: str, amount_text: str, details: str) -> str:
    """
    HTML for one recent-expense card on the dashboard.

    All arguments are escaped; descriptions are user input.
    """
    return (
        '<div class="expense-row">'
        f"<strong>{html.escape(description)}</strong> · {html.escape(amount_text)}<br/>"
        f"<small>{html.escape(details)}</small>"
        "</div>"
    )
