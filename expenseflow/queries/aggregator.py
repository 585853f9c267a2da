"""
Expense Filtering and Aggregation

DESIGN DECISION: Everything here is a pure function over a list.
No storage access, no state, no clock - "today" is passed in.
The tracker recomputes from scratch on every change; the lists are
small enough that linear scans are the whole algorithm.

GUARANTEES:
- Filters never reorder the input
- Totals are exact Decimal sums
- Ties in category totals keep first-seen order
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from expenseflow.models.expense import (
    CategoryTotal,
    DashboardStats,
    Expense,
    ExpenseCategory,
    ExpenseFilters,
    HighestCategory,
)


DEFAULT_RECENT_LIMIT = 5


def matches_filters(expense: Expense, filters: ExpenseFilters) -> bool:
    """Check one expense against category, date range and search term."""
    if filters.category and expense.category != filters.category:
        return False

    if filters.date_range and not filters.date_range.contains(expense.date):
        return False

    search = (filters.search_term or "").strip().lower()
    if search:
        return (
            search in expense.description.lower()
            or search in expense.category.value.lower()
        )

    return True


def filter_expenses(
    expenses: Iterable[Expense],
    filters: Optional[ExpenseFilters] = None,
) -> list[Expense]:
    """Return the expenses matching the filters, in their original order."""
    if filters is None or filters.is_empty:
        return list(expenses)
    return [expense for expense in expenses if matches_filters(expense, filters)]


def compute_total_amount(expenses: Iterable[Expense]) -> Decimal:
    """Sum of amounts."""
    return sum((expense.amount for expense in expenses), Decimal("0"))


def compute_category_totals(expenses: Iterable[Expense]) -> list[CategoryTotal]:
    """
    Group by category.

    Returns:
        One CategoryTotal per category present, largest total first
    """
    groups: dict[ExpenseCategory, CategoryTotal] = {}

    for expense in expenses:
        if expense.category not in groups:
            groups[expense.category] = CategoryTotal(category=expense.category)
        group = groups[expense.category]
        group.total += expense.amount
        group.count += 1

    # sorted() is stable, so equal totals stay in first-seen order
    return sorted(groups.values(), key=lambda group: group.total, reverse=True)


def in_month(day: date, reference: date) -> bool:
    """True if day falls in the same calendar month as reference."""
    return day.year == reference.year and day.month == reference.month


def most_recent(expenses: Iterable[Expense], limit: int) -> list[Expense]:
    """Newest first by date; equal dates keep their stored order."""
    return sorted(expenses, key=lambda expense: expense.date, reverse=True)[:limit]


def compute_dashboard_stats(
    expenses: list[Expense],
    today: Optional[date] = None,
    recent_limit: int = DEFAULT_RECENT_LIMIT,
) -> DashboardStats:
    """
    Derive the dashboard aggregates from the full expense list.

    Args:
        expenses: Every stored expense (not the filtered view)
        today: Reference day for the current month; defaults to date.today()
        recent_limit: How many recent expenses to include
    """
    today = today or date.today()

    breakdown = compute_category_totals(expenses)
    highest = breakdown[0] if breakdown else None

    return DashboardStats(
        total_expenses=compute_total_amount(expenses),
        monthly_total=compute_total_amount(
            expense for expense in expenses if in_month(expense.date, today)
        ),
        highest_category=(
            HighestCategory(category=highest.category, amount=highest.total)
            if highest
            else None
        ),
        recent_expenses=most_recent(expenses, recent_limit),
        category_breakdown=breakdown,
    )
