"""Expense filtering and aggregation package."""

from expenseflow.queries.aggregator import (
    DEFAULT_RECENT_LIMIT,
    compute_category_totals,
    compute_dashboard_stats,
    compute_total_amount,
    filter_expenses,
    matches_filters,
)

__all__ = [
    "DEFAULT_RECENT_LIMIT",
    "compute_category_totals",
    "compute_dashboard_stats",
    "compute_total_amount",
    "filter_expenses",
    "matches_filters",
]
