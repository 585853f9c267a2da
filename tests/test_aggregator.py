"""Tests for filtering and dashboard aggregation."""

from datetime import date
from decimal import Decimal

from expenseflow.models import DateRange, ExpenseCategory, ExpenseFilters
from expenseflow.queries import (
    compute_category_totals,
    compute_dashboard_stats,
    compute_total_amount,
    filter_expenses,
)


class TestFilterExpenses:
    """Tests for list filtering."""

    def test_no_filters_returns_everything(self, make_expense):
        expenses = [make_expense(), make_expense()]
        assert filter_expenses(expenses) == expenses
        assert filter_expenses(expenses, ExpenseFilters()) == expenses

    def test_category(self, make_expense):
        food = make_expense(category=ExpenseCategory.FOOD)
        bus = make_expense(category=ExpenseCategory.TRANSPORTATION)
        result = filter_expenses([food, bus], ExpenseFilters(category=ExpenseCategory.TRANSPORTATION))
        assert result == [bus]

    def test_date_range_inclusive(self, make_expense):
        before = make_expense(date=date(2024, 4, 30))
        start = make_expense(date=date(2024, 5, 1))
        end = make_expense(date=date(2024, 5, 31))
        after = make_expense(date=date(2024, 6, 1))
        filters = ExpenseFilters(
            date_range=DateRange(start_date=date(2024, 5, 1), end_date=date(2024, 5, 31))
        )
        assert filter_expenses([before, start, end, after], filters) == [start, end]

    def test_search_description_and_category(self, make_expense):
        lunch = make_expense(description="Team LUNCH", category=ExpenseCategory.FOOD)
        power = make_expense(description="Electric bill", category=ExpenseCategory.UTILITIES)
        movie = make_expense(description="Cinema", category=ExpenseCategory.ENTERTAINMENT)

        assert filter_expenses([lunch, power, movie], ExpenseFilters(search_term="lunch")) == [lunch]
        assert filter_expenses([lunch, power, movie], ExpenseFilters(search_term="util")) == [power]

    def test_blank_search_ignored(self, make_expense):
        expenses = [make_expense(), make_expense()]
        assert filter_expenses(expenses, ExpenseFilters(search_term="  ")) == expenses

    def test_filters_combine(self, make_expense):
        match = make_expense(description="Lunch", date=date(2024, 5, 2))
        wrong_date = make_expense(description="Lunch", date=date(2024, 3, 2))
        wrong_text = make_expense(description="Dinner", date=date(2024, 5, 2))
        filters = ExpenseFilters(
            category=ExpenseCategory.FOOD,
            search_term="lunch",
            date_range=DateRange(start_date=date(2024, 5, 1)),
        )
        assert filter_expenses([match, wrong_date, wrong_text], filters) == [match]


class TestTotals:
    """Tests for sums and category totals."""

    def test_total_amount_is_exact(self, make_expense):
        expenses = [make_expense(amount=Decimal("0.10")) for _ in range(3)]
        assert compute_total_amount(expenses) == Decimal("0.30")
        assert compute_total_amount([]) == Decimal("0")

    def test_category_totals_sorted_descending(self, make_expense):
        expenses = [
            make_expense(category=ExpenseCategory.FOOD, amount=Decimal("5")),
            make_expense(category=ExpenseCategory.UTILITIES, amount=Decimal("50")),
            make_expense(category=ExpenseCategory.FOOD, amount=Decimal("7")),
        ]
        totals = compute_category_totals(expenses)
        assert [(t.category, t.total, t.count) for t in totals] == [
            (ExpenseCategory.UTILITIES, Decimal("50"), 1),
            (ExpenseCategory.FOOD, Decimal("12"), 2),
        ]

    def test_category_ties_keep_first_seen_order(self, make_expense):
        expenses = [
            make_expense(category=ExpenseCategory.OTHER, amount=Decimal("5")),
            make_expense(category=ExpenseCategory.FOOD, amount=Decimal("5")),
        ]
        totals = compute_category_totals(expenses)
        assert [t.category for t in totals] == [ExpenseCategory.OTHER, ExpenseCategory.FOOD]


class TestDashboardStats:
    """Tests for dashboard aggregates."""

    def test_empty(self, today):
        stats = compute_dashboard_stats([], today=today)
        assert stats.total_expenses == Decimal("0")
        assert stats.monthly_total == Decimal("0")
        assert stats.highest_category is None
        assert stats.recent_expenses == []
        assert stats.category_breakdown == []

    def test_totals(self, make_expense, today):
        expenses = [
            make_expense(amount=Decimal("10"), date=date(2024, 5, 1)),
            make_expense(amount=Decimal("20"), date=date(2024, 5, 31)),
            make_expense(amount=Decimal("40"), date=date(2024, 4, 30)),
            make_expense(amount=Decimal("80"), date=date(2023, 5, 15)),
        ]
        stats = compute_dashboard_stats(expenses, today=today)
        assert stats.total_expenses == Decimal("150")
        assert stats.monthly_total == Decimal("30")

    def test_highest_category(self, make_expense, today):
        expenses = [
            make_expense(category=ExpenseCategory.FOOD, amount=Decimal("10")),
            make_expense(category=ExpenseCategory.HEALTHCARE, amount=Decimal("25")),
        ]
        stats = compute_dashboard_stats(expenses, today=today)
        assert stats.highest_category.category == ExpenseCategory.HEALTHCARE
        assert stats.highest_category.amount == Decimal("25")

    def test_recent_newest_first_and_limited(self, make_expense, today):
        expenses = [make_expense(date=date(2024, 5, day)) for day in range(1, 9)]
        stats = compute_dashboard_stats(expenses, today=today, recent_limit=5)
        assert [expense.date.day for expense in stats.recent_expenses] == [8, 7, 6, 5, 4]

    def test_recent_ties_keep_stored_order(self, make_expense, today):
        first = make_expense(date=date(2024, 5, 1))
        second = make_expense(date=date(2024, 5, 1))
        stats = compute_dashboard_stats([first, second], today=today)
        assert stats.recent_expenses == [first, second]
