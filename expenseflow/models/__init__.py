"""
Data Models Package

This package contains all Pydantic models used in ExpenseFlow.
All data flowing through the system must conform to these schemas.
"""

from expenseflow.models.expense import (
    CategoryTotal,
    CsvImportResult,
    DashboardStats,
    DateRange,
    Expense,
    ExpenseBase,
    ExpenseCategory,
    ExpenseFilters,
    ExpenseFormData,
    HighestCategory,
    ValidationIssue,
    ValidationResult,
    generate_expense_id,
)

__all__ = [
    "CategoryTotal",
    "CsvImportResult",
    "DashboardStats",
    "DateRange",
    "Expense",
    "ExpenseBase",
    "ExpenseCategory",
    "ExpenseFilters",
    "ExpenseFormData",
    "HighestCategory",
    "ValidationIssue",
    "ValidationResult",
    "generate_expense_id",
]
