"""Form validation package."""

from expenseflow.validation.validator import ExpenseValidator

__all__ = ["ExpenseValidator"]
