"""
Expense Form Validation

DESIGN DECISION: The form hands over raw strings. Validation happens in
two steps:

STEP 1 - FIELD CHECKS:
- Presence of amount, description, date
- Amount parses as a number and is greater than zero
- Date parses as YYYY-MM-DD
- Category is one of the known categories
These produce the messages shown next to each input.

STEP 2 - MODEL CHECK:
- The cleaned values are run through ExpenseBase
- Anything the model still rejects is reported against its field

IMPORTANT: Validation NEVER silently fixes issues beyond trimming
whitespace. It reports them so the user can correct the form.
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional

from pydantic import ValidationError

from expenseflow.models.expense import (
    ExpenseBase,
    ExpenseCategory,
    ExpenseFormData,
    ValidationIssue,
    ValidationResult,
)


CENT = Decimal("0.01")


class ExpenseValidator:
    """Validates expense form input before it reaches storage."""

    def _check_amount(self, raw: str) -> tuple[Optional[Decimal], list[ValidationIssue]]:
        text = raw.strip()
        if not text:
            return None, [ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount is required",
            )]

        try:
            amount = Decimal(text)
        except InvalidOperation:
            amount = None
        if amount is None or not amount.is_finite():
            return None, [ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message="Amount must be a valid number",
            )]

        if amount <= 0:
            return None, [ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than 0",
            )]

        # Exports write two decimals; anything finer would not survive
        if amount != amount.quantize(CENT):
            return None, [ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount can have at most 2 decimal places",
            )]

        return amount, []

    def _check_description(self, raw: str) -> tuple[Optional[str], list[ValidationIssue]]:
        text = raw.strip()
        if not text:
            return None, [ValidationIssue(
                field="description",
                issue_type="missing",
                message="Description is required",
            )]
        return text, []

    def _check_date(self, raw: str) -> tuple[Optional[date], list[ValidationIssue]]:
        text = raw.strip()
        if not text:
            return None, [ValidationIssue(
                field="date",
                issue_type="missing",
                message="Date is required",
            )]
        try:
            return date.fromisoformat(text), []
        except ValueError:
            return None, [ValidationIssue(
                field="date",
                issue_type="invalid_format",
                message="Date must be a valid date (YYYY-MM-DD)",
            )]

    def _check_category(self, raw: str) -> tuple[Optional[ExpenseCategory], list[ValidationIssue]]:
        try:
            return ExpenseCategory(raw.strip()), []
        except ValueError:
            allowed = ", ".join(category.value for category in ExpenseCategory)
            return None, [ValidationIssue(
                field="category",
                issue_type="invalid_value",
                message=f"Category must be one of: {allowed}",
            )]

    def validate_form(self, form: ExpenseFormData) -> ValidationResult:
        """
        Validate raw form input.

        Returns:
            ValidationResult; `expense` is set only when the form is valid
        """
        issues = []

        amount, amount_issues = self._check_amount(form.amount)
        category, category_issues = self._check_category(form.category)
        description, description_issues = self._check_description(form.description)
        day, date_issues = self._check_date(form.date)

        for found in (amount_issues, category_issues, description_issues, date_issues):
            issues.extend(found)

        if issues:
            return ValidationResult(is_valid=False, issues=issues)

        try:
            expense = ExpenseBase(
                amount=amount,
                category=category,
                description=description,
                date=day,
            )
        except ValidationError as e:
            for error in e.errors():
                location = error.get("loc") or ("form",)
                issues.append(ValidationIssue(
                    field=str(location[0]),
                    issue_type="invalid_value",
                    message=error.get("msg", "Invalid value"),
                ))
            return ValidationResult(is_valid=False, issues=issues)

        return ValidationResult(is_valid=True, expense=expense)

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """One line per problem, for a toast or alert."""
        if result.is_valid:
            return "✅ Expense looks good."

        lines = ["Please fix the following:"]
        for issue in result.issues:
            lines.append(f"   • {issue.message}")
        return "\n".join(lines)
