"""
Core Data Models for ExpenseFlow

These models define the schemas for all data flowing through the system.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Serialize to the persisted JSON shape without extra glue

DESIGN DECISION: Amounts are Decimal in memory and JSON numbers on disk.
The persisted array stays readable by anything that expects plain numbers,
while sums inside the app never drift.
"""

import datetime
import random
import string
import time
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    model_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class ExpenseCategory(str, Enum):
    """
    Supported expense categories.

    DESIGN DECISION: Values are the display names. They are what gets
    persisted, exported to CSV, and matched on import (case-sensitive).
    """
    FOOD = "Food"
    TRANSPORTATION = "Transportation"
    ENTERTAINMENT = "Entertainment"
    UTILITIES = "Utilities"
    HEALTHCARE = "Healthcare"
    OTHER = "Other"


_ID_ALPHABET = string.digits + string.ascii_lowercase


def generate_expense_id() -> str:
    """
    Build an id from the current time in milliseconds plus a random
    base-36 suffix.

    Not guaranteed unique. Two ids created in the same millisecond
    only differ by the suffix, and collisions are not checked.
    """
    timestamp = str(int(time.time() * 1000))
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return timestamp + suffix


# =============================================================================
# CORE EXPENSE MODELS
# =============================================================================

class ExpenseBase(BaseModel):
    """The user-editable part of an expense."""
    model_config = ConfigDict(str_strip_whitespace=True)

    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount spent"
    )
    category: ExpenseCategory = Field(
        ...,
        description="Spending classification"
    )
    description: str = Field(
        ...,
        min_length=1,
        description="What the money was spent on"
    )
    date: datetime.date = Field(
        ...,
        description="Calendar date of the expense"
    )

    @field_serializer('amount', when_used='json')
    def serialize_amount(self, amount: Decimal) -> float:
        return float(amount)


class Expense(ExpenseBase):
    """
    A recorded expense.

    Persisted as one element of the JSON array under the storage key:
    {"id": ..., "amount": 12.5, "category": "Food", "description": ..., "date": "2024-05-01"}
    """

    id: str = Field(
        default_factory=generate_expense_id,
        min_length=1,
        description="Timestamp + random suffix identifier"
    )

    @classmethod
    def create(cls, data: ExpenseBase) -> "Expense":
        """Create a new expense with a freshly generated id."""
        return cls(id=generate_expense_id(), **data.model_dump(exclude={"id"}))

    def with_updates(self, updates: dict[str, Any]) -> "Expense":
        """
        Return a validated copy with the given fields replaced.

        The id is kept; an "id" entry in updates is ignored.

        Raises:
            pydantic.ValidationError: If the merged record is invalid
        """
        data = self.model_dump()
        data.update({key: value for key, value in updates.items() if key != "id"})
        return Expense.model_validate(data)


class ExpenseFormData(BaseModel):
    """
    Raw form input before validation.

    Everything is a string because that is what the form hands over.
    """

    amount: str = ""
    category: str = ExpenseCategory.FOOD.value
    description: str = ""
    date: str = ""

    @classmethod
    def from_expense(cls, expense: ExpenseBase) -> "ExpenseFormData":
        """Prefill a form from an existing expense (edit mode)."""
        return cls(
            amount=str(expense.amount),
            category=expense.category.value,
            description=expense.description,
            date=expense.date.isoformat(),
        )


# =============================================================================
# FILTER MODELS
# =============================================================================

class DateRange(BaseModel):
    """Inclusive date range. A missing bound leaves that side open."""

    start_date: Optional[datetime.date] = None
    end_date: Optional[datetime.date] = None

    @model_validator(mode='after')
    def validate_bounds(self) -> 'DateRange':
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date")
        return self

    def contains(self, day: datetime.date) -> bool:
        if self.start_date and day < self.start_date:
            return False
        if self.end_date and day > self.end_date:
            return False
        return True


class ExpenseFilters(BaseModel):
    """Active list filters. An empty instance matches every expense."""

    category: Optional[ExpenseCategory] = None
    date_range: Optional[DateRange] = None
    search_term: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return (
            self.category is None
            and self.date_range is None
            and not (self.search_term or "").strip()
        )


# =============================================================================
# AGGREGATE MODELS
# =============================================================================

class CategoryTotal(BaseModel):
    """Sum and count of expenses in one category."""

    category: ExpenseCategory
    total: Decimal = Decimal("0")
    count: int = Field(default=0, ge=0)


class HighestCategory(BaseModel):
    """The category with the largest total."""

    category: ExpenseCategory
    amount: Decimal


class DashboardStats(BaseModel):
    """
    Aggregates shown on the dashboard.

    Always computed from the full expense list, never the filtered one.
    """

    total_expenses: Decimal = Field(
        default=Decimal("0"),
        description="All-time sum of amounts"
    )
    monthly_total: Decimal = Field(
        default=Decimal("0"),
        description="Sum of amounts in the current calendar month"
    )
    highest_category: Optional[HighestCategory] = None
    recent_expenses: list[Expense] = Field(
        default_factory=list,
        description="Most recent expenses, newest first"
    )
    category_breakdown: list[CategoryTotal] = Field(
        default_factory=list,
        description="Per-category totals, largest first"
    )


# =============================================================================
# IMPORT / VALIDATION MODELS
# =============================================================================

class CsvImportResult(BaseModel):
    """Outcome of parsing a CSV file."""

    expenses: list[Expense] = Field(default_factory=list)
    skipped_count: int = Field(default=0, ge=0)

    @property
    def imported_count(self) -> int:
        return len(self.expenses)


class ValidationIssue(BaseModel):
    """A single problem found in form input."""

    field: str = Field(
        ...,
        description="Form field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'invalid_value')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )


class ValidationResult(BaseModel):
    """
    Result of validating an expense form.

    When valid, `expense` holds the parsed fields ready to be saved.
    """

    is_valid: bool
    issues: list[ValidationIssue] = Field(default_factory=list)
    expense: Optional[ExpenseBase] = None

    @property
    def errors(self) -> dict[str, str]:
        """First message per field, for inline display next to inputs."""
        result = {}
        for issue in self.issues:
            result.setdefault(issue.field, issue.message)
        return result
