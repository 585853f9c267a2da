"""
CSV Import / Export

Format:
    Date,Amount,Category,Description
    2024-05-01,12.50,Food,"Lunch with ""the team"" at noon"

Export always quotes the description and doubles embedded quotes.
Import accepts the four headers in any order and any case, and skips
rows it cannot turn into an expense without complaining about them.
Quoted fields may contain commas, doubled quotes and line breaks.
"""

import csv
import io
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from pydantic import ValidationError

from expenseflow.logging_config import get_logger
from expenseflow.models.expense import (
    CsvImportResult,
    Expense,
    ExpenseBase,
    ExpenseCategory,
)


logger = get_logger(__name__)

CSV_HEADERS = ["Date", "Amount", "Category", "Description"]


def export_to_csv(expenses: Iterable[Expense]) -> str:
    """Render expenses as CSV text, header row first."""
    lines = [",".join(CSV_HEADERS)]
    for expense in expenses:
        description = expense.description.replace('"', '""')
        lines.append(
            f'{expense.date.isoformat()},'
            f'{expense.amount:.2f},'
            f'{expense.category.value},'
            f'"{description}"'
        )
    return "\n".join(lines)


def export_filename(today: Optional[date] = None) -> str:
    """Download name for an export made on the given day."""
    today = today or date.today()
    return f"expenses_{today.isoformat()}.csv"


def _parse_row(values: list[str], indexes: dict[str, int]) -> Optional[Expense]:
    try:
        date_text = values[indexes["date"]].strip()
        amount_text = values[indexes["amount"]].strip()
        category_text = values[indexes["category"]].strip()
        description = values[indexes["description"]].strip()
    except IndexError:
        return None

    if not date_text or not description:
        return None

    try:
        amount = Decimal(amount_text)
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None

    try:
        category = ExpenseCategory(category_text)
    except ValueError:
        return None

    try:
        data = ExpenseBase(
            amount=amount,
            category=category,
            description=description,
            date=date_text,
        )
    except ValidationError:
        return None

    return Expense.create(data)


def parse_csv(csv_text: str) -> Optional[CsvImportResult]:
    """
    Parse CSV text into new expenses.

    Returns:
        The parsed expenses (each with a fresh id) and how many rows were
        skipped, or None if the text has no data rows or lacks one of the
        required headers
    """
    # skipinitialspace lets `a, "b"` unquote the same way as `a,"b"`
    rows = list(csv.reader(io.StringIO(csv_text.strip()), skipinitialspace=True))
    if len(rows) < 2:
        logger.info("csv_import_rejected", reason="no data rows")
        return None

    headers = [header.strip().lower() for header in rows[0]]

    indexes = {}
    for name in ("date", "amount", "category", "description"):
        if name not in headers:
            logger.info("csv_import_rejected", reason="missing header", header=name)
            return None
        indexes[name] = headers.index(name)

    result = CsvImportResult()
    for row_number, values in enumerate(rows[1:], start=2):
        expense = _parse_row(values, indexes)
        if expense is None:
            logger.debug("csv_row_skipped", row=row_number)
            result.skipped_count += 1
            continue
        result.expenses.append(expense)

    logger.info(
        "csv_parsed",
        imported=result.imported_count,
        skipped=result.skipped_count,
    )
    return result
