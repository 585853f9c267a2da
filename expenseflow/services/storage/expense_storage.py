"""
Local Expense Storage

Expenses are kept as a single JSON array under one key of a
KeyValueStore. Every operation is a full read-modify-write of that array.

DESIGN DECISION: Failures stop here. Storage errors are logged, the user
is alerted where there is something they can do about it (quota), and the
caller gets False or an empty list. Malformed records in the stored array
are skipped one by one rather than discarding the whole array.
"""

import json
from decimal import Decimal
from typing import Any, Callable, Optional

from pydantic import ValidationError

from expenseflow.logging_config import get_logger
from expenseflow.models.expense import Expense
from expenseflow.services.storage.interface import (
    ExpenseStorageInterface,
    KeyValueStore,
    QuotaExceededError,
    StorageError,
)


logger = get_logger(__name__)

DEFAULT_STORAGE_KEY = "expenses"

QUOTA_EXCEEDED_MESSAGE = "Storage quota exceeded. Please delete some old expenses."

AlertCallback = Callable[[str], None]

# Fields every record must carry to be accepted by import_data
REQUIRED_FIELDS = ("id", "amount", "category", "description", "date")


def log_alert(message: str) -> None:
    """Default alert: nobody is watching a UI, so log it."""
    logger.warning("user_alert", message=message)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


class LocalExpenseStorage(ExpenseStorageInterface):
    """
    Expense storage on top of a KeyValueStore.

    The store and the alert callback are injected, so the same class
    serves the file backend, the in-memory backend and the tests.
    """

    def __init__(
        self,
        store: KeyValueStore,
        storage_key: str = DEFAULT_STORAGE_KEY,
        alert: Optional[AlertCallback] = None,
    ):
        self._store = store
        self._storage_key = storage_key
        self._alert = alert or log_alert

    @property
    def store(self) -> KeyValueStore:
        return self._store

    @property
    def storage_key(self) -> str:
        return self._storage_key

    def _parse_records(self, raw: str) -> list[Expense]:
        """Parse the stored JSON array, skipping records that don't validate."""
        data = json.loads(raw, parse_float=Decimal)
        if not isinstance(data, list):
            logger.warning(
                "stored_data_not_a_list",
                key=self._storage_key,
                type=type(data).__name__,
            )
            return []

        expenses = []
        for index, record in enumerate(data):
            try:
                expenses.append(Expense.model_validate(record))
            except ValidationError as e:
                logger.warning(
                    "stored_expense_skipped",
                    key=self._storage_key,
                    index=index,
                    error=str(e),
                )
        return expenses

    def _serialize(self, expenses: list[Expense], indent: Optional[int] = None) -> str:
        return json.dumps(
            [expense.model_dump(mode="json") for expense in expenses],
            indent=indent,
            ensure_ascii=False,
        )

    def get_expenses(self) -> list[Expense]:
        """Read all expenses; empty list if nothing usable is stored."""
        try:
            raw = self._store.get_item(self._storage_key)
            if raw is None:
                return []
            return self._parse_records(raw)
        except (StorageError, ValueError) as e:
            logger.error(
                "storage_read_failed",
                key=self._storage_key,
                error=str(e),
            )
            return []

    def save_expenses(self, expenses: list[Expense]) -> bool:
        """Replace the stored array."""
        try:
            self._store.set_item(self._storage_key, self._serialize(expenses))
        except QuotaExceededError as e:
            logger.error(
                "storage_quota_exceeded",
                key=self._storage_key,
                count=len(expenses),
                error=str(e),
            )
            self._alert(QUOTA_EXCEEDED_MESSAGE)
            return False
        except StorageError as e:
            logger.error(
                "storage_write_failed",
                key=self._storage_key,
                error=str(e),
            )
            return False

        logger.debug("expenses_saved", key=self._storage_key, count=len(expenses))
        return True

    def add_expense(self, expense: Expense) -> bool:
        """Append one expense."""
        expenses = self.get_expenses()
        expenses.append(expense)
        return self.save_expenses(expenses)

    def update_expense(self, expense_id: str, updates: dict[str, Any]) -> bool:
        """Merge updates onto the first expense with this id."""
        expenses = self.get_expenses()

        for index, expense in enumerate(expenses):
            if expense.id == expense_id:
                try:
                    expenses[index] = expense.with_updates(updates)
                except ValidationError as e:
                    logger.warning(
                        "expense_update_rejected",
                        expense_id=expense_id,
                        error=str(e),
                    )
                    return False
                return self.save_expenses(expenses)

        logger.info("expense_not_found", expense_id=expense_id)
        return False

    def delete_expense(self, expense_id: str) -> bool:
        """Delete every expense with this id."""
        expenses = self.get_expenses()
        remaining = [expense for expense in expenses if expense.id != expense_id]

        if len(remaining) == len(expenses):
            logger.info("expense_not_found", expense_id=expense_id)
            return False

        return self.save_expenses(remaining)

    def clear_all_expenses(self) -> bool:
        """Remove the storage key entirely."""
        try:
            self._store.remove_item(self._storage_key)
            return True
        except StorageError as e:
            logger.error(
                "storage_clear_failed",
                key=self._storage_key,
                error=str(e),
            )
            return False

    def export_data(self) -> str:
        """Pretty-printed JSON of all expenses."""
        return self._serialize(self.get_expenses(), indent=2)

    def import_data(self, json_data: str) -> bool:
        """
        Replace all expenses with a JSON backup.

        The whole import is rejected if the payload is not an array or
        any record is incomplete or invalid.
        """
        try:
            data = json.loads(json_data, parse_float=Decimal)
        except ValueError as e:
            logger.error("import_invalid_json", error=str(e))
            return False

        if not isinstance(data, list):
            logger.error("import_invalid_format", type=type(data).__name__)
            return False

        expenses = []
        for index, record in enumerate(data):
            if not isinstance(record, dict):
                logger.error("import_invalid_expense", index=index, reason="not an object")
                return False
            missing = [field for field in REQUIRED_FIELDS if not record.get(field)]
            if missing or not _is_number(record["amount"]):
                logger.error(
                    "import_invalid_expense",
                    index=index,
                    missing=missing,
                )
                return False
            try:
                expenses.append(Expense.model_validate(record))
            except ValidationError as e:
                logger.error("import_invalid_expense", index=index, error=str(e))
                return False

        return self.save_expenses(expenses)
