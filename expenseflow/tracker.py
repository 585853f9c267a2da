"""
Expense Tracker

This module ties together storage, validation, CSV exchange and
aggregation behind one object the UI talks to.

It holds:
1. The in-memory list of all expenses (loaded from storage)
2. The active filters
3. Derived views: filtered list, category totals, dashboard stats

DESIGN DECISION: Storage is the source of truth. In-memory state is only
changed after storage reports success, and a change made by another
writer (another tab or process) triggers a full reload.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Callable, Optional

from pydantic import ValidationError

from expenseflow.config import Settings, get_settings
from expenseflow.logging_config import configure_logging, get_logger
from expenseflow.models.expense import (
    CategoryTotal,
    CsvImportResult,
    DashboardStats,
    Expense,
    ExpenseBase,
    ExpenseFilters,
    ExpenseFormData,
    ValidationResult,
)
from expenseflow.queries import (
    DEFAULT_RECENT_LIMIT,
    compute_category_totals,
    compute_dashboard_stats,
    compute_total_amount,
    filter_expenses,
)
from expenseflow.services.exchange import export_filename, export_to_csv, parse_csv
from expenseflow.services.storage import (
    DEFAULT_STORAGE_KEY,
    ExpenseStorageInterface,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    LocalExpenseStorage,
    StorageChangeEvent,
    StorageError,
)
from expenseflow.services.storage.expense_storage import AlertCallback, log_alert
from expenseflow.validation import ExpenseValidator


logger = get_logger(__name__)

INVALID_CSV_MESSAGE = "Failed to parse CSV file. Please check the file format."
INVALID_BACKUP_MESSAGE = "Invalid backup file. No expenses were changed."


class ExpenseTracker:
    """
    Stateful view over stored expenses.

    Flow for every mutation:
    1. Build/validate the new record
    2. Write through storage
    3. On success, update the in-memory list
    """

    def __init__(
        self,
        storage: ExpenseStorageInterface,
        validator: Optional[ExpenseValidator] = None,
        alert: Optional[AlertCallback] = None,
        recent_limit: int = DEFAULT_RECENT_LIMIT,
        today: Optional[Callable[[], date]] = None,
    ):
        self._storage = storage
        self._validator = validator or ExpenseValidator()
        self._alert = alert or log_alert
        self._recent_limit = recent_limit
        self._today = today or date.today
        self._filters = ExpenseFilters()
        self._expenses: list[Expense] = []
        self._store: Optional[KeyValueStore] = None
        self._storage_key = DEFAULT_STORAGE_KEY
        self._unsubscribe: Optional[Callable[[], None]] = None
        self.reload()

    # ------------------------------------------------------------------
    # Loading and change notifications
    # ------------------------------------------------------------------

    def reload(self) -> None:
        """Replace in-memory state with what storage holds now."""
        self._expenses = self._storage.get_expenses()
        logger.debug("expenses_loaded", count=len(self._expenses))

    def watch(self, store: KeyValueStore, storage_key: str = DEFAULT_STORAGE_KEY) -> None:
        """Reload whenever another writer changes the expenses key."""
        self.unwatch()
        self._store = store
        self._storage_key = storage_key
        self._unsubscribe = store.subscribe(self.handle_storage_change)

    def unwatch(self) -> None:
        if self._unsubscribe:
            self._unsubscribe()
        self._unsubscribe = None
        self._store = None

    def handle_storage_change(self, event: StorageChangeEvent) -> None:
        if event.key == self._storage_key:
            logger.info("external_change_detected", key=event.key)
            self.reload()

    def poll_storage(self) -> bool:
        """
        Ask the watched store for changes made by other writers.

        Mutations call this first, so a write never builds on a list
        another writer has already replaced.

        Returns:
            True if the expenses key changed (and state was reloaded)
        """
        if self._store is None:
            return False
        events = self._store.poll_changes()
        return any(event.key == self._storage_key for event in events)

    # ------------------------------------------------------------------
    # Filters and derived views
    # ------------------------------------------------------------------

    @property
    def validator(self) -> ExpenseValidator:
        return self._validator

    @property
    def filters(self) -> ExpenseFilters:
        return self._filters

    def set_filters(self, filters: ExpenseFilters) -> None:
        self._filters = filters

    def clear_filters(self) -> None:
        self._filters = ExpenseFilters()

    @property
    def all_expenses(self) -> list[Expense]:
        return list(self._expenses)

    @property
    def expenses(self) -> list[Expense]:
        """Expenses matching the active filters."""
        return filter_expenses(self._expenses, self._filters)

    @property
    def category_totals(self) -> list[CategoryTotal]:
        """Per-category totals of the filtered list."""
        return compute_category_totals(self.expenses)

    @property
    def dashboard_stats(self) -> DashboardStats:
        """Dashboard aggregates over all expenses, ignoring filters."""
        return compute_dashboard_stats(
            self._expenses,
            today=self._today(),
            recent_limit=self._recent_limit,
        )

    @property
    def total_count(self) -> int:
        """Number of stored expenses, ignoring filters."""
        return len(self._expenses)

    @property
    def total_amount(self) -> Decimal:
        """Sum of the filtered list."""
        return compute_total_amount(self.expenses)

    def get_expense(self, expense_id: str) -> Optional[Expense]:
        for expense in self._expenses:
            if expense.id == expense_id:
                return expense
        return None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_expense(self, data: ExpenseBase) -> Optional[Expense]:
        """
        Record a new expense.

        Returns:
            The stored expense with its generated id, or None if saving failed
        """
        self.poll_storage()
        expense = Expense.create(data)
        if not self._storage.add_expense(expense):
            logger.warning("expense_add_failed", expense_id=expense.id)
            return None

        self._expenses.append(expense)
        logger.info(
            "expense_added",
            expense_id=expense.id,
            category=expense.category.value,
            amount=str(expense.amount),
        )
        return expense

    def add_from_form(
        self,
        form: ExpenseFormData,
    ) -> tuple[Optional[Expense], ValidationResult]:
        """Validate form input and add it if valid."""
        result = self._validator.validate_form(form)
        if not result.is_valid:
            return None, result
        return self.add_expense(result.expense), result

    def update_expense(self, expense_id: str, updates: dict[str, Any]) -> bool:
        """Apply a partial update. The id cannot be changed."""
        self.poll_storage()
        if not self._storage.update_expense(expense_id, updates):
            return False

        for index, expense in enumerate(self._expenses):
            if expense.id == expense_id:
                try:
                    self._expenses[index] = expense.with_updates(updates)
                except ValidationError:
                    self.reload()
                break
        else:
            # Stored by someone else since our last load
            self.reload()

        logger.info("expense_updated", expense_id=expense_id, fields=sorted(updates))
        return True

    def update_from_form(
        self,
        expense_id: str,
        form: ExpenseFormData,
    ) -> tuple[bool, ValidationResult]:
        """Validate form input and apply it to an existing expense."""
        result = self._validator.validate_form(form)
        if not result.is_valid:
            return False, result
        return self.update_expense(expense_id, result.expense.model_dump()), result

    def delete_expense(self, expense_id: str) -> bool:
        self.poll_storage()
        if not self._storage.delete_expense(expense_id):
            return False

        self._expenses = [
            expense for expense in self._expenses if expense.id != expense_id
        ]
        logger.info("expense_deleted", expense_id=expense_id)
        return True

    def clear_all(self) -> bool:
        if not self._storage.clear_all_expenses():
            return False
        self._expenses = []
        logger.info("expenses_cleared")
        return True

    # ------------------------------------------------------------------
    # Import / export
    # ------------------------------------------------------------------

    def export_csv(self) -> str:
        """CSV of the filtered list."""
        return export_to_csv(self.expenses)

    def export_filename(self) -> str:
        return export_filename(self._today())

    def import_csv(self, csv_text: str) -> Optional[CsvImportResult]:
        """
        Append the expenses found in a CSV file to the stored ones.

        Returns:
            What was imported, or None if the file was rejected or
            could not be saved
        """
        result = parse_csv(csv_text)
        if result is None:
            self._alert(INVALID_CSV_MESSAGE)
            return None

        if result.expenses:
            existing = self._storage.get_expenses()
            if not self._storage.save_expenses(existing + result.expenses):
                return None
            self.reload()

        logger.info(
            "csv_imported",
            imported=result.imported_count,
            skipped=result.skipped_count,
        )
        return result

    def export_json(self) -> str:
        """Full JSON backup, ignoring filters."""
        return self._storage.export_data()

    def import_json(self, json_text: str) -> bool:
        """Replace everything with a JSON backup."""
        if not self._storage.import_data(json_text):
            self._alert(INVALID_BACKUP_MESSAGE)
            return False
        self.reload()
        logger.info("json_imported", count=len(self._expenses))
        return True


def create_app_components(
    settings: Optional[Settings] = None,
    alert: Optional[AlertCallback] = None,
) -> tuple[ExpenseTracker, KeyValueStore]:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to use; defaults to the cached get_settings()
        alert: Where user-facing failures are reported

    Returns:
        (tracker, store) - the tracker is already watching the store
    """
    settings = settings or get_settings()
    app_settings = settings.app
    storage_settings = settings.storage

    configure_logging("DEBUG" if app_settings.debug_mode else app_settings.log_level)

    store: KeyValueStore
    if storage_settings.backend == "memory":
        store = InMemoryKeyValueStore(quota_bytes=storage_settings.quota_bytes)
    else:
        try:
            store = JsonFileKeyValueStore(
                storage_settings.data_dir,
                quota_bytes=storage_settings.quota_bytes,
            )
        except StorageError as e:
            # Continue with a session-only store rather than not starting
            logger.error("file_store_unavailable", error=str(e))
            store = InMemoryKeyValueStore(quota_bytes=storage_settings.quota_bytes)

    storage = LocalExpenseStorage(
        store,
        storage_key=storage_settings.storage_key,
        alert=alert,
    )
    tracker = ExpenseTracker(
        storage,
        alert=alert,
        recent_limit=app_settings.recent_expenses_limit,
    )
    tracker.watch(store, storage_settings.storage_key)

    logger.info(
        "app_components_created",
        environment=app_settings.app_environment,
        backend=type(store).__name__,
        storage_key=storage_settings.storage_key,
        expenses=tracker.total_count,
    )
    return tracker, store
