"""
Abstract Storage Interface

DESIGN DECISION: Storage is split in two layers, each behind an interface:
1. KeyValueStore - string keys to string values, with a byte quota and
   change notifications (the shape of browser local storage)
2. ExpenseStorageInterface - expense-level operations on top of a store

This allows us to:
1. Use in-memory storage for testing
2. Keep the tracker decoupled from where bytes end up
3. Inject the store instead of reaching for a global

The interface is intentionally simple - we're not building a database.
Just the operations we need for expense management.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, NamedTuple, Optional

from expenseflow.models.expense import Expense


class StorageChangeEvent(NamedTuple):
    """A key was changed by another writer."""

    key: str
    old_value: Optional[str]
    new_value: Optional[str]


StorageListener = Callable[[StorageChangeEvent], None]


class KeyValueStore(ABC):
    """
    Abstract string key-value store.

    Subclasses implement the raw reads and writes. Quota accounting,
    listener bookkeeping and change detection live here.

    Change detection compares the backend against the last state this
    instance wrote or observed. Subclasses call _remember() after their
    own writes and _take_snapshot() once their backend is ready.
    """

    def __init__(self, quota_bytes: Optional[int] = None):
        self._quota_bytes = quota_bytes
        self._listeners: list[StorageListener] = []
        self._last_seen: dict[str, str] = {}

    @property
    def quota_bytes(self) -> Optional[int]:
        return self._quota_bytes

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Returns:
            The value, or None if the key is not set

        Raises:
            StorageReadError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """
        Store a value under a key, replacing any previous value.

        Raises:
            QuotaExceededError: If the write would exceed the quota
            StorageError: If the write fails for any other reason
        """
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """
        Remove a key. Removing a missing key is not an error.

        Raises:
            StorageError: If the removal fails
        """
        pass

    @abstractmethod
    def keys(self) -> list[str]:
        """List all keys currently stored."""
        pass

    def used_bytes(self) -> int:
        """Bytes used by all keys and values, UTF-8 encoded."""
        total = 0
        for key in self.keys():
            value = self.get_item(key) or ""
            total += _entry_size(key, value)
        return total

    def subscribe(self, listener: StorageListener) -> Callable[[], None]:
        """
        Register a listener for changes made by other writers.

        Returns:
            A callable that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def poll_changes(self) -> list[StorageChangeEvent]:
        """
        Detect keys changed by other writers since the last poll.

        Every detected change is delivered to subscribers and returned.
        Writes made through this instance never produce events.
        """
        current = {}
        for key in self.keys():
            value = self.get_item(key)
            if value is not None:
                current[key] = value

        events = [
            StorageChangeEvent(key, self._last_seen.get(key), current.get(key))
            for key in sorted(set(current) | set(self._last_seen))
            if self._last_seen.get(key) != current.get(key)
        ]
        self._last_seen = current

        for event in events:
            self._notify(event)
        return events

    def _take_snapshot(self) -> None:
        self._last_seen = {}
        for key in self.keys():
            value = self.get_item(key)
            if value is not None:
                self._last_seen[key] = value

    def _remember(self, key: str, value: Optional[str]) -> None:
        if value is None:
            self._last_seen.pop(key, None)
        else:
            self._last_seen[key] = value

    def _check_quota(self, key: str, value: str) -> None:
        """Raise QuotaExceededError if storing value under key would not fit."""
        if self._quota_bytes is None:
            return
        current = self.get_item(key)
        used = self.used_bytes()
        if current is not None:
            used -= _entry_size(key, current)
        needed = used + _entry_size(key, value)
        if needed > self._quota_bytes:
            raise QuotaExceededError(
                f"Storing '{key}' needs {needed} bytes, quota is {self._quota_bytes}"
            )

    def _notify(self, event: StorageChangeEvent) -> None:
        for listener in list(self._listeners):
            listener(event)


def _entry_size(key: str, value: str) -> int:
    return len(key.encode("utf-8")) + len(value.encode("utf-8"))


class ExpenseStorageInterface(ABC):
    """
    Abstract interface for expense storage operations.

    Failures are reported through return values (False / empty list),
    not exceptions. Implementations log the cause.
    """

    @abstractmethod
    def get_expenses(self) -> list[Expense]:
        """
        Read every stored expense.

        Returns:
            All expenses in stored order; empty if nothing is stored
            or the stored data cannot be read
        """
        pass

    @abstractmethod
    def save_expenses(self, expenses: list[Expense]) -> bool:
        """
        Replace the stored expenses with the given list.

        Returns:
            True if saved successfully
        """
        pass

    @abstractmethod
    def add_expense(self, expense: Expense) -> bool:
        """
        Append an expense.

        Returns:
            True if saved successfully
        """
        pass

    @abstractmethod
    def update_expense(self, expense_id: str, updates: dict[str, Any]) -> bool:
        """
        Merge updates onto an existing expense.

        Args:
            expense_id: The expense's identifier
            updates: Field values to change (amount, category, description, date)

        Returns:
            True if updated successfully, False if not found or invalid
        """
        pass

    @abstractmethod
    def delete_expense(self, expense_id: str) -> bool:
        """
        Delete an expense by ID.

        Returns:
            True if something was deleted and saved
        """
        pass

    @abstractmethod
    def clear_all_expenses(self) -> bool:
        """
        Remove all stored expenses.

        Returns:
            True if cleared successfully
        """
        pass

    @abstractmethod
    def export_data(self) -> str:
        """Serialize all expenses as pretty-printed JSON."""
        pass

    @abstractmethod
    def import_data(self, json_data: str) -> bool:
        """
        Replace all expenses with a JSON array produced by export_data.

        Returns:
            True if the data was valid and saved
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageReadError(StorageError):
    """Stored data could not be read."""
    pass


class QuotaExceededError(StorageError):
    """A write would exceed the store's quota."""
    pass
