"""
Storage Services Package

Provides abstract interfaces and local implementations for data storage.
Expenses live under one key of a key-value store; the store itself is
either in memory or a directory of JSON files.
"""

from expenseflow.services.storage.interface import (
    ExpenseStorageInterface,
    KeyValueStore,
    QuotaExceededError,
    StorageChangeEvent,
    StorageError,
    StorageReadError,
)
from expenseflow.services.storage.local_store import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
)
from expenseflow.services.storage.expense_storage import (
    DEFAULT_STORAGE_KEY,
    QUOTA_EXCEEDED_MESSAGE,
    LocalExpenseStorage,
)

__all__ = [
    # Interfaces
    "ExpenseStorageInterface",
    "KeyValueStore",
    "StorageChangeEvent",
    # Exceptions
    "QuotaExceededError",
    "StorageError",
    "StorageReadError",
    # Local implementations
    "DEFAULT_STORAGE_KEY",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "LocalExpenseStorage",
    "QUOTA_EXCEEDED_MESSAGE",
]
