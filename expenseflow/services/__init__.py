"""Services package."""

from expenseflow.services.exchange import (
    CSV_HEADERS,
    export_filename,
    export_to_csv,
    parse_csv,
)
from expenseflow.services.storage import (
    DEFAULT_STORAGE_KEY,
    QUOTA_EXCEEDED_MESSAGE,
    ExpenseStorageInterface,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    LocalExpenseStorage,
    QuotaExceededError,
    StorageChangeEvent,
    StorageError,
    StorageReadError,
)

__all__ = [
    # CSV exchange
    "CSV_HEADERS",
    "export_filename",
    "export_to_csv",
    "parse_csv",
    # Storage services
    "DEFAULT_STORAGE_KEY",
    "ExpenseStorageInterface",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "LocalExpenseStorage",
    "QUOTA_EXCEEDED_MESSAGE",
    "QuotaExceededError",
    "StorageChangeEvent",
    "StorageError",
    "StorageReadError",
]
