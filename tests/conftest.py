"""Shared fixtures for ExpenseFlow tests."""

import pytest
from datetime import date
from decimal import Decimal

from expenseflow.models import Expense, ExpenseCategory
from expenseflow.services.storage import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    LocalExpenseStorage,
)


TODAY = date(2024, 5, 15)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def alerts():
    """Collects messages passed to the alert callback."""
    return []


@pytest.fixture
def memory_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def file_store(tmp_path):
    return JsonFileKeyValueStore(tmp_path / "data")


@pytest.fixture
def storage(memory_store, alerts):
    return LocalExpenseStorage(memory_store, alert=alerts.append)


@pytest.fixture
def make_expense():
    """Factory for valid expenses with overridable fields."""
    counter = iter(range(1, 10_000))

    def _make(**overrides) -> Expense:
        fields = {
            "id": f"exp-{next(counter)}",
            "amount": Decimal("10.00"),
            "category": ExpenseCategory.FOOD,
            "description": "Lunch",
            "date": TODAY,
        }
        fields.update(overrides)
        return Expense(**fields)

    return _make
