"""Tests for the key-value stores and expense storage."""

import json

import pytest
from datetime import date
from decimal import Decimal

from expenseflow.models import ExpenseCategory
from expenseflow.services.storage import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    LocalExpenseStorage,
    QuotaExceededError,
    StorageError,
)
from expenseflow.services.storage.expense_storage import QUOTA_EXCEEDED_MESSAGE


class TestInMemoryStore:
    """Tests for the dict-backed store."""

    def test_set_get_remove(self, memory_store):
        assert memory_store.get_item("a") is None
        memory_store.set_item("a", "1")
        assert memory_store.get_item("a") == "1"
        assert memory_store.keys() == ["a"]
        memory_store.remove_item("a")
        assert memory_store.get_item("a") is None
        memory_store.remove_item("a")

    def test_used_bytes_counts_keys_and_values(self, memory_store):
        memory_store.set_item("ab", "₱")
        assert memory_store.used_bytes() == 2 + 3

    def test_quota_exceeded(self):
        store = InMemoryKeyValueStore(quota_bytes=10)
        store.set_item("k", "12345")
        with pytest.raises(QuotaExceededError):
            store.set_item("other", "123456789")
        assert store.get_item("other") is None

    def test_quota_counts_replacement_not_addition(self):
        store = InMemoryKeyValueStore(quota_bytes=10)
        store.set_item("k", "123456789")
        store.set_item("k", "987654321")
        assert store.get_item("k") == "987654321"


class TestChangeNotifications:
    """Tests for detecting writes made by another store instance."""

    def test_own_writes_are_not_reported(self, memory_store):
        events = []
        memory_store.subscribe(events.append)
        memory_store.set_item("expenses", "[]")
        memory_store.remove_item("expenses")
        assert memory_store.poll_changes() == []
        assert events == []

    def test_other_writer_is_reported(self):
        shared = {}
        tab_a = InMemoryKeyValueStore(shared)
        tab_b = InMemoryKeyValueStore(shared)
        events = []
        tab_a.subscribe(events.append)

        tab_b.set_item("expenses", "[1]")
        changes = tab_a.poll_changes()

        assert len(changes) == 1
        assert changes[0].key == "expenses"
        assert changes[0].old_value is None
        assert changes[0].new_value == "[1]"
        assert events == changes

        # Already seen
        assert tab_a.poll_changes() == []

    def test_removal_is_reported(self):
        shared = {"expenses": "[]"}
        tab_a = InMemoryKeyValueStore(shared)
        tab_b = InMemoryKeyValueStore(shared)
        tab_b.remove_item("expenses")

        changes = tab_a.poll_changes()
        assert changes[0].old_value == "[]"
        assert changes[0].new_value is None

    def test_unsubscribe(self):
        shared = {}
        tab_a = InMemoryKeyValueStore(shared)
        tab_b = InMemoryKeyValueStore(shared)
        events = []
        unsubscribe = tab_a.subscribe(events.append)
        unsubscribe()

        tab_b.set_item("k", "v")
        assert len(tab_a.poll_changes()) == 1
        assert events == []


class TestJsonFileStore:
    """Tests for the directory-backed store."""

    def test_creates_directory(self, tmp_path):
        store = JsonFileKeyValueStore(tmp_path / "nested" / "dir")
        assert store.data_dir.is_dir()

    def test_values_are_files(self, file_store):
        file_store.set_item("expenses", "[]")
        assert (file_store.data_dir / "expenses.json").read_text(encoding="utf-8") == "[]"
        assert file_store.keys() == ["expenses"]

    def test_persists_across_instances(self, tmp_path):
        JsonFileKeyValueStore(tmp_path).set_item("k", "value")
        assert JsonFileKeyValueStore(tmp_path).get_item("k") == "value"

    def test_remove_missing_key(self, file_store):
        file_store.remove_item("missing")
        assert file_store.get_item("missing") is None

    def test_rejects_path_in_key(self, file_store):
        with pytest.raises(ValueError):
            file_store.set_item("../escape", "x")

    def test_other_process_change_detected(self, tmp_path):
        reader = JsonFileKeyValueStore(tmp_path)
        writer = JsonFileKeyValueStore(tmp_path)
        writer.set_item("expenses", "[]")
        changes = reader.poll_changes()
        assert [change.key for change in changes] == ["expenses"]

    def test_unusable_directory(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        with pytest.raises(StorageError):
            JsonFileKeyValueStore(blocker / "data")


class TestLocalExpenseStorage:
    """Tests for expense operations over a key-value store."""

    def test_empty_storage(self, storage):
        assert storage.get_expenses() == []

    def test_add_and_get(self, storage, make_expense):
        first = make_expense(description="First")
        second = make_expense(description="Second")
        assert storage.add_expense(first)
        assert storage.add_expense(second)
        assert storage.get_expenses() == [first, second]

    def test_stored_shape(self, storage, memory_store, make_expense):
        storage.add_expense(make_expense(id="x1", amount=Decimal("12.5"), date=date(2024, 5, 1)))
        data = json.loads(memory_store.get_item("expenses"))
        assert data == [{
            "id": "x1",
            "amount": 12.5,
            "category": "Food",
            "description": "Lunch",
            "date": "2024-05-01",
        }]

    def test_update(self, storage, make_expense):
        expense = make_expense(id="x1")
        storage.add_expense(expense)
        assert storage.update_expense("x1", {"amount": Decimal("99"), "id": "nope"})
        stored = storage.get_expenses()[0]
        assert stored.id == "x1"
        assert stored.amount == Decimal("99")

    def test_update_unknown_id(self, storage, make_expense):
        storage.add_expense(make_expense())
        assert not storage.update_expense("missing", {"description": "x"})

    def test_update_rejects_invalid_values(self, storage, make_expense):
        storage.add_expense(make_expense(id="x1"))
        assert not storage.update_expense("x1", {"amount": Decimal("0")})
        assert storage.get_expenses()[0].amount == Decimal("10.00")

    def test_delete(self, storage, make_expense):
        storage.add_expense(make_expense(id="x1"))
        storage.add_expense(make_expense(id="x2"))
        assert storage.delete_expense("x1")
        assert [expense.id for expense in storage.get_expenses()] == ["x2"]
        assert not storage.delete_expense("x1")

    def test_delete_removes_duplicates(self, storage, make_expense):
        storage.save_expenses([make_expense(id="dup"), make_expense(id="dup")])
        assert storage.delete_expense("dup")
        assert storage.get_expenses() == []

    def test_clear_all(self, storage, memory_store, make_expense):
        storage.add_expense(make_expense())
        assert storage.clear_all_expenses()
        assert memory_store.get_item("expenses") is None
        assert storage.get_expenses() == []

    def test_corrupt_json_reads_as_empty(self, storage, memory_store):
        memory_store.set_item("expenses", "{not json")
        assert storage.get_expenses() == []

    def test_non_list_reads_as_empty(self, storage, memory_store):
        memory_store.set_item("expenses", '{"id": "x"}')
        assert storage.get_expenses() == []

    def test_invalid_records_are_skipped(self, storage, memory_store):
        memory_store.set_item("expenses", json.dumps([
            {"id": "ok", "amount": 5, "category": "Food", "description": "A", "date": "2024-05-01"},
            {"id": "bad", "amount": -1, "category": "Food", "description": "B", "date": "2024-05-01"},
            {"id": "bad2", "amount": 5, "category": "Shopping", "description": "C", "date": "2024-05-01"},
        ]))
        assert [expense.id for expense in storage.get_expenses()] == ["ok"]

    def test_quota_exceeded_alerts(self, alerts, make_expense):
        store = InMemoryKeyValueStore(quota_bytes=1024)
        storage = LocalExpenseStorage(store, alert=alerts.append)

        saved = storage.save_expenses([make_expense() for _ in range(50)])

        assert not saved
        assert alerts == [QUOTA_EXCEEDED_MESSAGE]
        assert store.get_item("expenses") is None

    def test_custom_storage_key(self, memory_store, make_expense):
        storage = LocalExpenseStorage(memory_store, storage_key="other")
        storage.add_expense(make_expense())
        assert memory_store.keys() == ["other"]


class TestJsonBackup:
    """Tests for JSON export and import."""

    def test_export_is_pretty_printed(self, storage, make_expense):
        storage.add_expense(make_expense(id="x1"))
        exported = storage.export_data()
        assert exported.startswith("[\n  {")
        assert json.loads(exported)[0]["id"] == "x1"

    def test_export_import_restores(self, storage, make_expense):
        original = [make_expense(amount=Decimal("1.10")), make_expense(category=ExpenseCategory.HEALTHCARE)]
        storage.save_expenses(original)
        backup = storage.export_data()

        storage.clear_all_expenses()
        assert storage.import_data(backup)
        assert storage.get_expenses() == original

    def test_import_replaces_existing(self, storage, make_expense):
        storage.add_expense(make_expense(id="old"))
        payload = json.dumps([
            {"id": "new", "amount": 3, "category": "Other", "description": "New", "date": "2024-05-01"},
        ])
        assert storage.import_data(payload)
        assert [expense.id for expense in storage.get_expenses()] == ["new"]

    @pytest.mark.parametrize("payload", [
        "not json",
        '{"id": "x"}',
        '[{"id": "x", "amount": 3, "category": "Food", "date": "2024-05-01"}]',
        '[{"id": "x", "amount": "3", "category": "Food", "description": "A", "date": "2024-05-01"}]',
        '[{"id": "x", "amount": 3, "category": "Shopping", "description": "A", "date": "2024-05-01"}]',
        '[1, 2]',
    ])
    def test_import_rejects_invalid(self, storage, make_expense, payload):
        storage.add_expense(make_expense(id="keep"))
        assert not storage.import_data(payload)
        assert [expense.id for expense in storage.get_expenses()] == ["keep"]
