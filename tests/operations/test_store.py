"""Tests for the memory and SQLite operation stores."""

import dataclasses
import sqlite3

import pytest

from opledger.core.errors import ErrorCategory, StorageError
from opledger.operations import (
    MemoryOperationStore,
    Operation,
    OperationRegistry,
    OperationStatus,
    OperationStep,
    OperationStore,
    SQLiteOperationStore,
)


def _op(resource_id="ws-1", now=1.0, **kw):
    return Operation.create(resource_id, f"/workspaces/{resource_id}", 1, "deploy", now=now, **kw)


@pytest.fixture(params=["memory", "sqlite"])
def store(request):
    if request.param == "memory":
        yield MemoryOperationStore()
    else:
        s = SQLiteOperationStore(":memory:")
        yield s
        s.close()


class TestStoreContract:
    def test_satisfies_protocol(self, store):
        assert isinstance(store, OperationStore)

    def test_insert_and_get(self, store):
        op = _op(user={"id": "u-1", "name": "Ada"})
        store.insert(op)
        assert store.get(op.id) == op

    def test_get_missing(self, store):
        assert store.get("nope") is None

    def test_replace(self, store):
        op = _op()
        store.insert(op)
        updated = dataclasses.replace(
            op,
            status=OperationStatus.DEPLOYING,
            steps=(OperationStep("a", "deploying", step_title="A", updated_when=2.0),),
            updated_when=2.0,
        )
        store.replace(updated)
        assert store.get(op.id) == updated

    def test_all_filters_by_resource(self, store):
        a, b = _op("ws-1"), _op("ws-2")
        store.insert(a)
        store.insert(b)
        assert {op.id for op in store.all()} == {a.id, b.id}
        assert [op.id for op in store.all("ws-2")] == [b.id]


class TestSQLiteOperationStore:
    def test_persists_across_connections(self, tmp_path):
        path = tmp_path / "nested" / "ops.db"
        store = SQLiteOperationStore(path)
        registry = OperationRegistry(store)
        op = registry.create_operation("ws-1", "/ws", 1, "action")
        registry.report_status(op.id, "action_succeeded")
        store.close()

        reopened = SQLiteOperationStore(path)
        try:
            stored = reopened.get(op.id)
            assert stored.status.value == "action_succeeded"
            assert stored.steps is None
        finally:
            reopened.close()

    def test_duplicate_insert_raises_storage_error(self, sqlite_store):
        op = _op()
        sqlite_store.insert(op)
        with pytest.raises(StorageError) as exc_info:
            sqlite_store.insert(op)
        assert exc_info.value.category == ErrorCategory.STORAGE
        assert exc_info.value.context.operation_id == op.id
        assert isinstance(exc_info.value.__cause__, sqlite3.IntegrityError)

    def test_read_after_close_raises_storage_error(self):
        store = SQLiteOperationStore(":memory:")
        store.close()
        with pytest.raises(StorageError):
            store.get("anything")
