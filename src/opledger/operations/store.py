"""Operation stores — the persistence collaborator behind the registry.

The registry owns concurrency and lifecycle rules; a store only keeps
records. Any object with the ``OperationStore`` methods can back a registry.

ARCHITECTURE
────────────
::

    OperationStore (Protocol)
      ├── .insert(operation)      ─ persist a new record
      ├── .replace(operation)     ─ overwrite a record by id
      ├── .get(operation_id)      ─ record or None
      └── .all(resource_id=None)  ─ snapshot of records

    Implementations:
      MemoryOperationStore ─ dict, per-process  (tests, single node)
      SQLiteOperationStore ─ one JSON document per row

Stores never retry. SQLite failures are raised as
:class:`~opledger.core.errors.StorageError` with the driver error chained.

Table::

    operations
      id            TEXT PRIMARY KEY
      resource_id   TEXT
      status        TEXT
      created_when  REAL
      updated_when  REAL
      document      TEXT   -- Operation.to_dict() as JSON
"""

from __future__ import annotations

import json
import sqlite3
import threading
from pathlib import Path
from typing import Protocol, runtime_checkable

from opledger.core.errors import StorageError

from .models import Operation


@runtime_checkable
class OperationStore(Protocol):
    """Where operation records live."""

    def insert(self, operation: Operation) -> None:
        """Persist a new record."""
        ...

    def replace(self, operation: Operation) -> None:
        """Overwrite the record with the same id."""
        ...

    def get(self, operation_id: str) -> Operation | None:
        """Return the record, or None if unknown."""
        ...

    def all(self, resource_id: str | None = None) -> list[Operation]:
        """Snapshot of all records, optionally for one resource."""
        ...


class MemoryOperationStore:
    """In-memory store. Records are frozen, so sharing them is safe."""

    def __init__(self) -> None:
        self._operations: dict[str, Operation] = {}
        self._lock = threading.Lock()

    def insert(self, operation: Operation) -> None:
        with self._lock:
            self._operations[operation.id] = operation

    def replace(self, operation: Operation) -> None:
        with self._lock:
            self._operations[operation.id] = operation

    def get(self, operation_id: str) -> Operation | None:
        with self._lock:
            return self._operations.get(operation_id)

    def all(self, resource_id: str | None = None) -> list[Operation]:
        with self._lock:
            operations = list(self._operations.values())
        if resource_id is not None:
            operations = [op for op in operations if op.resource_id == resource_id]
        return operations

    def clear(self) -> None:
        """Clear all records (for testing)."""
        with self._lock:
            self._operations.clear()


class SQLiteOperationStore:
    """SQLite-backed store, one JSON document per operation.

    A single connection is shared across threads and guarded by a lock;
    each write commits immediately.

    Example:
        >>> store = SQLiteOperationStore(":memory:")
        >>> store.insert(Operation.create("ws-1", "/ws/ws-1", 1, "deploy"))
    """

    def __init__(self, path: str | Path = ":memory:") -> None:
        if str(path) != ":memory:":
            Path(path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(path), check_same_thread=False)
        self._lock = threading.Lock()
        self._init_schema()

    def _init_schema(self) -> None:
        with self._lock:
            self._conn.execute(
                """
                CREATE TABLE IF NOT EXISTS operations (
                    id TEXT PRIMARY KEY,
                    resource_id TEXT NOT NULL,
                    status TEXT NOT NULL,
                    created_when REAL NOT NULL,
                    updated_when REAL NOT NULL,
                    document TEXT NOT NULL
                )
                """
            )
            self._conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_operations_resource ON operations (resource_id)"
            )
            self._conn.commit()

    def _write(self, sql: str, operation: Operation) -> None:
        params = (
            operation.resource_id,
            operation.status.value,
            operation.created_when,
            operation.updated_when,
            json.dumps(operation.to_dict()),
            operation.id,
        )
        with self._lock:
            try:
                self._conn.execute(sql, params)
                self._conn.commit()
            except sqlite3.Error as e:
                self._conn.rollback()
                raise StorageError(f"Failed to write operation: {e}", cause=e).with_context(
                    operation_id=operation.id
                ) from e

    def insert(self, operation: Operation) -> None:
        self._write(
            """
            INSERT INTO operations (resource_id, status, created_when, updated_when, document, id)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            operation,
        )

    def replace(self, operation: Operation) -> None:
        self._write(
            """
            UPDATE operations
            SET resource_id = ?, status = ?, created_when = ?, updated_when = ?, document = ?
            WHERE id = ?
            """,
            operation,
        )

    def _query(self, sql: str, params: tuple = ()) -> list[tuple]:
        with self._lock:
            try:
                return self._conn.execute(sql, params).fetchall()
            except sqlite3.Error as e:
                raise StorageError(f"Failed to read operations: {e}", cause=e) from e

    def get(self, operation_id: str) -> Operation | None:
        rows = self._query("SELECT document FROM operations WHERE id = ?", (operation_id,))
        if not rows:
            return None
        return Operation.from_dict(json.loads(rows[0][0]))

    def all(self, resource_id: str | None = None) -> list[Operation]:
        if resource_id is None:
            rows = self._query("SELECT document FROM operations")
        else:
            rows = self._query(
                "SELECT document FROM operations WHERE resource_id = ?", (resource_id,)
            )
        return [Operation.from_dict(json.loads(row[0])) for row in rows]

    def close(self) -> None:
        with self._lock:
            self._conn.close()
