"""Keyed locks — per-operation mutual exclusion.

Updates to one operation must run one at a time (ledger write, aggregation,
commit), while updates to different operations must not wait on each other.
``KeyedLock`` hands out one ``threading.Lock`` per key instead of a single
global lock.

ARCHITECTURE
────────────
::

    KeyedLock
      ├── .hold(key)      ─ context manager, blocks until the key is free
      ├── .is_locked(key) ─ check without acquiring
      └── .active_keys()  ─ keys currently held or waited on

    _entries: key → [lock, users]
      users counts holders + waiters; the entry is dropped when it
      reaches zero so idle operations do not accumulate locks.

Example::

    locks = KeyedLock()
    with locks.hold(operation_id):
        ...  # exclusive for this operation only
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field


@dataclass
class _Entry:
    lock: threading.Lock = field(default_factory=threading.Lock)
    users: int = 0


class KeyedLock:
    """A lazily-populated map of key → lock."""

    def __init__(self) -> None:
        self._entries: dict[str, _Entry] = {}
        self._guard = threading.Lock()

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        """Hold the lock for *key* for the duration of the block."""
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _Entry()
            entry.users += 1

        entry.lock.acquire()
        try:
            yield
        finally:
            entry.lock.release()
            with self._guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._entries[key]

    def is_locked(self, key: str) -> bool:
        with self._guard:
            entry = self._entries.get(key)
            return entry is not None and entry.lock.locked()

    def active_keys(self) -> list[str]:
        with self._guard:
            return list(self._entries.keys())
