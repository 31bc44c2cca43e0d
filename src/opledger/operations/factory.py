"""
Factory functions that build the engine from settings.

- ``create_store()``    — memory / SQLite store from ``settings.store_backend``
- ``create_registry()`` — OperationRegistry over the configured store
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from opledger.core.logging import get_logger

from .registry import OperationRegistry
from .store import MemoryOperationStore, OperationStore, SQLiteOperationStore

if TYPE_CHECKING:
    from opledger.core.settings import OpLedgerSettings

logger = get_logger(__name__)


def create_store(settings: OpLedgerSettings) -> OperationStore:
    """Create the operation store selected by *settings.store_backend*."""
    match settings.store_backend:
        case "memory":
            return MemoryOperationStore()
        case "sqlite":
            return SQLiteOperationStore(settings.sqlite_path)
        case other:
            raise ValueError(f"Unknown store backend: {other!r}")


def create_registry(settings: OpLedgerSettings) -> OperationRegistry:
    """Create an OperationRegistry backed by the configured store."""
    registry = OperationRegistry(create_store(settings))
    logger.info("registry_created", store_backend=settings.store_backend)
    return registry
