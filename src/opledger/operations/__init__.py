"""opledger.operations — operation tracking, step aggregation, status taxonomy.

MODULE MAP (recommended reading order)
──────────────────────────────────────
  1. statuses.py    ─ OperationStatus, phases, outcomes, action kinds
  2. models.py      ─ Operation, OperationStep (frozen, camelCase wire format)
  3. steps.py       ─ StepLedger (ordered per-operation step records)
  4. aggregator.py  ─ aggregate() (steps → one status + message)
  5. locks.py       ─ KeyedLock (per-operation mutual exclusion)
  6. store.py       ─ OperationStore protocol, memory + SQLite stores
  7. registry.py    ─ OperationRegistry (the public surface)
  8. fastapi.py     ─ create_operations_router() (HTTP boundary)
"""

from .aggregator import AggregateResult, aggregate
from .locks import KeyedLock
from .models import Operation, OperationStep
from .registry import OperationFilter, OperationRegistry, OperationView
from .statuses import (
    ACTION_STATUSES,
    AWAITING_STATUSES,
    COMPLETED_STATUSES,
    FAILED_STATUSES,
    IN_PROGRESS_STATUSES,
    SUCCEEDED_STATUSES,
    ActionKind,
    ActionStatuses,
    OperationStatus,
    Outcome,
    Phase,
    PhaseFilter,
    StatusClassification,
    classify,
    is_awaiting,
    is_completed,
    is_failed,
    is_in_progress,
    is_succeeded,
    parse_action_kind,
    parse_status,
    statuses_for,
)
from .steps import StepLedger
from .store import MemoryOperationStore, OperationStore, SQLiteOperationStore

__all__ = [
    # statuses
    "ACTION_STATUSES",
    "AWAITING_STATUSES",
    "COMPLETED_STATUSES",
    "FAILED_STATUSES",
    "IN_PROGRESS_STATUSES",
    "SUCCEEDED_STATUSES",
    "ActionKind",
    "ActionStatuses",
    "OperationStatus",
    "Outcome",
    "Phase",
    "PhaseFilter",
    "StatusClassification",
    "classify",
    "is_awaiting",
    "is_completed",
    "is_failed",
    "is_in_progress",
    "is_succeeded",
    "parse_action_kind",
    "parse_status",
    "statuses_for",
    # records
    "Operation",
    "OperationStep",
    # engine
    "AggregateResult",
    "aggregate",
    "KeyedLock",
    "StepLedger",
    "OperationFilter",
    "OperationRegistry",
    "OperationView",
    # stores
    "OperationStore",
    "MemoryOperationStore",
    "SQLiteOperationStore",
]
