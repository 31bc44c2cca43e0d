"""Step Ledger — per-operation ordered collection of step records.

Executors report steps by id. The ledger keeps one ordered mapping per
operation: the first report of a step id fixes its position, later reports of
the same id update it in place. Position reflects planned execution order, not
update recency, and is the tie-break the aggregator relies on.

ARCHITECTURE
────────────
::

    StepLedger
      ├── .open(operation_id, steps)        ─ start (or reload) a ledger
      ├── .record_step(operation_id, step)  ─ append or update in place
      ├── .steps(operation_id)              ─ ordered snapshot
      ├── .has_steps(operation_id)          ─ any step recorded?
      └── .discard(operation_id)            ─ drop a ledger

The ledger never touches the parent operation's status; the registry runs the
aggregator after each write. Writes for one operation are serialized by the
registry's per-operation lock; the guard lock here only protects the outer
mapping.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import replace

from opledger.core.errors import OperationNotFoundError

from .models import OperationStep


class StepLedger:
    """Ordered step records keyed by operation id, then step id."""

    def __init__(self) -> None:
        self._ledgers: dict[str, dict[str, OperationStep]] = {}
        self._lock = threading.Lock()

    def open(self, operation_id: str, steps: Iterable[OperationStep] = ()) -> None:
        """Start a ledger for *operation_id*, seeded with already-known steps.

        Re-opening a known operation is a no-op.
        """
        with self._lock:
            if operation_id not in self._ledgers:
                self._ledgers[operation_id] = {step.step_id: step for step in steps}

    def is_open(self, operation_id: str) -> bool:
        with self._lock:
            return operation_id in self._ledgers

    def _ledger(self, operation_id: str) -> dict[str, OperationStep]:
        with self._lock:
            ledger = self._ledgers.get(operation_id)
        if ledger is None:
            raise OperationNotFoundError(operation_id)
        return ledger

    def record_step(self, operation_id: str, step: OperationStep) -> tuple[OperationStep, ...]:
        """Append *step* or update the known step with the same id.

        An update replaces status, message and updated_when only; the step
        keeps its original position and descriptive fields.

        Returns:
            The operation's steps in first-insertion order.

        Raises:
            OperationNotFoundError: If no ledger was opened for the operation.
        """
        ledger = self._ledger(operation_id)
        existing = ledger.get(step.step_id)
        if existing is None:
            ledger[step.step_id] = step
        else:
            # Assigning to an existing key keeps dict insertion order
            ledger[step.step_id] = replace(
                existing,
                status=step.status,
                message=step.message,
                updated_when=step.updated_when,
            )
        return tuple(ledger.values())

    def steps(self, operation_id: str) -> tuple[OperationStep, ...]:
        """Ordered snapshot of an operation's steps."""
        return tuple(self._ledger(operation_id).values())

    def has_steps(self, operation_id: str) -> bool:
        return bool(self._ledger(operation_id))

    def discard(self, operation_id: str) -> None:
        """Forget an operation's ledger (terminal operations need none)."""
        with self._lock:
            self._ledgers.pop(operation_id, None)
