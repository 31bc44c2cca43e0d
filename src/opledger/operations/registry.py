"""Operation Registry — the engine's externally reachable surface.

The registry owns the set of live and historical operations. Orchestrators
create operations, executors report progress, and consumers query and filter
them; all of it goes through here.

ARCHITECTURE
────────────
::

    OperationRegistry(store)
      ├── .create_operation(...)          ─ new record, awaiting status
      ├── .record_step_update(id, step)   ─ ledger → aggregator → commit
      ├── .report_status(id, status)      ─ direct report, no steps
      ├── .get_operation(id)              ─ one record
      ├── .list_operations(filter)        ─ lazy, restartable view
      ├── .latest_for_resource(res_id)    ─ newest record for a resource
      └── .summary(res_id=None)           ─ counts per phase filter

    Mutations hold KeyedLock(operation_id) for the whole
    ledger write + aggregation + commit sequence. Records are frozen and
    replaced wholesale, so reads see either the full before- or
    after-state of any update. The step ledger is seeded from the stored
    record and dropped once the update commits or fails, so no per-operation
    state outlives a call.

    Direct reports accept only the action's own in-progress, succeeded and
    failed statuses (plus ``failed`` and ``pipeline_running``); the awaiting
    status is accepted only before the operation has started.

Lifecycle::

    create_operation ──► awaiting_* ──► in progress ──► completed (terminal)
                                  ▲            │
                                  └── steps ───┘     terminal records reject
                                                     further updates; a new
                                                     action creates a new one

Example:
    >>> registry = OperationRegistry()
    >>> op = registry.create_operation("ws-1", "/workspaces/ws-1", 1, "deploy", user)
    >>> registry.record_step_update(op.id, OperationStep("vm", "deploying"))
    >>> registry.get_operation(op.id).status
    <OperationStatus.DEPLOYING: 'deploying'>
"""

from __future__ import annotations

import heapq
from collections.abc import Callable, Iterator
from dataclasses import dataclass, replace
from typing import Any

from opledger.core.errors import (
    OperationAlreadyTerminalError,
    OperationNotFoundError,
    StatusDerivedFromStepsError,
    StatusNotReportableError,
)
from opledger.core.logging import LogContext, get_logger
from opledger.core.timestamps import epoch_now

from .aggregator import aggregate
from .locks import KeyedLock
from .models import Operation, OperationStep
from .statuses import AWAITING_STATUSES, ActionKind, OperationStatus, PhaseFilter, parse_status, statuses_for
from .steps import StepLedger
from .store import MemoryOperationStore, OperationStore

logger = get_logger(__name__)


@dataclass(frozen=True)
class OperationFilter:
    """Criteria for :meth:`OperationRegistry.list_operations`.

    Attributes:
        resource_id: Only operations on this resource
        phase: Only operations whose status falls in this bucket
        newest_first: Order by created_when descending (ascending if False)
        limit: Max results
    """

    resource_id: str | None = None
    phase: PhaseFilter | str | None = None
    newest_first: bool = True
    limit: int | None = None

    def __post_init__(self) -> None:
        if self.phase is not None and not isinstance(self.phase, PhaseFilter):
            object.__setattr__(self, "phase", PhaseFilter(self.phase))
        if self.limit is not None and self.limit < 0:
            raise ValueError(f"limit must be >= 0, got {self.limit}")

    def matches(self, operation: Operation) -> bool:
        if self.resource_id is not None and operation.resource_id != self.resource_id:
            return False
        if self.phase is not None and not self.phase.matches(operation.status):
            return False
        return True


class OperationView:
    """Lazily-evaluated, restartable sequence of operations.

    Nothing is read until iteration starts; every new iteration reads a fresh
    snapshot from the store.
    """

    def __init__(self, store: OperationStore, criteria: OperationFilter) -> None:
        self._store = store
        self._criteria = criteria

    @property
    def criteria(self) -> OperationFilter:
        return self._criteria

    def __iter__(self) -> Iterator[Operation]:
        criteria = self._criteria
        matching = (op for op in self._store.all(criteria.resource_id) if criteria.matches(op))

        def sort_key(op: Operation) -> tuple[float, str]:
            return (op.created_when, op.id)

        if criteria.limit is not None:
            pick = heapq.nlargest if criteria.newest_first else heapq.nsmallest
            yield from pick(criteria.limit, matching, key=sort_key)
            return
        yield from sorted(matching, key=sort_key, reverse=criteria.newest_first)

    def first(self) -> Operation | None:
        return next(iter(self), None)

    def to_list(self) -> list[Operation]:
        return list(self)


class OperationRegistry:
    """Creates, updates and serves operation records.

    Args:
        store: Persistence collaborator (defaults to an in-memory store)
        clock: Source of epoch timestamps (injectable for tests)
    """

    def __init__(
        self,
        store: OperationStore | None = None,
        *,
        clock: Callable[[], float] = epoch_now,
    ) -> None:
        self._store = store if store is not None else MemoryOperationStore()
        self._clock = clock
        self._ledger = StepLedger()
        self._locks = KeyedLock()

    @property
    def store(self) -> OperationStore:
        return self._store

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def create_operation(
        self,
        resource_id: str,
        resource_path: str,
        resource_version: int,
        action: ActionKind | str,
        user: Any = None,
        *,
        steps_expected: bool = False,
    ) -> Operation:
        """Create and persist a new operation in its awaiting status.

        Args:
            resource_id: Target resource
            resource_path: Human-readable location of the resource
            resource_version: Resource version at creation time
            action: Action identifier (deploy, update, delete, or a custom action)
            user: Opaque identity of the initiating user
            steps_expected: Start with an empty step sequence instead of none

        Raises:
            UnknownActionKindError: If *action* is empty. Identifiers outside
                the status table use the custom-action statuses.
        """
        operation = Operation.create(
            resource_id=resource_id,
            resource_path=resource_path,
            resource_version=resource_version,
            action=action,
            user=user,
            steps_expected=steps_expected,
            now=self._clock(),
        )
        self._store.insert(operation)
        logger.info(
            "operation_created",
            operation_id=operation.id,
            resource_id=resource_id,
            action=operation.action,
            status=operation.status.value,
        )
        return operation

    def record_step_update(self, operation_id: str, step: OperationStep) -> Operation:
        """Record a step report and recompute the operation's status.

        Raises:
            OperationNotFoundError: Unknown operation id.
            OperationAlreadyTerminalError: The operation already completed.
        """
        with LogContext(operation_id=operation_id, step_id=step.step_id), self._locks.hold(operation_id):
            current = self._load_mutable(operation_id)

            # The stored record is the source of truth; the ledger lives for one update
            self._ledger.open(operation_id, current.steps or ())
            try:
                steps = self._ledger.record_step(operation_id, step)
                result = aggregate(current.kind, steps)

                updated = replace(
                    current,
                    status=result.status,
                    message=result.message,
                    steps=steps,
                    updated_when=self._stamp(current),
                )
                self._commit(updated)
            finally:
                self._ledger.discard(operation_id)

            logger.debug(
                "step_recorded",
                step_status=step.status.value,
                status=updated.status.value,
                step_count=len(steps),
            )
            return updated

    def report_status(
        self,
        operation_id: str,
        status: OperationStatus | str,
        message: str = "",
    ) -> Operation:
        """Set the status of an operation that reports no steps.

        Raises:
            UnknownStatusError: *status* is outside the vocabulary.
            OperationNotFoundError: Unknown operation id.
            OperationAlreadyTerminalError: The operation already completed.
            StatusDerivedFromStepsError: The operation has recorded steps.
            StatusNotReportableError: *status* belongs to another action kind,
                or is the awaiting status of an operation that already started.
        """
        parsed = parse_status(status)
        with LogContext(operation_id=operation_id), self._locks.hold(operation_id):
            current = self._load_mutable(operation_id)
            if current.has_steps:
                raise StatusDerivedFromStepsError(operation_id)
            started = current.status not in AWAITING_STATUSES
            if parsed not in statuses_for(current.kind).reportable(started=started):
                logger.warning("status_report_rejected", status=parsed.value, current=current.status.value)
                raise StatusNotReportableError(operation_id, parsed.value, current.action)

            updated = replace(
                current,
                status=parsed,
                message=message,
                updated_when=self._stamp(current),
            )
            self._commit(updated)

            logger.debug("status_reported", status=parsed.value)
            return updated

    def _load_mutable(self, operation_id: str) -> Operation:
        current = self.get_operation(operation_id)
        if current.is_terminal:
            logger.warning("update_rejected_terminal", status=current.status.value)
            raise OperationAlreadyTerminalError(operation_id, current.status.value)
        return current

    def _stamp(self, current: Operation) -> float:
        # updated_when never moves backwards, even if the clock does
        return max(self._clock(), current.updated_when)

    def _commit(self, updated: Operation) -> None:
        try:
            self._store.replace(updated)
        except Exception:
            logger.exception("operation_commit_failed", operation_id=updated.id)
            raise

        if updated.is_terminal:
            logger.info(
                "operation_completed",
                operation_id=updated.id,
                status=updated.status.value,
                outcome=updated.classification.outcome.value,
            )

    # =========================================================================
    # QUERIES
    # =========================================================================

    def get_operation(self, operation_id: str) -> Operation:
        """Return the current record.

        Raises:
            OperationNotFoundError: Unknown operation id.
        """
        operation = self._store.get(operation_id)
        if operation is None:
            raise OperationNotFoundError(operation_id)
        return operation

    def list_operations(self, filter: OperationFilter | None = None) -> OperationView:
        """Return a lazy view of operations matching *filter*.

        Ordered by created_when, newest first unless ``newest_first=False``.
        """
        return OperationView(self._store, filter or OperationFilter())

    def latest_for_resource(self, resource_id: str) -> Operation | None:
        """Most recently created operation for a resource."""
        return self.list_operations(OperationFilter(resource_id=resource_id, limit=1)).first()

    def summary(self, resource_id: str | None = None) -> dict[str, int]:
        """Count operations per phase filter."""
        counts = {phase.value: 0 for phase in PhaseFilter}
        for operation in self._store.all(resource_id):
            for phase in PhaseFilter:
                if phase.matches(operation.status):
                    counts[phase.value] += 1
        counts["total"] = sum(counts[p.value] for p in (PhaseFilter.IN_PROGRESS, PhaseFilter.COMPLETED))
        return counts
