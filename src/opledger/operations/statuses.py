"""Operation statuses — one closed vocabulary plus pure classification.

Every status identifier an operation or step can carry is a member of
:class:`OperationStatus`. Buckets (awaiting, in progress, completed, failed,
succeeded) are frozen sets derived from that single enumeration, so a status
can never belong to no phase or to both phases.

Classification::

    OperationStatus
      ├── Phase.IN_PROGRESS ─ not yet terminal
      │     └── awaiting    ─ queued, not yet started
      └── Phase.COMPLETED   ─ terminal, no further transitions
            ├── Outcome.SUCCEEDED
            └── Outcome.FAILED

Action kinds map to a fixed set of statuses::

    ActionKind   awaiting             in progress       succeeded          failed
    ──────────   ───────────────────  ────────────────  ─────────────────  ─────────────────
    deploy       awaiting_deployment  deploying         deployed           deployment_failed
    update       awaiting_update      updating          updated            updating_failed
    delete       awaiting_deletion    deleting          deleted            deleting_failed
    action       invoking_action      invoking_action   action_succeeded   action_failed

Any other action identifier (``invoke_action``, ``restart_vm``, ...) uses the
``action`` row.
Unknown identifiers raise :class:`~opledger.core.errors.UnknownStatusError`;
no default phase is ever guessed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from opledger.core.errors import UnknownActionKindError, UnknownStatusError


class OperationStatus(str, Enum):
    """Every status identifier known to the engine."""

    # Awaiting
    AWAITING_DEPLOYMENT = "awaiting_deployment"
    AWAITING_UPDATE = "awaiting_update"
    AWAITING_DELETION = "awaiting_deletion"

    # Running
    DEPLOYING = "deploying"
    UPDATING = "updating"
    DELETING = "deleting"
    INVOKING_ACTION = "invoking_action"
    PIPELINE_RUNNING = "pipeline_running"

    # Succeeded
    DEPLOYED = "deployed"
    UPDATED = "updated"
    DELETED = "deleted"
    ACTION_SUCCEEDED = "action_succeeded"

    # Failed
    DEPLOYMENT_FAILED = "deployment_failed"
    UPDATING_FAILED = "updating_failed"
    DELETING_FAILED = "deleting_failed"
    ACTION_FAILED = "action_failed"
    FAILED = "failed"


class Phase(str, Enum):
    """Coarse lifecycle bucket."""

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class Outcome(str, Enum):
    """Terminal result, defined only for the completed phase."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"


AWAITING_STATUSES: frozenset[OperationStatus] = frozenset({
    OperationStatus.AWAITING_DEPLOYMENT,
    OperationStatus.AWAITING_UPDATE,
    OperationStatus.AWAITING_DELETION,
})

IN_PROGRESS_STATUSES: frozenset[OperationStatus] = AWAITING_STATUSES | frozenset({
    OperationStatus.DEPLOYING,
    OperationStatus.UPDATING,
    OperationStatus.DELETING,
    OperationStatus.INVOKING_ACTION,
    OperationStatus.PIPELINE_RUNNING,
})

SUCCEEDED_STATUSES: frozenset[OperationStatus] = frozenset({
    OperationStatus.DEPLOYED,
    OperationStatus.UPDATED,
    OperationStatus.DELETED,
    OperationStatus.ACTION_SUCCEEDED,
})

FAILED_STATUSES: frozenset[OperationStatus] = frozenset({
    OperationStatus.DEPLOYMENT_FAILED,
    OperationStatus.UPDATING_FAILED,
    OperationStatus.DELETING_FAILED,
    OperationStatus.ACTION_FAILED,
    OperationStatus.FAILED,
})

COMPLETED_STATUSES: frozenset[OperationStatus] = SUCCEEDED_STATUSES | FAILED_STATUSES


@dataclass(frozen=True, slots=True)
class StatusClassification:
    """Phase and (for completed statuses) outcome of one status."""

    status: OperationStatus
    phase: Phase
    outcome: Outcome | None = None

    @property
    def is_terminal(self) -> bool:
        return self.phase is Phase.COMPLETED


def parse_status(value: OperationStatus | str) -> OperationStatus:
    """Coerce *value* to an :class:`OperationStatus`.

    Raises:
        UnknownStatusError: If *value* is not in the vocabulary.
    """
    if isinstance(value, OperationStatus):
        return value
    try:
        return OperationStatus(value)
    except ValueError:
        raise UnknownStatusError(value) from None


def classify(value: OperationStatus | str) -> StatusClassification:
    """Return the phase and outcome of a status.

    Raises:
        UnknownStatusError: If *value* is not in the vocabulary.

    Example:
        >>> classify("deployment_failed")
        StatusClassification(status=<OperationStatus.DEPLOYMENT_FAILED: ...>,
                             phase=<Phase.COMPLETED: ...>, outcome=<Outcome.FAILED: ...>)
    """
    status = parse_status(value)
    if status in IN_PROGRESS_STATUSES:
        return StatusClassification(status, Phase.IN_PROGRESS)
    if status in FAILED_STATUSES:
        return StatusClassification(status, Phase.COMPLETED, Outcome.FAILED)
    if status in SUCCEEDED_STATUSES:
        return StatusClassification(status, Phase.COMPLETED, Outcome.SUCCEEDED)
    # Unreachable while the buckets cover the enumeration
    raise UnknownStatusError(status, f"Status {status.value!r} has no phase")


def is_awaiting(value: OperationStatus | str) -> bool:
    return parse_status(value) in AWAITING_STATUSES


def is_in_progress(value: OperationStatus | str) -> bool:
    return classify(value).phase is Phase.IN_PROGRESS


def is_completed(value: OperationStatus | str) -> bool:
    return classify(value).phase is Phase.COMPLETED


def is_failed(value: OperationStatus | str) -> bool:
    return classify(value).outcome is Outcome.FAILED


def is_succeeded(value: OperationStatus | str) -> bool:
    return classify(value).outcome is Outcome.SUCCEEDED


class PhaseFilter(str, Enum):
    """Buckets consumers filter operation lists by."""

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"
    SUCCEEDED = "succeeded"

    def matches(self, value: OperationStatus | str) -> bool:
        """True if *value* falls in this bucket."""
        classification = classify(value)
        if self is PhaseFilter.IN_PROGRESS:
            return classification.phase is Phase.IN_PROGRESS
        if self is PhaseFilter.COMPLETED:
            return classification.phase is Phase.COMPLETED
        if self is PhaseFilter.FAILED:
            return classification.outcome is Outcome.FAILED
        return classification.outcome is Outcome.SUCCEEDED


# =============================================================================
# Action kinds
# =============================================================================


class ActionKind(str, Enum):
    """Category of action an operation performs."""

    DEPLOY = "deploy"
    UPDATE = "update"
    DELETE = "delete"
    ACTION = "action"


@dataclass(frozen=True, slots=True)
class ActionStatuses:
    """Statuses an action kind moves through."""

    awaiting: OperationStatus
    in_progress: OperationStatus
    succeeded: OperationStatus
    failed: OperationStatus

    def reportable(self, *, started: bool) -> frozenset[OperationStatus]:
        """Statuses an executor may report directly for this action.

        The awaiting status is only accepted before the operation has started.
        """
        allowed = {
            self.in_progress,
            self.succeeded,
            self.failed,
            OperationStatus.FAILED,
            OperationStatus.PIPELINE_RUNNING,
        }
        if not started:
            allowed.add(self.awaiting)
        return frozenset(allowed)


ACTION_STATUSES: dict[ActionKind, ActionStatuses] = {
    ActionKind.DEPLOY: ActionStatuses(
        awaiting=OperationStatus.AWAITING_DEPLOYMENT,
        in_progress=OperationStatus.DEPLOYING,
        succeeded=OperationStatus.DEPLOYED,
        failed=OperationStatus.DEPLOYMENT_FAILED,
    ),
    ActionKind.UPDATE: ActionStatuses(
        awaiting=OperationStatus.AWAITING_UPDATE,
        in_progress=OperationStatus.UPDATING,
        succeeded=OperationStatus.UPDATED,
        failed=OperationStatus.UPDATING_FAILED,
    ),
    ActionKind.DELETE: ActionStatuses(
        awaiting=OperationStatus.AWAITING_DELETION,
        in_progress=OperationStatus.DELETING,
        succeeded=OperationStatus.DELETED,
        failed=OperationStatus.DELETING_FAILED,
    ),
    # Custom actions have no queued status of their own
    ActionKind.ACTION: ActionStatuses(
        awaiting=OperationStatus.INVOKING_ACTION,
        in_progress=OperationStatus.INVOKING_ACTION,
        succeeded=OperationStatus.ACTION_SUCCEEDED,
        failed=OperationStatus.ACTION_FAILED,
    ),
}


def parse_action_kind(value: ActionKind | str) -> ActionKind:
    """Resolve an action identifier to the kind whose statuses it uses.

    Action identifiers are free-form. The four listed kinds resolve to
    themselves; ``invoke_action`` and any custom identifier (``restart_vm``)
    resolve to :attr:`ActionKind.ACTION`.

    Raises:
        UnknownActionKindError: If *value* is empty or not a string.
    """
    if isinstance(value, ActionKind):
        return value
    if not isinstance(value, str) or not value.strip():
        raise UnknownActionKindError(value)
    try:
        return ActionKind(value)
    except ValueError:
        return ActionKind.ACTION


def statuses_for(action: ActionKind | str) -> ActionStatuses:
    """Return the status set of an action kind."""
    return ACTION_STATUSES[parse_action_kind(action)]
