"""Aggregator — derive one operation status from its ordered steps.

Precedence (first matching rule wins):

1. Any step failed       → action's failed status, message of the
                           earliest-inserted failing step.
2. Any step in progress  → action's in-progress status, message
   (or no steps at all)    ``"<remaining> of <total> steps remaining"``
                           (empty when no step was recorded yet).
3. Otherwise             → action's succeeded status, empty message.

The result depends only on the step sequence and the action kind, so
recomputing the same ledger state always yields the same status and message.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .models import OperationStep
from .statuses import ActionKind, OperationStatus, Outcome, Phase, classify, statuses_for


@dataclass(frozen=True, slots=True)
class AggregateResult:
    """Overall status and message derived from a step sequence."""

    status: OperationStatus
    message: str = ""


def remaining_message(remaining: int, total: int) -> str:
    if total == 0:
        return ""
    return f"{remaining} of {total} steps remaining"


def aggregate(action: ActionKind | str, steps: Sequence[OperationStep]) -> AggregateResult:
    """Derive the overall status and message for *steps*.

    Args:
        action: Action kind of the parent operation
        steps: Steps in first-insertion order

    Returns:
        AggregateResult with the status and message to commit.
    """
    statuses = statuses_for(action)

    remaining = 0
    for step in steps:
        classification = classify(step.status)
        if classification.outcome is Outcome.FAILED:
            return AggregateResult(statuses.failed, step.message)
        if classification.phase is Phase.IN_PROGRESS:
            remaining += 1

    if remaining or not steps:
        return AggregateResult(statuses.in_progress, remaining_message(remaining, len(steps)))

    return AggregateResult(statuses.succeeded)
