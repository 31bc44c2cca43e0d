"""Operation domain models.

Defines the records tracked by the engine:
- Operation: one long-running action against one resource
- OperationStep: one sub-unit of an operation's work

Both are frozen. The registry never mutates a stored record; it commits a
replacement built with :func:`dataclasses.replace`, so a reader holding a
record always sees a consistent snapshot.

Wire format (``to_dict`` / ``from_dict``) uses the camelCase field names the
existing consumers expect::

    Operation                       OperationStep
    ─────────────────────────────   ──────────────────────────────
    id              str             stepId                str
    resourceId      str             stepTitle             str
    resourcePath    str             resourceId            str
    resourceVersion int             resourceTemplateName  str
    status          str             resourceType          any
    action          str             resourceAction        str
    message         str             status                str
    createdWhen     number          message               str
    updatedWhen     number          updatedWhen           number
    user            any
    steps           list | absent
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from opledger.core.timestamps import epoch_now, new_operation_id

from .statuses import (
    ActionKind,
    OperationStatus,
    StatusClassification,
    classify,
    parse_action_kind,
    parse_status,
    statuses_for,
)


@dataclass(frozen=True)
class OperationStep:
    """One sub-unit of work within an operation.

    Example:
        >>> step = OperationStep(
        ...     step_id="vm-1",
        ...     status=OperationStatus.DEPLOYING,
        ...     step_title="Deploy virtual machine",
        ...     resource_template_name="tre-vm",
        ... )
    """

    step_id: str
    status: OperationStatus
    step_title: str = ""
    resource_id: str = ""
    resource_template_name: str = ""
    resource_type: Any = None
    resource_action: str = ""
    message: str = ""
    updated_when: float = field(default_factory=epoch_now)

    def __post_init__(self) -> None:
        # Accept raw strings from executors; reject anything off-vocabulary
        object.__setattr__(self, "status", parse_status(self.status))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "stepId": self.step_id,
            "stepTitle": self.step_title,
            "resourceId": self.resource_id,
            "resourceTemplateName": self.resource_template_name,
            "resourceType": self.resource_type,
            "resourceAction": self.resource_action,
            "status": self.status.value,
            "message": self.message,
            "updatedWhen": self.updated_when,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OperationStep:
        """Build a step from its wire representation."""
        return cls(
            step_id=data["stepId"],
            status=data["status"],
            step_title=data.get("stepTitle", ""),
            resource_id=data.get("resourceId", ""),
            resource_template_name=data.get("resourceTemplateName", ""),
            resource_type=data.get("resourceType"),
            resource_action=data.get("resourceAction", ""),
            message=data.get("message", ""),
            updated_when=data["updatedWhen"] if data.get("updatedWhen") is not None else epoch_now(),
        )


@dataclass(frozen=True)
class Operation:
    """One tracked action against one resource.

    ``steps`` is ``None`` for single-step actions that never report sub-steps
    and a tuple (possibly empty) for operations whose status is derived from
    their steps.

    ``action`` is the identifier the caller supplied (``deploy``,
    ``invoke_action``, ``restart_vm``, ...) and is returned unchanged; ``kind``
    resolves it to the status set it uses.

    Example:
        >>> op = Operation.create(
        ...     resource_id="ws-1",
        ...     resource_path="/workspaces/ws-1",
        ...     resource_version=3,
        ...     action="deploy",
        ...     user={"id": "u-1", "name": "Ada"},
        ... )
        >>> op.status
        <OperationStatus.AWAITING_DEPLOYMENT: 'awaiting_deployment'>
    """

    id: str
    resource_id: str
    resource_path: str
    resource_version: int
    status: OperationStatus
    action: str
    message: str
    created_when: float
    updated_when: float
    user: Any = None
    steps: tuple[OperationStep, ...] | None = None

    @classmethod
    def create(
        cls,
        resource_id: str,
        resource_path: str,
        resource_version: int,
        action: ActionKind | str,
        user: Any = None,
        *,
        steps_expected: bool = False,
        now: float | None = None,
    ) -> Operation:
        """Create a new operation in its action kind's awaiting status."""
        identifier = action.value if isinstance(action, ActionKind) else action
        kind = parse_action_kind(identifier)
        created = epoch_now() if now is None else now
        return cls(
            id=new_operation_id(),
            resource_id=resource_id,
            resource_path=resource_path,
            resource_version=resource_version,
            status=statuses_for(kind).awaiting,
            action=identifier,
            message="",
            created_when=created,
            updated_when=created,
            user=user,
            steps=() if steps_expected else None,
        )

    @property
    def kind(self) -> ActionKind:
        """Action kind whose status set this operation uses."""
        return parse_action_kind(self.action)

    @property
    def classification(self) -> StatusClassification:
        return classify(self.status)

    @property
    def is_terminal(self) -> bool:
        return self.classification.is_terminal

    @property
    def has_steps(self) -> bool:
        return bool(self.steps)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization.

        ``steps`` is omitted entirely when the operation has no step sequence.
        """
        result: dict[str, Any] = {
            "id": self.id,
            "resourceId": self.resource_id,
            "resourcePath": self.resource_path,
            "resourceVersion": self.resource_version,
            "status": self.status.value,
            "action": self.action,
            "message": self.message,
            "createdWhen": self.created_when,
            "updatedWhen": self.updated_when,
            "user": self.user,
        }
        if self.steps is not None:
            result["steps"] = [step.to_dict() for step in self.steps]
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Operation:
        """Build an operation from its wire representation."""
        raw_steps = data.get("steps")
        return cls(
            id=data["id"],
            resource_id=data["resourceId"],
            resource_path=data.get("resourcePath", ""),
            resource_version=int(data.get("resourceVersion", 0)),
            status=parse_status(data["status"]),
            action=data["action"],
            message=data.get("message", ""),
            created_when=data["createdWhen"],
            updated_when=data["updatedWhen"],
            user=data.get("user"),
            steps=None if raw_steps is None else tuple(OperationStep.from_dict(s) for s in raw_steps),
        )
