"""FastAPI Router — ``/operations`` REST boundary.

ARCHITECTURE
────────────
::

    create_operations_router(registry) → APIRouter
      POST   /operations                      ─ create operation (orchestrator)
      GET    /operations                      ─ list (resourceId, phase, order, limit)
      GET    /operations/summary              ─ counts per phase
      GET    /operations/{operation_id}       ─ get one
      POST   /operations/{operation_id}/steps ─ record step update (executor)
      POST   /operations/{operation_id}/status ─ direct status report (executor)

    Error mapping:
      OperationNotFoundError         → 404
      OperationAlreadyTerminalError  → 409
      StatusDerivedFromStepsError    → 409
      StatusNotReportableError       → 409
      UnknownStatusError             → 422
      UnknownActionKindError         → 422
      invalid phase filter           → 400

Bodies and responses use the camelCase field names of the operation wire
format. Endpoints are plain ``def`` functions: the registry is synchronous
and uses thread locks, so FastAPI runs them in its threadpool.

Related modules:
    registry.py — OperationRegistry (all endpoints delegate here)
    models.py   — Operation.to_dict() (response shape)
"""

from __future__ import annotations

from typing import Any, Literal

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from opledger.core.errors import ErrorCategory, OpLedgerError

from .models import Operation, OperationStep
from .registry import OperationFilter, OperationRegistry
from .statuses import PhaseFilter

_CATEGORY_TO_STATUS: dict[ErrorCategory, int] = {
    ErrorCategory.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCategory.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCategory.VALIDATION: 422,
}


def http_error(error: OpLedgerError) -> HTTPException:
    """Translate an engine error into an HTTPException."""
    code = _CATEGORY_TO_STATUS.get(error.category, status.HTTP_500_INTERNAL_SERVER_ERROR)
    return HTTPException(code, detail=error.to_dict())


# === PYDANTIC MODELS FOR API ===


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OperationStepModel(_CamelModel):
    """A step as reported by an executor and returned to consumers."""

    step_id: str
    status: str
    step_title: str = ""
    resource_id: str = ""
    resource_template_name: str = ""
    resource_type: Any = None
    resource_action: str = ""
    message: str = ""
    updated_when: float | None = None

    def to_step(self) -> OperationStep:
        """Convert to OperationStep (validates the status)."""
        return OperationStep.from_dict(self.model_dump(by_alias=True, exclude_none=True))


class OperationModel(_CamelModel):
    """Response for a single operation."""

    id: str
    resource_id: str
    resource_path: str
    resource_version: int
    status: str
    action: str
    message: str
    created_when: float
    updated_when: float
    user: Any = None
    steps: list[OperationStepModel] | None = None

    @classmethod
    def from_operation(cls, operation: Operation) -> OperationModel:
        return cls.model_validate(operation.to_dict())


class CreateOperationRequest(_CamelModel):
    """Request body for creating an operation."""

    resource_id: str
    resource_path: str
    resource_version: int = Field(ge=0)
    action: str
    user: Any = None
    steps_expected: bool = False


class StatusReportRequest(_CamelModel):
    """Request body for a direct status report."""

    status: str
    message: str = ""


def create_operations_router(
    registry: OperationRegistry,
    prefix: str = "/api/v1/operations",
    tags: list[str] | None = None,
    default_limit: int | None = None,
) -> APIRouter:
    """Create the operations router.

    Args:
        registry: Registry all endpoints delegate to
        prefix: URL prefix (default: /api/v1/operations)
        tags: OpenAPI tags (default: ["operations"])
        default_limit: Page size when the caller passes no ``limit``

    Example:
        >>> app = FastAPI()
        >>> app.include_router(create_operations_router(OperationRegistry()))
    """
    router = APIRouter(prefix=prefix, tags=tags or ["operations"])
    exclude_unset = {"response_model_exclude_unset": True}

    @router.post("", response_model=OperationModel, status_code=status.HTTP_201_CREATED, **exclude_unset)
    def create_operation(request: CreateOperationRequest):
        """Create an operation in its action's awaiting status."""
        try:
            operation = registry.create_operation(
                resource_id=request.resource_id,
                resource_path=request.resource_path,
                resource_version=request.resource_version,
                action=request.action,
                user=request.user,
                steps_expected=request.steps_expected,
            )
        except OpLedgerError as e:
            raise http_error(e) from e
        return OperationModel.from_operation(operation)

    @router.get("", response_model=list[OperationModel], **exclude_unset)
    def list_operations(
        resource_id: str | None = Query(None, alias="resourceId"),
        phase: str | None = None,
        order: Literal["desc", "asc"] = "desc",
        limit: int | None = Query(None, ge=1, le=1000),
    ):
        """List operations, newest first by default.

        Examples:
        - GET /operations?resourceId=ws-1
        - GET /operations?phase=in_progress
        - GET /operations?phase=failed&order=asc&limit=10
        """
        try:
            criteria = OperationFilter(
                resource_id=resource_id,
                phase=PhaseFilter(phase) if phase else None,
                newest_first=order == "desc",
                limit=limit if limit is not None else default_limit,
            )
        except ValueError:
            raise HTTPException(400, f"Invalid phase: {phase}") from None
        return [OperationModel.from_operation(op) for op in registry.list_operations(criteria)]

    @router.get("/summary", response_model=dict[str, int])
    def operations_summary(resource_id: str | None = Query(None, alias="resourceId")):
        """Count operations per phase."""
        return registry.summary(resource_id)

    @router.get("/{operation_id}", response_model=OperationModel, **exclude_unset)
    def get_operation(operation_id: str):
        """Get one operation."""
        try:
            return OperationModel.from_operation(registry.get_operation(operation_id))
        except OpLedgerError as e:
            raise http_error(e) from e

    @router.post("/{operation_id}/steps", response_model=OperationModel, **exclude_unset)
    def record_step_update(operation_id: str, step: OperationStepModel):
        """Record a step report; returns the operation with its recomputed status."""
        try:
            operation = registry.record_step_update(operation_id, step.to_step())
        except OpLedgerError as e:
            raise http_error(e) from e
        return OperationModel.from_operation(operation)

    @router.post("/{operation_id}/status", response_model=OperationModel, **exclude_unset)
    def report_status(operation_id: str, request: StatusReportRequest):
        """Report the status of an operation that has no steps."""
        try:
            operation = registry.report_status(operation_id, request.status, request.message)
        except OpLedgerError as e:
            raise http_error(e) from e
        return OperationModel.from_operation(operation)

    return router
