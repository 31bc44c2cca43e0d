"""
Structured error types for the operation lifecycle engine.

Every error raised by opledger extends :class:`OpLedgerError` so callers get
the same metadata no matter which component failed:

- **Category:** what kind of error (validation, not found, conflict, ...)
- **Context:** operation id, step id, resource id, offending status
- **Cause:** chained underlying exception for root cause analysis

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                       OpLedgerError                          │
        │              (category, context, cause)                      │
        ├─────────────────────────────────────────────────────────────┤
        │                                                              │
        │  ValidationError        NotFoundError      ConflictError     │
        │  (VALIDATION)           (NOT_FOUND)        (CONFLICT)        │
        │       │                      │                  │            │
        │  UnknownStatusError     OperationNotFound  OperationAlready  │
        │  UnknownActionKindError                    TerminalError     │
        │                                            StatusDerived     │
        │                                            FromStepsError    │
        │                                            StatusNotReport-  │
        │                                            ableError         │
        │                                                              │
        │  StorageError (STORAGE)                                      │
        └─────────────────────────────────────────────────────────────┘

Nothing in the engine is retryable: an unknown status is a data error in the
producer, a missing operation is a caller error, and a terminal operation must
be superseded by a new one. Storage retries belong to the persistence layer.

Usage:
    from opledger.core.errors import OperationNotFoundError

    try:
        registry.get_operation(op_id)
    except OperationNotFoundError as e:
        log.warning("missing", **e.to_dict())
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and HTTP mapping."""

    VALIDATION = "VALIDATION"     # Unknown status, empty action identifier
    NOT_FOUND = "NOT_FOUND"       # Referenced operation does not exist
    CONFLICT = "CONFLICT"         # Mutation rejected by current state
    STORAGE = "STORAGE"           # Persistence collaborator failures
    INTERNAL = "INTERNAL"         # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only fields that are set end up in :meth:`to_dict`, so errors can be
    logged with ``logger.warning("...", **error.to_dict())`` without noise.

    Attributes:
        operation_id: Operation the error concerns
        step_id: Step within the operation
        resource_id: Managed resource the operation targets
        status: Status identifier involved (e.g. the unknown one)
        metadata: Additional key-value pairs
    """

    operation_id: str | None = None
    step_id: str | None = None
    resource_id: str | None = None
    status: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["operation_id", "step_id", "resource_id", "status"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class OpLedgerError(Exception):
    """
    Base exception for all opledger errors.

    Subclasses set ``default_category``; instances may override it. Errors are
    never retryable inside the engine, so there is no retry metadata here.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> OpLedgerError:
        """
        Add context to this error (fluent API).

        Usage:
            raise StorageError("write failed").with_context(operation_id=op_id)
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(OpLedgerError):
    """Input outside the engine's fixed vocabularies."""

    default_category = ErrorCategory.VALIDATION


class UnknownStatusError(ValidationError):
    """A status identifier outside the fixed vocabulary.

    This is a programmer/data error in whoever produced the value. Callers
    must not map it to a default phase.
    """

    def __init__(self, status: Any, message: str | None = None):
        self.status = status
        super().__init__(
            message or f"Unknown operation status: {status!r}",
            context=ErrorContext(status=str(status)),
        )


class UnknownActionKindError(ValidationError):
    """An empty or non-string action identifier."""

    def __init__(self, action: Any, message: str | None = None):
        self.action = action
        super().__init__(
            message or f"Invalid action identifier: {action!r}",
            context=ErrorContext(metadata={"action": str(action)}),
        )


# =============================================================================
# NOT FOUND / CONFLICT
# =============================================================================


class NotFoundError(OpLedgerError):
    """A referenced record does not exist."""

    default_category = ErrorCategory.NOT_FOUND


class OperationNotFoundError(NotFoundError):
    """No operation with the given id."""

    def __init__(self, operation_id: str):
        self.operation_id = operation_id
        super().__init__(
            f"Operation not found: {operation_id}",
            context=ErrorContext(operation_id=operation_id),
        )


class ConflictError(OpLedgerError):
    """A mutation rejected because of the record's current state."""

    default_category = ErrorCategory.CONFLICT


class OperationAlreadyTerminalError(ConflictError):
    """The operation reached a completed status and accepts no more updates.

    Create a superseding operation instead.
    """

    def __init__(self, operation_id: str, status: str):
        self.operation_id = operation_id
        self.status = status
        super().__init__(
            f"Operation {operation_id} is already terminal (status: {status})",
            context=ErrorContext(operation_id=operation_id, status=status),
        )


class StatusDerivedFromStepsError(ConflictError):
    """A direct status report on an operation whose status comes from its steps."""

    def __init__(self, operation_id: str):
        self.operation_id = operation_id
        super().__init__(
            f"Operation {operation_id} has recorded steps; its status is derived from them",
            context=ErrorContext(operation_id=operation_id),
        )


class StatusNotReportableError(ConflictError):
    """A direct status report outside the operation's own status set.

    Raised for statuses belonging to another action kind and for moving a
    started operation back to its awaiting status.
    """

    def __init__(self, operation_id: str, status: str, action: str):
        self.operation_id = operation_id
        self.status = status
        self.action = action
        super().__init__(
            f"Status {status!r} cannot be reported for {action!r} operation {operation_id}",
            context=ErrorContext(operation_id=operation_id, status=status, metadata={"action": action}),
        )


# =============================================================================
# STORAGE
# =============================================================================


class StorageError(OpLedgerError):
    """The persistence collaborator failed."""

    default_category = ErrorCategory.STORAGE


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "OpLedgerError",
    "ValidationError",
    "UnknownStatusError",
    "UnknownActionKindError",
    "NotFoundError",
    "OperationNotFoundError",
    "ConflictError",
    "OperationAlreadyTerminalError",
    "StatusDerivedFromStepsError",
    "StatusNotReportableError",
    "StorageError",
]
