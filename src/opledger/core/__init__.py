"""
opledger.core — ambient primitives shared by every opledger component.

- errors:     typed error hierarchy
- logging:    structlog configuration and context binding
- settings:   pydantic-settings configuration
- timestamps: epoch timestamps and id allocation
"""

from opledger.core.errors import (
    ConflictError,
    ErrorCategory,
    ErrorContext,
    NotFoundError,
    OperationAlreadyTerminalError,
    OperationNotFoundError,
    OpLedgerError,
    StatusDerivedFromStepsError,
    StatusNotReportableError,
    StorageError,
    UnknownActionKindError,
    UnknownStatusError,
    ValidationError,
)
from opledger.core.logging import LogContext, configure_logging, get_logger

__all__ = [
    "ConflictError",
    "ErrorCategory",
    "ErrorContext",
    "NotFoundError",
    "OperationAlreadyTerminalError",
    "OperationNotFoundError",
    "OpLedgerError",
    "StatusDerivedFromStepsError",
    "StatusNotReportableError",
    "StorageError",
    "UnknownActionKindError",
    "UnknownStatusError",
    "ValidationError",
    "LogContext",
    "configure_logging",
    "get_logger",
]
