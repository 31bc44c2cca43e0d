"""
Structured logging for opledger.

When a status badge shows the wrong state, the log stream is how you find
out which executor reported which step, and when. Every opledger component
logs through structlog with ``get_logger(__name__)`` and snake_case event
names (``operation_created``, ``step_recorded``, ``operation_completed``).

Pipeline::

    configure_logging(level, json_format, service)
        │
        ├── TimeStamper(iso)             (optional)
        ├── merge_contextvars            operation_id / step_id / request_id
        ├── add_log_level, add_logger_name
        ├── StackInfoRenderer, set_exc_info
        ├── service processor            service.name
        ├── ECS field renames            (JSON only)
        └── JSONRenderer | ConsoleRenderer

Scoped context::

    with LogContext(operation_id=op.id, step_id=step.step_id):
        logger.debug("step_recorded")   # both ids attached

Nested scopes restore the outer values on exit instead of dropping them.
"""

from __future__ import annotations

import logging
import sys
from contextlib import AbstractContextManager
from typing import TYPE_CHECKING, Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

if TYPE_CHECKING:
    from opledger.core.settings import OpLedgerSettings

# structlog key → Elastic Common Schema key
_ECS_FIELDS: dict[str, str] = {
    "timestamp": "@timestamp",
    "level": "log.level",
    "logger": "log.logger",
}


def _resolve_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def _service_processor(service: str) -> Processor:
    def add_service(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service.name", service)
        return event_dict

    return add_service


def _ecs_field_names(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Rename standard keys to their ECS equivalents for log aggregation."""
    for source, target in _ECS_FIELDS.items():
        if source in event_dict:
            event_dict[target] = event_dict.pop(source)
    return event_dict


def build_processors(
    json_format: bool,
    service: str = "opledger",
    add_timestamp: bool = True,
) -> list[Processor]:
    """Return the processor chain ``configure_logging`` installs."""
    processors: list[Processor] = []
    if add_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))
    processors += [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _service_processor(service),
    ]
    if json_format:
        processors += [_ecs_field_names, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    return processors


def configure_logging(
    level: str | int = "INFO",
    json_format: bool | None = None,
    service: str = "opledger",
    add_timestamp: bool = True,
) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        level: Level name or number (DEBUG, INFO, WARNING, ERROR)
        json_format: JSON lines if True, console if False, auto (JSON unless a tty) if None
        service: Value of the ``service.name`` field
        add_timestamp: Include an ISO 8601 timestamp
    """
    numeric_level = _resolve_level(level)
    if json_format is None:
        json_format = not sys.stdout.isatty()

    structlog.configure(
        processors=build_processors(json_format, service, add_timestamp),
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=numeric_level)


def configure_from_settings(settings: OpLedgerSettings) -> None:
    """Apply ``log_level`` / ``log_json`` from settings."""
    configure_logging(level=settings.log_level, json_format=settings.log_json)


def get_logger(name: str | None = None) -> Any:
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Attach key/values to every subsequent log line in this context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Scoped log context; restores whatever was bound before on exit.

    Example:
        with LogContext(request_id=request_id):
            ...
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs
        self._scope: AbstractContextManager[None] | None = None

    def __enter__(self) -> LogContext:
        self._scope = structlog.contextvars.bound_contextvars(**self._context)
        self._scope.__enter__()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        scope, self._scope = self._scope, None
        if scope is not None:
            scope.__exit__(*exc_info)


__all__ = [
    "build_processors",
    "configure_logging",
    "configure_from_settings",
    "get_logger",
    "bind_context",
    "clear_context",
    "LogContext",
]
