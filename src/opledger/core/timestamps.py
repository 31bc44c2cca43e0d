"""
Identifier and timestamp utilities (stdlib-only).

Operation records carry timestamps as numbers: float seconds since the Unix
epoch, UTC. Consumers of the wire format compare and sort them directly, so
every component goes through these helpers instead of calling ``time`` or
``datetime`` on its own.

STDLIB ONLY - NO PYDANTIC.
"""

import time
import uuid
from datetime import UTC, datetime


def epoch_now() -> float:
    """Current UTC time as float seconds since the epoch."""
    return time.time()


def to_iso8601(epoch: float | None) -> str | None:
    """Convert an epoch timestamp to an ISO 8601 string."""
    if epoch is None:
        return None
    return datetime.fromtimestamp(epoch, UTC).isoformat()


def new_operation_id() -> str:
    """Allocate a new operation id."""
    return str(uuid.uuid4())
