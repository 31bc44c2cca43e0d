"""Settings for opledger services.

Configuration is explicit, validated, and environment-driven: every field can
be set through an ``OPLEDGER_``-prefixed environment variable or a ``.env``
file.

Fields
──────
host               : Bind address for the HTTP API
port               : Bind port for the HTTP API
debug              : Expose exception details in 500 responses
log_level          : Structlog log level
log_json           : JSON logs (True), console logs (False), auto (None)
store_backend      : ``memory`` or ``sqlite``
sqlite_path        : Database file for the ``sqlite`` backend
api_prefix         : URL prefix of the operations router
default_list_limit : Page size applied by the API when none is requested

Examples:
    >>> from opledger.core.settings import OpLedgerSettings
    >>> settings = OpLedgerSettings(store_backend="sqlite", sqlite_path="/tmp/ops.db")
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class OpLedgerSettings(BaseSettings):
    """Settings for the operation lifecycle engine and its HTTP surface."""

    model_config = SettingsConfigDict(
        env_prefix="OPLEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Network ──────────────────────────────────────────────────
    host: str = "0.0.0.0"
    port: int = 8000

    # ── Observability ────────────────────────────────────────────
    debug: bool = False
    log_level: str = "INFO"
    log_json: bool | None = None

    # ── Storage ──────────────────────────────────────────────────
    store_backend: Literal["memory", "sqlite"] = "memory"
    sqlite_path: Path = Field(
        default_factory=lambda: Path.home() / ".opledger" / "operations.db",
        description="Database file used when store_backend is 'sqlite'",
    )

    # ── API ──────────────────────────────────────────────────────
    api_title: str = "opledger"
    api_prefix: str = "/api/v1/operations"
    default_list_limit: int = Field(default=100, ge=1, le=1000)


@lru_cache(maxsize=1)
def get_settings() -> OpLedgerSettings:
    """Return the process-wide settings instance."""
    return OpLedgerSettings()
