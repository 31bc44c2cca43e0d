"""
CLI utility helpers — output formatting and registry access.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from opledger.core.settings import get_settings
from opledger.core.timestamps import to_iso8601
from opledger.operations.models import Operation
from opledger.operations.registry import OperationRegistry
from opledger.operations.store import SQLiteOperationStore

console = Console()
err_console = Console(stderr=True)


# ── Registry helper ──────────────────────────────────────────────────────


def open_registry(database: str | None = None) -> OperationRegistry:
    """Open a registry over an existing SQLite store.

    Defaults to the configured ``sqlite_path``. Exits with code 1 when the
    database file does not exist rather than creating an empty one.
    """
    db_path = Path(database) if database else get_settings().sqlite_path
    if not db_path.is_file():
        err_console.print(f"[bold red]Error[/bold red] (NOT_FOUND): database not found: {escape(str(db_path))}")
        raise typer.Exit(code=1)
    return OperationRegistry(SQLiteOperationStore(db_path))


# ── Output helpers ───────────────────────────────────────────────────────


def print_json(payload: Any) -> None:
    console.print_json(json.dumps(payload, default=str))


def print_operations(operations: list[Operation], *, title: str = "") -> None:
    """Render operations as a Rich table."""
    if not operations:
        console.print("[dim]No items.[/dim]")
        return

    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in ("id", "resource", "action", "status", "message", "updated"):
        table.add_column(col, overflow="fold")
    for op in operations:
        table.add_row(
            op.id,
            op.resource_path or op.resource_id,
            op.action,
            op.status.value,
            op.message,
            to_iso8601(op.updated_when) or "",
        )
    console.print(table)


def print_operation(operation: Operation) -> None:
    """Render a single operation and its steps."""
    console.print(f"[bold]Operation: {operation.id}[/bold]")
    for key, value in operation.to_dict().items():
        if key == "steps":
            continue
        if key in ("createdWhen", "updatedWhen"):
            value = to_iso8601(value)
        console.print(f"  [cyan]{key}[/cyan]: {escape(str(value))}")

    if operation.steps:
        table = Table(title="Steps", pad_edge=False)
        for col in ("#", "stepId", "title", "status", "message"):
            table.add_column(col, overflow="fold")
        for index, step in enumerate(operation.steps, start=1):
            table.add_row(str(index), step.step_id, step.step_title, step.status.value, step.message)
        console.print(table)
