"""
CLI: ``opledger statuses`` — print the status taxonomy.
"""

from __future__ import annotations

import typer
from rich.table import Table

from opledger.cli.utils import console, print_json
from opledger.operations.statuses import ACTION_STATUSES, OperationStatus, classify


def statuses(
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Show every status with its phase and outcome, and the action kind table."""
    rows = []
    for status in OperationStatus:
        classification = classify(status)
        rows.append({
            "status": status.value,
            "phase": classification.phase.value,
            "outcome": classification.outcome.value if classification.outcome else None,
        })

    if json_out:
        print_json({
            "statuses": rows,
            "actions": {
                kind.value: {
                    "awaiting": s.awaiting.value,
                    "in_progress": s.in_progress.value,
                    "succeeded": s.succeeded.value,
                    "failed": s.failed.value,
                }
                for kind, s in ACTION_STATUSES.items()
            },
        })
        return

    table = Table(title="Statuses", pad_edge=False)
    for col in ("status", "phase", "outcome"):
        table.add_column(col)
    for row in rows:
        table.add_row(row["status"], row["phase"], row["outcome"] or "-")
    console.print(table)

    actions = Table(title="Action kinds", pad_edge=False)
    for col in ("action", "awaiting", "in progress", "succeeded", "failed"):
        actions.add_column(col)
    for kind, s in ACTION_STATUSES.items():
        actions.add_row(kind.value, s.awaiting.value, s.in_progress.value, s.succeeded.value, s.failed.value)
    console.print(actions)
