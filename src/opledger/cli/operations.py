"""
CLI: ``opledger ops`` — inspect recorded operations.
"""

from __future__ import annotations

import typer

from opledger.cli.utils import err_console, open_registry, print_json, print_operation, print_operations
from opledger.core.errors import OperationNotFoundError
from opledger.operations.registry import OperationFilter
from opledger.operations.statuses import PhaseFilter

app = typer.Typer(no_args_is_help=True)


@app.command("list")
def list_operations(
    resource_id: str | None = typer.Option(None, "--resource-id", "-r"),
    phase: PhaseFilter | None = typer.Option(None, "--phase", "-s"),
    oldest_first: bool = typer.Option(False, "--oldest-first"),
    limit: int = typer.Option(50, "--limit", "-n"),
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List operations, newest first."""
    registry = open_registry(database)
    criteria = OperationFilter(
        resource_id=resource_id,
        phase=phase,
        newest_first=not oldest_first,
        limit=limit,
    )
    operations = registry.list_operations(criteria).to_list()
    if json_out:
        print_json([op.to_dict() for op in operations])
        return
    print_operations(operations, title="Operations")


@app.command("show")
def show_operation(
    operation_id: str = typer.Argument(..., help="Operation ID"),
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Show one operation with its steps."""
    registry = open_registry(database)
    try:
        operation = registry.get_operation(operation_id)
    except OperationNotFoundError as e:
        err_console.print(f"[bold red]Error[/bold red] (NOT_FOUND): {e.message}")
        raise typer.Exit(code=1) from e

    if json_out:
        print_json(operation.to_dict())
        return
    print_operation(operation)


@app.command("summary")
def summary(
    resource_id: str | None = typer.Option(None, "--resource-id", "-r"),
    database: str | None = typer.Option(None, "--database", "-d"),
) -> None:
    """Count operations per phase."""
    registry = open_registry(database)
    print_json(registry.summary(resource_id))
