"""Rich display functions for the dbimporter CLI."""

import datetime
import decimal
import uuid
from typing import Any, Dict

import pandas as pd
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from dbimporter.cli.errors import DbImporterCLIError
from dbimporter.models import DataSchema, ImportResult

console = Console()


def display_error(message: str) -> None:
    console.print(f"❌ [bold red]{escape(message)}[/bold red]")


def display_cli_error(error: DbImporterCLIError) -> None:
    """Display a CLI error with its suggestions."""
    display_error(error.message)
    for suggestion in error.suggestions:
        console.print(f"💡 [dim]{escape(suggestion)}[/dim]")


def display_success(message: str) -> None:
    console.print(f"✓ [green]{message}[/green]")


def _json_default(value: Any) -> Any:
    if value is pd.NA:
        return None
    if isinstance(value, (datetime.date, datetime.datetime, datetime.time)):
        return value.isoformat()
    if isinstance(value, (decimal.Decimal, uuid.UUID)):
        return str(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def display_json_output(data: Any) -> None:
    """Display JSON output without wrapping or markup processing.

    Args:
        data: Data to display as JSON
    """
    console.print_json(data=data, default=_json_default)


def _cell(value: Any) -> str:
    if value is pd.NA:
        return "NULL"
    return escape(str(value))


def display_records_table(result: ImportResult) -> None:
    """Display imported records as a table followed by a summary line."""
    table = Table(show_header=True, header_style="bold blue")
    for column in result.columns:
        table.add_column(escape(column), overflow="fold")
    for record in result.records:
        table.add_row(*(_cell(record[column]) for column in result.columns))

    console.print(table)
    display_success(
        f"{result.records_imported} records imported in {result.duration_ms or 0} ms"
    )


def import_result_to_dict(result: ImportResult) -> Dict[str, Any]:
    return {
        "import_id": result.import_id,
        "success": result.success,
        "records_imported": result.records_imported,
        "total_records": result.total_records,
        "duration_ms": result.duration_ms,
        "columns": list(result.columns),
        "records": result.records,
    }


def display_schema_tables(schema: DataSchema) -> None:
    """Display every table of ``schema`` followed by its relationships."""
    console.print(f"📋 [bold blue]{schema.name}[/bold blue] ({len(schema.tables)} tables)")

    for data_table in schema.tables:
        primary_key = set(data_table.primary_key)
        table = Table(title=data_table.name, show_header=True, header_style="bold blue")
        table.add_column("Column", style="cyan")
        table.add_column("Type", style="white")
        table.add_column("Nullable")
        table.add_column("Key")
        for column in data_table.columns:
            table.add_row(
                column.name,
                _format_type(column.data_type, column.max_length, column.precision, column.scale),
                "yes" if column.nullable else "no",
                "PK" if column.name in primary_key else "",
            )
        console.print(table)

        for index in data_table.indexes:
            unique = "unique " if index.is_unique else ""
            console.print(f"  [dim]{unique}index {index.name} ({', '.join(index.columns)})[/dim]")

    if schema.relationships:
        console.print("\n🔗 [bold blue]Relationships[/bold blue]")
        for rel in schema.relationships:
            console.print(
                f"  {rel.child_table}({', '.join(rel.child_columns)}) -> "
                f"{rel.parent_table}({', '.join(rel.parent_columns)}) "
                f"[dim]{rel.kind.value}[/dim]"
            )


def _format_type(data_type: str, max_length, precision, scale) -> str:
    if max_length:
        return f"{data_type}({max_length})"
    if precision is not None and scale is not None:
        return f"{data_type}({precision},{scale})"
    return data_type


def mask_params(params: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of connector params with secrets masked."""
    masked = {}
    for key, value in params.items():
        lowered = key.lower()
        if "password" in lowered or "secret" in lowered:
            value = "****"
        elif lowered in ("connection_string", "connectionstring", "url") and value:
            try:
                value = make_url(str(value)).render_as_string(hide_password=True)
            except ArgumentError:
                value = "****"
        masked[key] = value
    return masked
