"""Import command: run a table or query import and print the rows."""

import asyncio
from typing import Any, Dict, List, Optional

import typer
import yaml

from dbimporter.cli.display import (
    display_cli_error,
    display_error,
    display_json_output,
    display_records_table,
    import_result_to_dict,
)
from dbimporter.cli.errors import DbImporterCLIError, InvalidParameterError
from dbimporter.cli.factories import create_importer_for_command
from dbimporter.connectors.database import DatabaseImporter
from dbimporter.exceptions import ConfigurationError, ImporterError
from dbimporter.logging import get_logger
from dbimporter.models import ImportRequest, ImportResult

logger = get_logger(__name__)


def parse_params(raw_params: Optional[List[str]]) -> Dict[str, Any]:
    """Parse ``name=value`` options; values are typed as YAML scalars.

    ``--param limit=10`` binds the integer 10, ``--param code='007'`` the
    string ``"007"``.
    """
    params: Dict[str, Any] = {}
    for raw in raw_params or []:
        name, sep, value = raw.partition("=")
        if not sep or not name.strip():
            raise InvalidParameterError(raw)
        try:
            params[name.strip()] = yaml.safe_load(value) if value else ""
        except yaml.YAMLError:
            params[name.strip()] = value
    return params


async def _run_import(importer: DatabaseImporter, request: ImportRequest) -> ImportResult:
    async with importer:
        return await importer.import_data(request)


def import_command(
    connection_name: str = typer.Argument(..., help="Name of the connection"),
    table: Optional[str] = typer.Option(None, "--table", "-t", help="Table to import"),
    query: Optional[str] = typer.Option(
        None, "--query", "-q", help="SQL query to run instead of a table import"
    ),
    filter: Optional[str] = typer.Option(None, "--filter", help="WHERE expression"),
    sort: Optional[str] = typer.Option(None, "--sort", help="ORDER BY expression"),
    page: Optional[int] = typer.Option(None, "--page", help="1-based page number"),
    page_size: Optional[int] = typer.Option(None, "--page-size", help="Rows per page"),
    param: Optional[List[str]] = typer.Option(
        None, "--param", help="Query parameter as name=value (repeatable)"
    ),
    profile: str = typer.Option("dev", "--profile", "-p", help="Profile to use"),
    format: str = typer.Option(
        "table", "--format", "-f", help="Output format: table or json"
    ),
) -> None:
    """Import rows from a table or query."""
    if format not in ("table", "json"):
        display_error(f"Unsupported format '{format}'. Use table or json")
        raise typer.Exit(2)
    if not table and not query:
        display_error("Specify --table or --query")
        raise typer.Exit(2)

    try:
        request = ImportRequest(
            query=query,
            table_name=table,
            filter=filter,
            sort=sort,
            page_number=page,
            page_size=page_size,
            parameters=parse_params(param),
        )
        importer = create_importer_for_command(connection_name, profile)
        result = asyncio.run(_run_import(importer, request))
    except DbImporterCLIError as e:
        display_cli_error(e)
        raise typer.Exit(1)
    except ConfigurationError as e:
        display_error(e.message)
        raise typer.Exit(2)
    except ImporterError as e:
        display_error(f"Import failed: {e.message}")
        raise typer.Exit(1)

    if not result.success:
        kind = result.error_kind.value if result.error_kind else "error"
        retry = " (retryable)" if result.retryable else ""
        display_error(f"Import failed [{kind}]{retry}: {result.error_message}")
        raise typer.Exit(1)

    if format == "json":
        display_json_output(import_result_to_dict(result))
    else:
        display_records_table(result)
    logger.info(
        f"Imported {result.records_imported} records from '{connection_name}'"
    )
