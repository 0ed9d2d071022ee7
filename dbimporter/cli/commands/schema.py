"""Schema command: print the introspected schema of a database connection."""

import asyncio

import typer

from dbimporter.cli.display import (
    display_cli_error,
    display_error,
    display_json_output,
    display_schema_tables,
)
from dbimporter.cli.errors import DbImporterCLIError
from dbimporter.cli.factories import create_importer_for_command
from dbimporter.connectors.database import DatabaseImporter
from dbimporter.exceptions import ConfigurationError, ImporterError
from dbimporter.logging import get_logger
from dbimporter.models import DataSchema

logger = get_logger(__name__)


async def _discover(importer: DatabaseImporter) -> DataSchema:
    async with importer:
        return await importer.get_schema()


def schema_command(
    connection_name: str = typer.Argument(..., help="Name of the connection"),
    profile: str = typer.Option("dev", "--profile", "-p", help="Profile to use"),
    format: str = typer.Option(
        "table", "--format", "-f", help="Output format: table or json"
    ),
) -> None:
    """Show tables, keys, indexes and relationships of a connection."""
    if format not in ("table", "json"):
        display_error(f"Unsupported format '{format}'. Use table or json")
        raise typer.Exit(2)

    try:
        importer = create_importer_for_command(connection_name, profile)
        schema = asyncio.run(_discover(importer))
    except DbImporterCLIError as e:
        display_cli_error(e)
        raise typer.Exit(1)
    except ConfigurationError as e:
        display_error(e.message)
        raise typer.Exit(2)
    except ImporterError as e:
        display_error(f"Schema discovery failed: {e.message}")
        raise typer.Exit(1)

    if format == "json":
        display_json_output(schema.to_dict())
    else:
        display_schema_tables(schema)
    logger.info(f"Described {len(schema.tables)} tables for '{connection_name}'")
