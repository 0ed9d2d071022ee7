"""Connect command for the dbimporter CLI.

Lists the database connectors of a profile and tests their connectivity.
"""

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from dbimporter.cli.display import (
    display_cli_error,
    display_error,
    display_json_output,
    display_success,
    mask_params,
)
from dbimporter.cli.errors import DbImporterCLIError
from dbimporter.cli.factories import create_importer_for_command, load_project_for_command
from dbimporter.config import translate_parameters
from dbimporter.exceptions import ImporterError
from dbimporter.logging import get_logger

connect_app = typer.Typer(
    name="connect",
    help="List and test database connections",
    rich_markup_mode="rich",
)

console = Console()
logger = get_logger(__name__)


def _describe_provider(params) -> str:
    params = translate_parameters(params)
    if params.get("provider_name"):
        return str(params["provider_name"])
    if params.get("connection_string"):
        # dialect[+driver]://...
        return str(params["connection_string"]).split(":", 1)[0].split("+", 1)[0]
    return "sqlite"


@connect_app.command("list")
def list_connections(
    profile: str = typer.Option(
        "dev", "--profile", "-p", help="Profile to use for listing connections"
    ),
    format: str = typer.Option(
        "table", "--format", help="Output format: table or json"
    ),
) -> None:
    """List the database connections in the profile."""
    try:
        project = load_project_for_command(profile)
    except DbImporterCLIError as e:
        display_cli_error(e)
        raise typer.Exit(1)

    connectors = project.get_database_connectors()
    if not connectors:
        display_error(f"No database connections in profile '{profile}'")
        raise typer.Exit(1)

    if format == "json":
        display_json_output(
            {
                name: {
                    "type": config.get("type"),
                    "params": mask_params(config.get("params", {}) or {}),
                }
                for name, config in connectors.items()
            }
        )
    else:
        table = Table(show_header=True, header_style="bold blue")
        table.add_column("Name", style="cyan")
        table.add_column("Type", style="white")
        table.add_column("Provider", style="green")
        for name, config in connectors.items():
            params = config.get("params", {}) or {}
            table.add_row(name, str(config.get("type")).upper(), _describe_provider(params))
        console.print(f"📡 [bold blue]Connections in profile '{profile}'[/bold blue]")
        console.print(table)

    logger.info(f"Listed {len(connectors)} connections for profile '{profile}'")


@connect_app.command("test")
def test_connection(
    connection_name: str = typer.Argument(..., help="Name of connection to test"),
    profile: str = typer.Option("dev", "--profile", "-p", help="Profile to use"),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show connection parameters"
    ),
) -> None:
    """Test a specific connection."""
    try:
        project = load_project_for_command(profile)
        connector = project.get_connector(connection_name)
        if connector and verbose:
            console.print(f"Testing connection '{connection_name}'")
            for key, value in mask_params(connector.get("params", {}) or {}).items():
                console.print(f"  {key}: {value}", markup=False)
        importer = create_importer_for_command(connection_name, profile)
        result = asyncio.run(importer.test_connection())
    except DbImporterCLIError as e:
        display_cli_error(e)
        raise typer.Exit(1)
    except ImporterError as e:
        display_error(f"Connection test failed: {e.message}")
        raise typer.Exit(1)

    if not result.success:
        display_error(f"Connection test failed: {result.message}")
        raise typer.Exit(1)

    display_success(f"Connection test succeeded ({result.duration_ms} ms)")
    if verbose:
        for key, value in result.details.items():
            console.print(f"  {key}: {value}", markup=False)
    logger.info(f"Connection test passed for '{connection_name}'")
