#!/usr/bin/env python3
"""dbimporter CLI.

Commands:
- connect list / connect test: inspect and probe profile connections
- schema: print the introspected schema of a connection
- import: run a table or query import
"""

import typer
from rich.console import Console

from dbimporter.cli.commands.connect import connect_app
from dbimporter.cli.commands.imports import import_command
from dbimporter.cli.commands.schema import schema_command
from dbimporter.logging import configure_logging, get_logger, suppress_third_party_loggers

logger = get_logger(__name__)
console = Console()

app = typer.Typer(
    name="dbimporter",
    help="dbimporter CLI - Import data from relational databases",
    add_completion=False,
)

app.add_typer(connect_app, name="connect")
app.command("schema")(schema_command)
app.command("import")(import_command)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version and exit"),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose output"
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Only show warnings and errors"
    ),
) -> None:
    """dbimporter CLI - Import data from relational databases.

    Connections are read from profiles/<profile>.yml in the current directory.

    Examples:
        dbimporter connect test shop --profile prod
        dbimporter schema shop --format json
        dbimporter import shop --table Orders --page 2 --page-size 10
    """
    if version:
        from dbimporter import __version__

        console.print(f"dbimporter v{__version__}")
        raise typer.Exit()

    configure_logging(verbose=verbose, quiet=quiet)
    suppress_third_party_loggers()
    logger.debug("Logging configured from CLI flags")

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


if __name__ == "__main__":
    app()
