"""Database importer: runs import requests against a relational store."""

import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, InterfaceError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncResult

from dbimporter.config import DatabaseImporterOptions
from dbimporter.connectors.base import (
    ConnectionTestResult,
    Importer,
    ImporterCapabilities,
    ImporterStatus,
)
from dbimporter.connectors.database.connection_manager import ConnectionManager
from dbimporter.connectors.database.introspector import SchemaIntrospector
from dbimporter.connectors.database.query_builder import BuiltQuery, QueryBuilder
from dbimporter.exceptions import ConnectivityError, ExecutionError
from dbimporter.logging import get_logger
from dbimporter.models import NULL, DataSchema, ErrorKind, ImportRequest, ImportResult

logger = get_logger(__name__)


def classify_error(error: BaseException) -> Tuple[ErrorKind, bool]:
    """Return the error kind and whether retrying the import may succeed."""
    if isinstance(error, asyncio.TimeoutError):
        return ErrorKind.TIMEOUT, True
    if isinstance(error, DBAPIError) and error.connection_invalidated:
        return ErrorKind.CONNECTIVITY, True
    if isinstance(error, InterfaceError):
        return ErrorKind.CONNECTIVITY, True
    if isinstance(error, ConnectivityError):
        return ErrorKind.CONNECTIVITY, True
    return ErrorKind.EXECUTION, False


def _materialize(value: Any) -> Any:
    return NULL if value is None else value


class DatabaseImporter(Importer):
    """Importer for SQL databases reachable through SQLAlchemy's asyncio API.

    One instance owns one logical connection. Calls must not overlap.

    Example:
    -------
        options = DatabaseImporterOptions(connection_string="sqlite:///shop.db")
        async with DatabaseImporter("shop", options) as importer:
            result = await importer.import_data(ImportRequest(table_name="Orders"))

    """

    importer_type = "Database"

    def __init__(
        self,
        name: str,
        options: DatabaseImporterOptions,
        connection_manager: Optional[ConnectionManager] = None,
        description: str = "",
    ):
        super().__init__(name, description or f"Database importer '{name}'")
        self.options = options
        self.connection_manager = connection_manager or ConnectionManager(
            options, name=name
        )
        backend = self.connection_manager.backend
        self.query_builder = QueryBuilder(backend)
        self.introspector = SchemaIntrospector(
            backend.create_catalog_reader(options.schema)
        )

    async def open(self) -> None:
        """Open the connection. From ERROR the importer is reset first."""
        if self.status is ImporterStatus.ERROR:
            await self.reset()
        self._require_status(ImporterStatus.CLOSED, "open")

        await self.connection_manager.open()
        self._transition_to(ImporterStatus.OPEN)
        logger.info(f"Database importer '{self.name}' opened")

    async def close(self) -> None:
        self._require_status(ImporterStatus.OPEN, "close")
        try:
            await self.connection_manager.close(commit=True)
        finally:
            self._transition_to(ImporterStatus.CLOSED)
        logger.info(f"Database importer '{self.name}' closed")

    async def reset(self) -> None:
        """Leave ERROR by discarding the connection without committing."""
        self._require_status(ImporterStatus.ERROR, "reset")
        try:
            await self.connection_manager.close(commit=False)
        finally:
            self._transition_to(ImporterStatus.CLOSED)
        logger.info(f"Database importer '{self.name}' reset")

    async def test_connection(self) -> ConnectionTestResult:
        try:
            details = await self.connection_manager.test_connection()
        except ConnectivityError as e:
            logger.warning(f"Connection test for '{self.name}' failed: {e.message}")
            return ConnectionTestResult(False, e.message)

        duration_ms = details.pop("duration_ms", 0)
        return ConnectionTestResult(
            True,
            "Connection successful",
            duration_ms=duration_ms,
            details={key: str(value) for key, value in details.items()},
        )

    async def import_data(self, request: ImportRequest) -> ImportResult:
        """Run ``request`` and return its rows.

        Args:
        ----
            request: What to import

        Returns:
        -------
            A successful result with every row, or a failed result tagged
            with its error kind; the importer is then in ERROR

        Raises:
        ------
            InvalidStateError: If the importer is not open
            ConfigurationError: If the request cannot be turned into a query

        """
        self._require_status(ImporterStatus.OPEN, "import data")
        query = self.query_builder.build(request)

        self._transition_to(ImporterStatus.IMPORTING)
        started_at = datetime.now(timezone.utc)
        logger.info(f"Import {request.import_id} started on '{self.name}'")

        try:
            columns, records = await self._execute(query)
        except asyncio.CancelledError:
            self._transition_to(ImporterStatus.ERROR)
            logger.warning(f"Import {request.import_id} on '{self.name}' was cancelled")
            raise
        except Exception as e:
            self._transition_to(ImporterStatus.ERROR)
            error_kind, retryable = classify_error(e)
            logger.error(
                f"Import {request.import_id} on '{self.name}' failed "
                f"({error_kind.value}): {e}"
            )
            message = (
                f"Query timed out after {self.options.command_timeout_seconds}s"
                if error_kind is ErrorKind.TIMEOUT
                else str(e)
            )
            return ImportResult.failed(
                request.import_id,
                message,
                error_kind=error_kind,
                retryable=retryable,
                started_at=started_at,
            )

        self._transition_to(ImporterStatus.OPEN)
        logger.info(
            f"Import {request.import_id} on '{self.name}' imported {len(records)} records"
        )
        return ImportResult.succeeded(
            request.import_id, columns, records, started_at=started_at
        )

    async def _execute(self, query: BuiltQuery) -> Tuple[List[str], List[Dict[str, Any]]]:
        connection = self.connection_manager.connection
        if connection is None:
            raise ExecutionError("Connection is not open", self.name)

        timeout = self.options.command_timeout_seconds or None
        statement = text(query.text)

        if not connection.dialect.supports_server_side_cursors:
            buffered = await asyncio.wait_for(
                connection.execute(statement, query.parameters), timeout
            )
            columns = list(buffered.keys())
            return columns, [self._to_record(columns, row) for row in buffered.all()]

        result: AsyncResult = await asyncio.wait_for(
            connection.stream(statement, query.parameters), timeout
        )
        try:
            columns = list(result.keys())
            records = [self._to_record(columns, row) async for row in result]
        finally:
            await result.close()
        return columns, records

    @staticmethod
    def _to_record(columns: List[str], row: Any) -> Dict[str, Any]:
        return {column: _materialize(value) for column, value in zip(columns, row)}

    async def get_schema(self) -> DataSchema:
        """Discover tables, keys, indexes and relationships.

        Raises:
            InvalidStateError: If the importer is not open
            ExecutionError: If a catalog query fails
        """
        self._require_status(ImporterStatus.OPEN, "get schema")
        try:
            return await self.introspector.get_schema(
                self.connection_manager.connection,
                f"{self.name} Schema",
                self.description,
            )
        except SQLAlchemyError as e:
            raise ExecutionError(f"Schema discovery failed: {e}", self.name) from e

    def get_capabilities(self) -> ImporterCapabilities:
        return ImporterCapabilities(
            supports_streaming=False,
            supports_batching=True,
            supports_filtering=True,
            supports_sorting=True,
            supports_pagination=True,
            supports_schema_discovery=True,
            supports_incremental_import=True,
            supports_parallel_import=False,
            supports_resume_import=False,
            supports_authentication=True,
            supports_encryption=True,
            supports_compression=False,
            max_batch_size=self.options.batch_size,
            max_parallel_imports=1,
            supported_data_formats=("sql",),
            supported_authentication_methods=("none", "sql", "windows", "azure-ad"),
            supported_encryption_methods=("none", "ssl", "tls"),
            supported_compression_methods=(),
        )

    async def dispose(self) -> None:
        """Release the connection from any status. Safe to call more than once."""
        await self.connection_manager.dispose()
        # Teardown is allowed from every status, so it bypasses the transition table
        self._status = ImporterStatus.CLOSED
