"""Connection and transaction lifecycle for the database importer."""

import time
from enum import Enum
from typing import Any, Dict, Optional

from sqlalchemy import text
from sqlalchemy.exc import ArgumentError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncConnection,
    AsyncEngine,
    AsyncTransaction,
    create_async_engine,
)

from dbimporter.config import DatabaseImporterOptions, IsolationLevel, TransactionMode
from dbimporter.connectors.database.backends import Backend, resolve_backend
from dbimporter.exceptions import (
    ConfigurationError,
    ConnectivityError,
    TransactionError,
)
from dbimporter.logging import get_logger

logger = get_logger(__name__)


class ConnectionState(Enum):
    """State of the managed connection."""

    CLOSED = "closed"
    OPEN = "open"
    OPEN_WITH_TRANSACTION = "open_with_transaction"
    FAULTED = "faulted"


class ConnectionManager:
    """Owns one engine, one connection and at most one transaction.

    The transaction mode decides what happens around the connection:
    ``NONE`` runs in autocommit, ``SINGLE`` begins one transaction on open
    and ``ROLLING`` begins a new one after every commit or rollback.
    """

    def __init__(
        self,
        options: DatabaseImporterOptions,
        name: str = "database",
        backend: Optional[Backend] = None,
    ):
        self.options = options
        self.name = name
        self._backend = backend or resolve_backend(options)
        self._isolation_level = options.resolved_isolation_level
        self._transaction_mode = options.resolved_transaction_mode
        self._engine: Optional[AsyncEngine] = None
        self._connection: Optional[AsyncConnection] = None
        self._transaction: Optional[AsyncTransaction] = None
        self._state = ConnectionState.CLOSED

    @property
    def backend(self) -> Backend:
        return self._backend

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._connection is not None

    @property
    def connection(self) -> Optional[AsyncConnection]:
        return self._connection

    @property
    def transaction(self) -> Optional[AsyncTransaction]:
        return self._transaction

    @property
    def isolation_level(self) -> IsolationLevel:
        return self._isolation_level

    @property
    def transaction_mode(self) -> TransactionMode:
        return self._transaction_mode

    def _create_engine(self) -> AsyncEngine:
        url = self._backend.build_url(self.options)
        logger.debug(
            f"Creating engine for {url.render_as_string(hide_password=True)}"
        )
        try:
            return create_async_engine(url, **self._backend.engine_kwargs(self.options))
        except (ArgumentError, ImportError) as e:
            raise ConfigurationError(
                f"Cannot create engine for {self._backend.name}: {e}", self.name
            ) from e

    async def open(self) -> None:
        """Connect and, unless running without transactions, begin one.

        Raises:
            ConnectivityError: If the connection cannot be established
            TransactionError: If the isolation level cannot be applied or the
                initial transaction cannot be begun
        """
        if self.is_open:
            logger.warning(f"Connection '{self.name}' is already open")
            return

        engine = self._create_engine()
        try:
            connection = await engine.connect()
        except (SQLAlchemyError, OSError) as e:
            await engine.dispose()
            self._state = ConnectionState.CLOSED
            raise ConnectivityError(
                f"Failed to open connection: {e}", self.name
            ) from e

        self._engine = engine
        self._connection = connection

        try:
            if self._transaction_mode is TransactionMode.NONE:
                await connection.execution_options(isolation_level="AUTOCOMMIT")
            else:
                await self._apply_isolation_level(connection)
        except SQLAlchemyError as e:
            await self._release()
            raise TransactionError(
                f"Failed to set isolation level: {e}", self.name
            ) from e

        if self._transaction_mode is TransactionMode.NONE:
            self._state = ConnectionState.OPEN
            logger.info(f"Opened connection '{self.name}' in autocommit mode")
            return

        try:
            await self._begin()
        except TransactionError:
            await self._release()
            raise
        logger.info(
            f"Opened connection '{self.name}' with {self._transaction_mode.value} "
            f"transactions at {self._isolation_level.value}"
        )

    async def _apply_isolation_level(self, connection: AsyncConnection) -> None:
        level = self._isolation_level
        if level is IsolationLevel.UNSPECIFIED:
            return
        if not self._backend.supports_isolation_level(level):
            logger.warning(
                f"Isolation level {level.value} is not supported by "
                f"{self._backend.name}; using the driver default"
            )
            return
        await connection.execution_options(isolation_level=level.value)

    async def _begin(self) -> None:
        try:
            self._transaction = await self._connection.begin()
        except SQLAlchemyError as e:
            self._transaction = None
            raise TransactionError(
                f"Failed to begin transaction: {e}", self.name
            ) from e
        self._state = ConnectionState.OPEN_WITH_TRANSACTION

    async def close(self, commit: bool = True) -> None:
        """Finish any transaction, then close the connection and engine.

        The transaction is rolled back instead of committed when ``commit`` is
        False or the connection is faulted.
        """
        if self._connection is None:
            logger.warning(f"Connection '{self.name}' is already closed")
            return

        try:
            self._track_autobegun_transaction()
            if self._transaction is not None:
                if commit and self._state is not ConnectionState.FAULTED:
                    await self._finish(commit=True)
                else:
                    await self._finish(commit=False)
        finally:
            await self._release()
        logger.info(f"Closed connection '{self.name}'")

    async def commit(self) -> None:
        """Commit the current transaction.

        Raises:
            TransactionError: If the commit fails; the connection is then faulted
        """
        await self._end_transaction(commit=True)

    async def rollback(self) -> None:
        """Roll back the current transaction.

        Raises:
            TransactionError: If the rollback fails; the connection is then faulted
        """
        await self._end_transaction(commit=False)

    def _track_autobegun_transaction(self) -> None:
        # SQLAlchemy begins a transaction implicitly on the first statement
        # after a SINGLE-mode commit or rollback
        if self._transaction is None and self._connection.in_transaction():
            self._transaction = self._connection.get_transaction()

    async def _end_transaction(self, commit: bool) -> None:
        operation = "commit" if commit else "rollback"
        if self._connection is not None:
            self._track_autobegun_transaction()
        if self._transaction is None:
            logger.warning(f"No active transaction to {operation} on '{self.name}'")
            return

        await self._finish(commit)
        logger.debug(f"Transaction {operation} on '{self.name}'")

        if self._transaction_mode is TransactionMode.ROLLING:
            try:
                await self._begin()
            except TransactionError:
                self._state = ConnectionState.FAULTED
                raise

    async def _finish(self, commit: bool) -> None:
        transaction = self._transaction
        operation = "commit" if commit else "roll back"
        try:
            if commit:
                await transaction.commit()
            else:
                await transaction.rollback()
        except SQLAlchemyError as e:
            self._state = ConnectionState.FAULTED
            raise TransactionError(
                f"Failed to {operation} transaction: {e}", self.name
            ) from e
        finally:
            if not transaction.is_active:
                self._transaction = None
        self._state = ConnectionState.OPEN

    async def test_connection(self) -> Dict[str, Any]:
        """Connect with a throwaway engine and run the backend probe query.

        Managed state is never touched.

        Returns:
            Non-secret details of the connection plus the elapsed milliseconds

        Raises:
            ConnectivityError: If the probe fails for any reason
        """
        started = time.monotonic()
        try:
            engine = self._create_engine()
        except ConfigurationError as e:
            raise ConnectivityError(
                f"Connection test failed: {e.message}", self.name
            ) from e
        try:
            async with engine.connect() as connection:
                await connection.execute(text(self._backend.probe_query))
        except (SQLAlchemyError, OSError) as e:
            raise ConnectivityError(f"Connection test failed: {e}", self.name) from e
        finally:
            await engine.dispose()

        url = engine.url
        return {
            "backend": self._backend.name,
            "host": url.host or "",
            "database": url.database or "",
            "duration_ms": int((time.monotonic() - started) * 1000),
        }

    async def dispose(self) -> None:
        """Roll back, close and dispose whatever is still held. Idempotent."""
        if self._transaction is not None:
            try:
                if self._transaction.is_active:
                    await self._transaction.rollback()
            except SQLAlchemyError as e:
                logger.warning(f"Rollback during dispose of '{self.name}' failed: {e}")
            self._transaction = None
        await self._release()

    async def _release(self) -> None:
        connection, engine = self._connection, self._engine
        self._transaction = None
        self._connection = None
        self._engine = None
        self._state = ConnectionState.CLOSED
        try:
            if connection is not None:
                await connection.close()
        finally:
            if engine is not None:
                await engine.dispose()

    async def __aenter__(self) -> "ConnectionManager":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close(commit=exc_type is None)
