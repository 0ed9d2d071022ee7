"""Backend profiles for the database importer.

A backend captures everything that differs between data stores: the async
driver, URL defaults, which isolation levels the dialect accepts, how a page
of rows is requested and which catalog reader understands its metadata.
Backends are looked up by provider name through ``backend_registry``.
"""

from typing import Any, Dict, FrozenSet, List, Optional, Type

from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError
from sqlalchemy.pool import NullPool

from dbimporter.config import DatabaseImporterOptions, IsolationLevel
from dbimporter.connectors.database.catalog import (
    CatalogReader,
    InformationSchemaCatalogReader,
    PostgresCatalogReader,
    SqliteCatalogReader,
    SqlServerCatalogReader,
)
from dbimporter.exceptions import ConfigurationError
from dbimporter.logging import get_logger

logger = get_logger(__name__)

_ANSI_ISOLATION_LEVELS = frozenset(
    {
        IsolationLevel.READ_UNCOMMITTED,
        IsolationLevel.READ_COMMITTED,
        IsolationLevel.REPEATABLE_READ,
        IsolationLevel.SERIALIZABLE,
    }
)


class Backend:
    """Base backend using ANSI SQL conventions."""

    name: str = "ansi"
    async_driver: str = ""
    sync_drivers: FrozenSet[str] = frozenset()
    default_host: Optional[str] = "localhost"
    default_port: Optional[int] = None
    default_schema: Optional[str] = None
    isolation_levels: FrozenSet[IsolationLevel] = _ANSI_ISOLATION_LEVELS
    supports_pool_sizing: bool = True
    requires_order_for_pagination: bool = False
    probe_query: str = "SELECT 1"
    catalog_reader_class: Type[CatalogReader] = InformationSchemaCatalogReader

    def pagination_clause(self, offset: int, limit: int) -> str:
        return f"OFFSET {offset} ROWS FETCH NEXT {limit} ROWS ONLY"

    def supports_isolation_level(self, level: IsolationLevel) -> bool:
        return level in self.isolation_levels

    def create_catalog_reader(self, schema: Optional[str] = None) -> CatalogReader:
        return self.catalog_reader_class(schema or self.default_schema)

    def build_url(self, options: DatabaseImporterOptions) -> URL:
        """Build the SQLAlchemy URL for ``options``.

        An explicit connection string is used as given, except that a sync
        driver is swapped for this backend's async driver. Without one, the
        URL is assembled from host/port/database and credentials.
        """
        if options.connection_string:
            try:
                url = make_url(options.connection_string)
            except ArgumentError as e:
                raise ConfigurationError(f"Invalid connection string: {e}") from e

            if self._needs_async_driver(url):
                url = url.set(drivername=self.async_driver)
            if not options.use_integrated_security and url.username is None and options.username:
                url = url.set(username=options.username, password=options.password)
            return url

        username, password = self._credentials(options)
        return URL.create(
            self.async_driver,
            username=username,
            password=password,
            host=options.host or self.default_host,
            port=options.port or self.default_port,
            database=options.database,
            query=self.url_query(options),
        )

    def url_query(self, options: DatabaseImporterOptions) -> Dict[str, str]:
        return {}

    def connect_args(self, options: DatabaseImporterOptions) -> Dict[str, Any]:
        return {}

    def engine_kwargs(self, options: DatabaseImporterOptions) -> Dict[str, Any]:
        """Keyword arguments for ``create_async_engine``."""
        kwargs: Dict[str, Any] = {}

        if not options.use_connection_pooling:
            kwargs["poolclass"] = NullPool
        elif self.supports_pool_sizing:
            # SQLAlchemy keeps pool_size connections and opens up to
            # max_overflow more under load
            pool_size = max(options.min_pool_size, 1)
            kwargs.update(
                {
                    "pool_size": pool_size,
                    "max_overflow": max(options.max_pool_size - pool_size, 0),
                    "pool_pre_ping": True,
                    "pool_timeout": options.command_timeout_seconds or 30,
                }
            )

        connect_args = self.connect_args(options)
        if connect_args:
            kwargs["connect_args"] = connect_args
        return kwargs

    def _needs_async_driver(self, url: URL) -> bool:
        driver = url.drivername.split("+", 1)
        return len(driver) == 1 or driver[1] in self.sync_drivers

    def _credentials(self, options: DatabaseImporterOptions):
        if options.use_integrated_security:
            if options.username or options.password:
                logger.debug("Integrated security enabled; ignoring username/password")
            return None, None
        return options.username, options.password


class SqliteBackend(Backend):
    name = "sqlite"
    async_driver = "sqlite+aiosqlite"
    sync_drivers = frozenset({"pysqlite"})
    default_host = None
    isolation_levels = frozenset(
        {IsolationLevel.SERIALIZABLE, IsolationLevel.READ_UNCOMMITTED}
    )
    # In-memory databases run on a StaticPool, which takes no sizing arguments
    supports_pool_sizing = False
    catalog_reader_class = SqliteCatalogReader

    def pagination_clause(self, offset: int, limit: int) -> str:
        return f"LIMIT {limit} OFFSET {offset}"

    def build_url(self, options: DatabaseImporterOptions) -> URL:
        if options.connection_string:
            return super().build_url(options)
        return URL.create(self.async_driver, database=options.database or ":memory:")


class PostgresBackend(Backend):
    name = "postgresql"
    async_driver = "postgresql+asyncpg"
    sync_drivers = frozenset({"psycopg2", "pg8000"})
    default_port = 5432
    default_schema = "public"
    catalog_reader_class = PostgresCatalogReader

    def connect_args(self, options: DatabaseImporterOptions) -> Dict[str, Any]:
        connect_args: Dict[str, Any] = {
            "server_settings": {"application_name": "dbimporter"},
        }
        if options.command_timeout_seconds:
            connect_args["command_timeout"] = options.command_timeout_seconds
        if options.use_encryption:
            connect_args["ssl"] = (
                "require" if options.trust_server_certificate else "verify-full"
            )
        return connect_args


class SqlServerBackend(Backend):
    name = "mssql"
    async_driver = "mssql+aioodbc"
    sync_drivers = frozenset({"pyodbc", "pymssql"})
    default_port = 1433
    default_schema = "dbo"
    isolation_levels = _ANSI_ISOLATION_LEVELS | {IsolationLevel.SNAPSHOT}
    requires_order_for_pagination = True
    catalog_reader_class = SqlServerCatalogReader
    odbc_driver = "ODBC Driver 18 for SQL Server"

    def url_query(self, options: DatabaseImporterOptions) -> Dict[str, str]:
        query = {
            "driver": self.odbc_driver,
            "Encrypt": "yes" if options.use_encryption else "no",
            "TrustServerCertificate": "yes" if options.trust_server_certificate else "no",
        }
        if options.use_integrated_security:
            query["Trusted_Connection"] = "yes"
        return query


class BackendRegistry:
    """Registry of backends keyed by provider name and alias."""

    def __init__(self):
        self._backends: Dict[str, Backend] = {}

    def register(self, backend: Backend, *aliases: str) -> None:
        """Register a backend under its name and any aliases."""
        for key in (backend.name, *aliases):
            self._backends[key.lower()] = backend

    def get(self, provider_name: str) -> Backend:
        """Get a backend by provider name."""
        key = (provider_name or "").lower()
        if key not in self._backends:
            raise ConfigurationError(f"Unknown database provider: {provider_name}")
        return self._backends[key]

    def list_providers(self) -> List[str]:
        return sorted(self._backends)


backend_registry = BackendRegistry()
backend_registry.register(SqliteBackend(), "sqlite3")
backend_registry.register(PostgresBackend(), "postgres", "npgsql")
backend_registry.register(
    SqlServerBackend(), "sqlserver", "microsoft.data.sqlclient", "system.data.sqlclient"
)


def resolve_backend(options: DatabaseImporterOptions) -> Backend:
    """Pick the backend for ``options``.

    An explicit provider name wins; otherwise the connection string's dialect
    decides; with neither, SQLite is used.
    """
    if options.provider_name:
        return backend_registry.get(options.provider_name)

    if options.connection_string:
        try:
            url = make_url(options.connection_string)
        except ArgumentError as e:
            raise ConfigurationError(f"Invalid connection string: {e}") from e
        return backend_registry.get(url.get_backend_name())

    return backend_registry.get("sqlite")
