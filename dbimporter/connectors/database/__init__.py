from .backends import (
    Backend,
    BackendRegistry,
    PostgresBackend,
    SqliteBackend,
    SqlServerBackend,
    backend_registry,
    resolve_backend,
)
from .catalog import (
    CatalogReader,
    InformationSchemaCatalogReader,
    PostgresCatalogReader,
    SqliteCatalogReader,
    SqlServerCatalogReader,
)
from .connection_manager import ConnectionManager, ConnectionState
from .importer import DatabaseImporter
from .introspector import SchemaIntrospector
from .query_builder import BuiltQuery, QueryBuilder

__all__ = [
    "Backend",
    "BackendRegistry",
    "BuiltQuery",
    "CatalogReader",
    "ConnectionManager",
    "ConnectionState",
    "DatabaseImporter",
    "InformationSchemaCatalogReader",
    "PostgresBackend",
    "PostgresCatalogReader",
    "QueryBuilder",
    "SchemaIntrospector",
    "SqliteBackend",
    "SqliteCatalogReader",
    "SqlServerBackend",
    "SqlServerCatalogReader",
    "backend_registry",
    "resolve_backend",
]
