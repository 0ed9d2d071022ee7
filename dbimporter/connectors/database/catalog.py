"""Catalog readers: backend-specific access to table/column/key metadata.

Each reader turns one store's catalog (ANSI ``information_schema`` views,
``pg_catalog``, ``sys.*`` or SQLite pragmas) into the portable schema model.
Readers hold no connection; every call takes the caller's open connection.
"""

import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection

from dbimporter.logging import get_logger
from dbimporter.models import DataColumn, DataIndex, DataRelationship

logger = get_logger(__name__)


class CatalogReader(ABC):
    """Reads catalog metadata for one backend."""

    def __init__(self, schema: Optional[str] = None):
        self.schema = schema

    @abstractmethod
    async def get_tables(self, connection: AsyncConnection) -> List[str]:
        """List base tables (never views)."""

    @abstractmethod
    async def get_columns(
        self, connection: AsyncConnection, table_name: str
    ) -> List[DataColumn]:
        """List a table's columns in ordinal order."""

    @abstractmethod
    async def get_primary_keys(
        self, connection: AsyncConnection, table_name: str
    ) -> List[str]:
        """List a table's primary key columns in key order."""

    async def get_indexes(
        self, connection: AsyncConnection, table_name: str
    ) -> List[DataIndex]:
        """List a table's indexes. Readers without index metadata return []."""
        return []

    async def get_relationships(
        self, connection: AsyncConnection
    ) -> List[DataRelationship]:
        """List foreign keys. Readers without key metadata return []."""
        return []

    async def _fetch_all(
        self,
        connection: AsyncConnection,
        sql: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Sequence[Any]:
        logger.debug(f"Catalog query: {' '.join(sql.split())} params={params}")
        result = await connection.execute(text(sql), params or {})
        return result.all()


def _optional_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


def _group_relationships(rows: Sequence[Tuple]) -> List[DataRelationship]:
    """Group (name, child, child_col, parent, parent_col, upd, del) rows by constraint."""
    relationships: Dict[Tuple[str, str], DataRelationship] = {}
    for name, child_table, child_column, parent_table, parent_column, update_rule, delete_rule in rows:
        key = (child_table, name)
        relationship = relationships.get(key)
        if relationship is None:
            relationship = DataRelationship(
                name=name,
                parent_table=parent_table,
                parent_columns=[],
                child_table=child_table,
                child_columns=[],
                update_rule=(update_rule or "NO ACTION").upper(),
                delete_rule=(delete_rule or "NO ACTION").upper(),
            )
            relationships[key] = relationship
        relationship.child_columns.append(child_column)
        relationship.parent_columns.append(parent_column)
    return list(relationships.values())


class InformationSchemaCatalogReader(CatalogReader):
    """Reader for stores exposing the ANSI ``information_schema`` views.

    ANSI defines no index views, so ``get_indexes`` is inherited as a no-op;
    backends with their own index catalog override it.
    """

    def _schema_filter(self, alias: str) -> str:
        return f" AND {alias}.table_schema = :schema" if self.schema else ""

    def _params(self, **params: Any) -> Dict[str, Any]:
        if self.schema:
            params["schema"] = self.schema
        return params

    async def get_tables(self, connection: AsyncConnection) -> List[str]:
        sql = (
            "SELECT t.table_name FROM information_schema.tables t "
            "WHERE t.table_type = 'BASE TABLE'"
            f"{self._schema_filter('t')} "
            "ORDER BY t.table_name"
        )
        rows = await self._fetch_all(connection, sql, self._params())
        return [row[0] for row in rows]

    async def get_columns(
        self, connection: AsyncConnection, table_name: str
    ) -> List[DataColumn]:
        sql = (
            "SELECT c.column_name, c.data_type, c.character_maximum_length, "
            "c.numeric_precision, c.numeric_scale, c.is_nullable, "
            "c.column_default, c.ordinal_position "
            "FROM information_schema.columns c "
            "WHERE c.table_name = :table_name"
            f"{self._schema_filter('c')} "
            "ORDER BY c.ordinal_position"
        )
        rows = await self._fetch_all(
            connection, sql, self._params(table_name=table_name)
        )
        return [
            DataColumn(
                name=row[0],
                data_type=row[1],
                max_length=_optional_int(row[2]),
                precision=_optional_int(row[3]),
                scale=_optional_int(row[4]),
                nullable=str(row[5]).upper() == "YES",
                default_value=None if row[6] is None else str(row[6]),
                ordinal_position=_optional_int(row[7]),
            )
            for row in rows
        ]

    async def get_primary_keys(
        self, connection: AsyncConnection, table_name: str
    ) -> List[str]:
        sql = (
            "SELECT kcu.column_name "
            "FROM information_schema.table_constraints tc "
            "JOIN information_schema.key_column_usage kcu "
            "ON kcu.constraint_name = tc.constraint_name "
            "AND kcu.constraint_schema = tc.constraint_schema "
            "AND kcu.table_name = tc.table_name "
            "WHERE tc.constraint_type = 'PRIMARY KEY' "
            "AND tc.table_name = :table_name"
            f"{self._schema_filter('tc')} "
            "ORDER BY kcu.ordinal_position"
        )
        rows = await self._fetch_all(
            connection, sql, self._params(table_name=table_name)
        )
        return [row[0] for row in rows]

    async def get_relationships(
        self, connection: AsyncConnection
    ) -> List[DataRelationship]:
        sql = (
            "SELECT rc.constraint_name, child.table_name, child.column_name, "
            "parent.table_name, parent.column_name, rc.update_rule, rc.delete_rule "
            "FROM information_schema.referential_constraints rc "
            "JOIN information_schema.key_column_usage child "
            "ON child.constraint_name = rc.constraint_name "
            "AND child.constraint_schema = rc.constraint_schema "
            "JOIN information_schema.key_column_usage parent "
            "ON parent.constraint_name = rc.unique_constraint_name "
            "AND parent.constraint_schema = rc.unique_constraint_schema "
            "AND parent.ordinal_position = child.ordinal_position"
            + (" WHERE rc.constraint_schema = :schema" if self.schema else "")
            + " ORDER BY rc.constraint_name, child.ordinal_position"
        )
        rows = await self._fetch_all(connection, sql, self._params())
        return _group_relationships(rows)


class PostgresCatalogReader(InformationSchemaCatalogReader):
    """PostgreSQL reader; indexes come from ``pg_catalog``."""

    async def get_indexes(
        self, connection: AsyncConnection, table_name: str
    ) -> List[DataIndex]:
        sql = (
            "SELECT i.relname, ix.indisunique, ix.indisprimary, ix.indisclustered, a.attname "
            "FROM pg_catalog.pg_class t "
            "JOIN pg_catalog.pg_namespace n ON n.oid = t.relnamespace "
            "JOIN pg_catalog.pg_index ix ON ix.indrelid = t.oid "
            "JOIN pg_catalog.pg_class i ON i.oid = ix.indexrelid "
            "CROSS JOIN LATERAL unnest(ix.indkey) WITH ORDINALITY AS k(attnum, ord) "
            "JOIN pg_catalog.pg_attribute a ON a.attrelid = t.oid AND a.attnum = k.attnum "
            "WHERE t.relname = :table_name AND n.nspname = :schema "
            "ORDER BY i.relname, k.ord"
        )
        rows = await self._fetch_all(
            connection,
            sql,
            {"table_name": table_name, "schema": self.schema or "public"},
        )
        return _group_indexes(rows)


class SqlServerCatalogReader(InformationSchemaCatalogReader):
    """SQL Server reader; indexes come from ``sys.indexes``."""

    async def get_indexes(
        self, connection: AsyncConnection, table_name: str
    ) -> List[DataIndex]:
        sql = (
            "SELECT i.name, i.is_unique, i.is_primary_key, "
            "CASE WHEN i.type_desc = 'CLUSTERED' THEN 1 ELSE 0 END, c.name "
            "FROM sys.indexes i "
            "JOIN sys.index_columns ic ON ic.object_id = i.object_id AND ic.index_id = i.index_id "
            "JOIN sys.columns c ON c.object_id = ic.object_id AND c.column_id = ic.column_id "
            "JOIN sys.tables t ON t.object_id = i.object_id "
            "JOIN sys.schemas s ON s.schema_id = t.schema_id "
            "WHERE t.name = :table_name AND s.name = :schema "
            "AND i.name IS NOT NULL AND ic.is_included_column = 0 "
            "ORDER BY i.name, ic.key_ordinal"
        )
        rows = await self._fetch_all(
            connection,
            sql,
            {"table_name": table_name, "schema": self.schema or "dbo"},
        )
        return _group_indexes(rows)


def _group_indexes(rows: Sequence[Tuple]) -> List[DataIndex]:
    """Group (name, unique, primary, clustered, column) rows by index name."""
    indexes: Dict[str, DataIndex] = {}
    for name, is_unique, is_primary, is_clustered, column in rows:
        index = indexes.get(name)
        if index is None:
            index = DataIndex(
                name=name,
                is_unique=bool(is_unique),
                is_primary=bool(is_primary),
                is_clustered=bool(is_clustered),
            )
            indexes[name] = index
        index.columns.append(column)
    return list(indexes.values())


# VARCHAR(50), DECIMAL(10, 2), "double precision", ...
_DECLARED_TYPE = re.compile(r"^\s*([^(]*?)\s*(?:\(\s*(\d+)\s*(?:,\s*(\d+)\s*)?\))?\s*$")

_LENGTH_TYPES = ("CHAR", "CLOB", "TEXT", "BINARY")


def parse_declared_type(
    declared: str,
) -> Tuple[str, Optional[int], Optional[int], Optional[int]]:
    """Split a declared column type into (type, max_length, precision, scale)."""
    match = _DECLARED_TYPE.match(declared or "")
    if not match:
        return declared or "", None, None, None

    base, first, second = match.groups()
    base = base.upper()
    if first is None:
        return base, None, None, None
    if any(marker in base for marker in _LENGTH_TYPES):
        return base, int(first), None, None
    return base, None, int(first), None if second is None else int(second)


class SqliteCatalogReader(CatalogReader):
    """SQLite reader built on ``sqlite_master`` and the pragma table functions."""

    async def get_tables(self, connection: AsyncConnection) -> List[str]:
        rows = await self._fetch_all(
            connection,
            "SELECT name FROM sqlite_master "
            "WHERE type = 'table' AND name NOT LIKE 'sqlite\\_%' ESCAPE '\\' "
            "ORDER BY name",
        )
        return [row[0] for row in rows]

    async def get_columns(
        self, connection: AsyncConnection, table_name: str
    ) -> List[DataColumn]:
        rows = await self._fetch_all(
            connection,
            'SELECT cid, name, type, "notnull", dflt_value '
            "FROM pragma_table_info(:table_name) ORDER BY cid",
            {"table_name": table_name},
        )
        columns = []
        for cid, name, declared, not_null, default in rows:
            data_type, max_length, precision, scale = parse_declared_type(declared)
            columns.append(
                DataColumn(
                    name=name,
                    data_type=data_type,
                    nullable=not not_null,
                    max_length=max_length,
                    precision=precision,
                    scale=scale,
                    default_value=None if default is None else str(default),
                    ordinal_position=cid + 1,
                )
            )
        return columns

    async def get_primary_keys(
        self, connection: AsyncConnection, table_name: str
    ) -> List[str]:
        rows = await self._fetch_all(
            connection,
            "SELECT name FROM pragma_table_info(:table_name) WHERE pk > 0 ORDER BY pk",
            {"table_name": table_name},
        )
        return [row[0] for row in rows]

    async def get_indexes(
        self, connection: AsyncConnection, table_name: str
    ) -> List[DataIndex]:
        index_rows = await self._fetch_all(
            connection,
            'SELECT name, "unique", origin FROM pragma_index_list(:table_name) ORDER BY name',
            {"table_name": table_name},
        )
        indexes = []
        for name, is_unique, origin in index_rows:
            column_rows = await self._fetch_all(
                connection,
                "SELECT name FROM pragma_index_info(:index_name) ORDER BY seqno",
                {"index_name": name},
            )
            indexes.append(
                DataIndex(
                    name=name,
                    columns=[row[0] for row in column_rows],
                    is_unique=bool(is_unique),
                    is_primary=origin == "pk",
                )
            )
        return indexes

    async def get_relationships(
        self, connection: AsyncConnection
    ) -> List[DataRelationship]:
        rows: List[Tuple] = []
        for table_name in await self.get_tables(connection):
            fk_rows = await self._fetch_all(
                connection,
                'SELECT id, "table", "from", "to", on_update, on_delete '
                "FROM pragma_foreign_key_list(:table_name) ORDER BY id, seq",
                {"table_name": table_name},
            )
            for fk_id, parent_table, child_column, parent_column, on_update, on_delete in fk_rows:
                rows.append(
                    (
                        f"fk_{table_name}_{fk_id}",
                        table_name,
                        child_column,
                        parent_table,
                        parent_column,
                        on_update,
                        on_delete,
                    )
                )

        relationships = _group_relationships(rows)

        # REFERENCES parent without a column list targets the parent's primary key
        for relationship in relationships:
            if any(column is None for column in relationship.parent_columns):
                relationship.parent_columns = await self.get_primary_keys(
                    connection, relationship.parent_table
                )
        return relationships
