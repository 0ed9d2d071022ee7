from sqlalchemy.ext.asyncio import AsyncConnection

from dbimporter.connectors.database.catalog import CatalogReader
from dbimporter.logging import get_logger
from dbimporter.models import DataSchema, DataTable, RelationshipKind

logger = get_logger(__name__)


class SchemaIntrospector:
    """Assemble a DataSchema from a catalog reader.

    Tables are read one after another on the caller's connection; nothing is
    cached, so every call reflects the catalog as it is now.
    """

    def __init__(self, reader: CatalogReader):
        self.reader = reader

    async def get_schema(
        self, connection: AsyncConnection, name: str, description: str = ""
    ) -> DataSchema:
        tables = []
        for table_name in await self.reader.get_tables(connection):
            tables.append(await self._read_table(connection, table_name))

        schema = DataSchema(name=name, description=description, tables=tables)

        relationships = await self.reader.get_relationships(connection)
        for relationship in relationships:
            child = schema.get_table(relationship.child_table)
            if child is not None and child.has_unique_key(relationship.child_columns):
                relationship.kind = RelationshipKind.ONE_TO_ONE
        schema.relationships = relationships

        logger.debug(
            f"Introspected {len(tables)} tables and "
            f"{len(relationships)} relationships for '{name}'"
        )
        return schema

    async def _read_table(self, connection: AsyncConnection, table_name: str) -> DataTable:
        columns = await self.reader.get_columns(connection, table_name)
        primary_key = await self.reader.get_primary_keys(connection, table_name)
        indexes = await self.reader.get_indexes(connection, table_name)
        return DataTable(
            name=table_name,
            description=f"Table {table_name}",
            columns=columns,
            primary_key=primary_key,
            indexes=indexes,
        )
