"""Portable schema model produced by catalog introspection."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import pyarrow as pa


class RelationshipKind(Enum):
    """Cardinality of a foreign-key relationship as seen from the parent."""

    ONE_TO_ONE = "one_to_one"
    ONE_TO_MANY = "one_to_many"


@dataclass
class DataColumn:
    name: str
    data_type: str
    nullable: bool = True
    max_length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    default_value: Optional[str] = None
    ordinal_position: Optional[int] = None

    def to_arrow_field(self) -> pa.Field:
        return pa.field(
            self.name,
            arrow_type_for(self.data_type, self.precision, self.scale),
            nullable=self.nullable,
        )


@dataclass
class DataIndex:
    name: str
    columns: List[str] = field(default_factory=list)
    is_unique: bool = False
    is_primary: bool = False
    is_clustered: bool = False


@dataclass
class DataRelationship:
    """A foreign key from ``child_table`` referencing ``parent_table``."""

    name: str
    parent_table: str
    parent_columns: List[str]
    child_table: str
    child_columns: List[str]
    kind: RelationshipKind = RelationshipKind.ONE_TO_MANY
    update_rule: str = "NO ACTION"
    delete_rule: str = "NO ACTION"


@dataclass
class DataTable:
    name: str
    description: str = ""
    columns: List[DataColumn] = field(default_factory=list)
    primary_key: List[str] = field(default_factory=list)
    indexes: List[DataIndex] = field(default_factory=list)

    def get_column(self, name: str) -> Optional[DataColumn]:
        for column in self.columns:
            if column.name == name:
                return column
        return None

    def has_unique_key(self, columns: List[str]) -> bool:
        """Whether ``columns`` are the primary key or a unique index, in any order."""
        wanted = set(columns)
        if wanted and wanted == set(self.primary_key):
            return True
        return any(index.is_unique and set(index.columns) == wanted for index in self.indexes)

    def to_arrow_schema(self) -> pa.Schema:
        """Return the table's columns as an Arrow schema."""
        return pa.schema([column.to_arrow_field() for column in self.columns])


@dataclass
class DataSchema:
    name: str
    description: str = ""
    version: str = "1.0.0"
    tables: List[DataTable] = field(default_factory=list)
    relationships: List[DataRelationship] = field(default_factory=list)

    def get_table(self, name: str) -> Optional[DataTable]:
        for table in self.tables:
            if table.name == name:
                return table
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "name": self.name,
            "description": self.description,
            "version": self.version,
            "tables": [
                {
                    "name": table.name,
                    "description": table.description,
                    "columns": [vars(column).copy() for column in table.columns],
                    "primary_key": list(table.primary_key),
                    "indexes": [vars(index).copy() for index in table.indexes],
                }
                for table in self.tables
            ],
            "relationships": [
                dict(vars(relationship), kind=relationship.kind.value)
                for relationship in self.relationships
            ],
        }


_ARROW_TYPES = {
    "string": pa.string(),
    "text": pa.string(),
    "varchar": pa.string(),
    "nvarchar": pa.string(),
    "char": pa.string(),
    "nchar": pa.string(),
    "character": pa.string(),
    "character varying": pa.string(),
    "uuid": pa.string(),
    "uniqueidentifier": pa.string(),
    "int": pa.int64(),
    "integer": pa.int64(),
    "bigint": pa.int64(),
    "smallint": pa.int64(),
    "tinyint": pa.int64(),
    "float": pa.float64(),
    "real": pa.float64(),
    "double": pa.float64(),
    "double precision": pa.float64(),
    "bool": pa.bool_(),
    "boolean": pa.bool_(),
    "bit": pa.bool_(),
    "date": pa.date32(),
    "timestamp": pa.timestamp("ns"),
    "timestamp without time zone": pa.timestamp("ns"),
    "timestamp with time zone": pa.timestamp("ns", tz="UTC"),
    "datetime": pa.timestamp("ns"),
    "datetime2": pa.timestamp("ns"),
    "blob": pa.binary(),
    "bytea": pa.binary(),
    "varbinary": pa.binary(),
}


def arrow_type_for(
    data_type: str, precision: Optional[int] = None, scale: Optional[int] = None
) -> pa.DataType:
    """Map a catalog data type name to an Arrow type.

    Unknown types default to string.
    """
    type_name = (data_type or "").strip().lower()
    if type_name in ("decimal", "numeric"):
        if precision:
            return pa.decimal128(min(precision, 38), scale or 0)
        return pa.float64()
    return _ARROW_TYPES.get(type_name, pa.string())
