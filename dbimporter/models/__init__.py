from .request import ImportRequest
from .result import NULL, ErrorKind, ImportResult
from .schema import (
    DataColumn,
    DataIndex,
    DataRelationship,
    DataSchema,
    DataTable,
    RelationshipKind,
)

__all__ = [
    "ImportRequest",
    "ImportResult",
    "ErrorKind",
    "NULL",
    "DataSchema",
    "DataTable",
    "DataColumn",
    "DataIndex",
    "DataRelationship",
    "RelationshipKind",
]
