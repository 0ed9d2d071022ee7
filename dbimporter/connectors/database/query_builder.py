"""Turns an ImportRequest into executable SQL plus bound parameters."""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from dbimporter.connectors.database.backends import Backend
from dbimporter.exceptions import ConfigurationError
from dbimporter.logging import get_logger
from dbimporter.models import ImportRequest

logger = get_logger(__name__)


@dataclass(frozen=True)
class BuiltQuery:
    """SQL text using ``:name`` placeholders and the values to bind."""

    text: str
    parameters: Dict[str, Any] = field(default_factory=dict)


def compute_offset(page_number: int, page_size: int) -> int:
    """Row offset of a 1-based page."""
    return (page_number - 1) * page_size


def normalize_parameters(parameters: Mapping[str, Any]) -> Dict[str, Any]:
    """Strip ``@`` and ``:`` prefixes so names match ``:name`` placeholders."""
    normalized: Dict[str, Any] = {}
    for name, value in parameters.items():
        key = str(name).lstrip("@:")
        if not key:
            raise ConfigurationError(f"Invalid parameter name '{name}'")
        if key in normalized:
            raise ConfigurationError(f"Parameter '{key}' is specified more than once")
        normalized[key] = value
    return normalized


class QueryBuilder:
    """Build SQL for import requests against one backend.

    Table names, filters and sort expressions are trusted caller input and
    are inserted verbatim; only ``request.parameters`` values are bound.
    """

    def __init__(self, backend: Backend):
        self.backend = backend

    def build(self, request: ImportRequest) -> BuiltQuery:
        """Build the statement for ``request``.

        Raises:
            ConfigurationError: If neither query nor table name is given, or
                pagination is incomplete or out of range
        """
        parameters = normalize_parameters(request.parameters)

        if request.query:
            if request.table_name or request.filter or request.sort or request.is_paginated:
                logger.debug(
                    "Raw query given; ignoring table name, filter, sort and pagination"
                )
            return BuiltQuery(request.query, parameters)

        if not request.table_name:
            raise ConfigurationError("No query or table name specified in import request")

        sql = f"SELECT * FROM {request.table_name}"

        if request.filter:
            sql += f" WHERE {request.filter}"

        if request.sort:
            sql += f" ORDER BY {request.sort}"

        if request.is_paginated:
            sql += self._pagination(request)

        logger.debug(f"Built query: {sql}")
        return BuiltQuery(sql, parameters)

    def _pagination(self, request: ImportRequest) -> str:
        if request.page_number is None or request.page_size is None:
            raise ConfigurationError(
                "Pagination requires both page_number and page_size"
            )
        if request.page_number < 1 or request.page_size < 1:
            raise ConfigurationError(
                f"page_number and page_size must be >= 1, got "
                f"{request.page_number} and {request.page_size}"
            )

        clause = ""
        if self.backend.requires_order_for_pagination and not request.sort:
            clause += " ORDER BY (SELECT NULL)"

        offset = compute_offset(request.page_number, request.page_size)
        return f"{clause} {self.backend.pagination_clause(offset, request.page_size)}"
