"""Import request value object."""

import uuid
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from dbimporter.exceptions import ConfigurationError

# Original context keys -> field names
_REQUEST_KEYS = {
    "Query": "query",
    "TableName": "table_name",
    "Table": "table_name",
    "table": "table_name",
    "Filter": "filter",
    "Sort": "sort",
    "PageNumber": "page_number",
    "PageSize": "page_size",
    "Parameters": "parameters",
    "ImportId": "import_id",
}


@dataclass(frozen=True)
class ImportRequest:
    """An immutable description of what to import.

    ``query`` takes precedence over ``table_name``. ``filter`` and ``sort``
    are trusted SQL fragments; they are inserted verbatim.
    """

    query: Optional[str] = None
    table_name: Optional[str] = None
    filter: Optional[str] = None
    sort: Optional[str] = None
    page_number: Optional[int] = None
    page_size: Optional[int] = None
    parameters: Mapping[str, Any] = field(default_factory=dict)
    import_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self):
        # Freeze the parameter bag as well as the dataclass itself
        object.__setattr__(
            self, "parameters", MappingProxyType(dict(self.parameters or {}))
        )

    @property
    def is_paginated(self) -> bool:
        return self.page_number is not None or self.page_size is not None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImportRequest":
        """Create a request from a dictionary.

        Accepts snake_case keys and the PascalCase keys of import contexts
        (``Query``, ``TableName``, ``Parameters``, ...).
        """
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            name = _REQUEST_KEYS.get(key, key)
            if name in cls.__dataclass_fields__ and value is not None:
                kwargs.setdefault(name, value)

        for int_field in ("page_number", "page_size"):
            if int_field in kwargs:
                try:
                    kwargs[int_field] = int(kwargs[int_field])
                except (ValueError, TypeError):
                    raise ConfigurationError(f"'{int_field}' must be an integer")

        return cls(**kwargs)
