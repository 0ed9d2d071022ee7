from typing import Dict, List, Type

from dbimporter.connectors.base.importer import Importer
from dbimporter.exceptions import ConfigurationError


class ImporterRegistry:
    """Registry for importer types."""

    def __init__(self):
        self._importers: Dict[str, Type[Importer]] = {}

    def register(self, importer_type: str, importer_class: Type[Importer]):
        """Register an importer class."""
        self._importers[importer_type.lower()] = importer_class

    def get(self, importer_type: str) -> Type[Importer]:
        """Get an importer class."""
        key = (importer_type or "").lower()
        if key not in self._importers:
            raise ConfigurationError(f"Unknown importer type: {importer_type}")
        return self._importers[key]

    def list_types(self) -> List[str]:
        return sorted(self._importers)


importer_registry = ImporterRegistry()
