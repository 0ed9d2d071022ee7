from dbimporter.connectors.base import (
    ConnectionTestResult,
    Importer,
    ImporterCapabilities,
    ImporterStatus,
)
from dbimporter.connectors.database import DatabaseImporter
from dbimporter.connectors.registry import importer_registry

importer_registry.register("database", DatabaseImporter)

__all__ = [
    "ConnectionTestResult",
    "DatabaseImporter",
    "Importer",
    "ImporterCapabilities",
    "ImporterStatus",
    "importer_registry",
]
