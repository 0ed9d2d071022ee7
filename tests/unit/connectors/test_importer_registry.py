import pytest

from dbimporter.connectors import DatabaseImporter, importer_registry
from dbimporter.connectors.registry import ImporterRegistry
from dbimporter.exceptions import ConfigurationError


def test_database_importer_is_registered():
    assert importer_registry.get("database") is DatabaseImporter
    assert importer_registry.get("Database") is DatabaseImporter
    assert "database" in importer_registry.list_types()


def test_unknown_type_raises():
    registry = ImporterRegistry()
    with pytest.raises(ConfigurationError, match="Unknown importer type: csv"):
        registry.get("csv")


def test_register_is_case_insensitive():
    registry = ImporterRegistry()
    registry.register("Warehouse", DatabaseImporter)

    assert registry.get("warehouse") is DatabaseImporter
    assert registry.list_types() == ["warehouse"]
