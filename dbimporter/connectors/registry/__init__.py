from .importer_registry import ImporterRegistry, importer_registry

__all__ = ["ImporterRegistry", "importer_registry"]
