from .capabilities import ImporterCapabilities
from .connection_test_result import ConnectionTestResult
from .importer import TRANSITIONS, Importer, ImporterStatus, can_transition

__all__ = [
    "Importer",
    "ImporterStatus",
    "ImporterCapabilities",
    "ConnectionTestResult",
    "TRANSITIONS",
    "can_transition",
]
