"""dbimporter - import data from relational databases."""

__version__ = "0.1.0"
__package_name__ = "dbimporter"

# Initialize logging with default configuration
from dbimporter.logging import configure_logging

configure_logging()

from .config import DatabaseImporterOptions, IsolationLevel, TransactionMode
from .connectors import DatabaseImporter, ImporterStatus
from .exceptions import (
    ConfigurationError,
    ConnectivityError,
    ExecutionError,
    ImporterError,
    InvalidStateError,
    TransactionError,
)
from .models import DataSchema, ErrorKind, ImportRequest, ImportResult

__all__ = [
    "DatabaseImporter",
    "DatabaseImporterOptions",
    "DataSchema",
    "ErrorKind",
    "ImportRequest",
    "ImportResult",
    "ImporterStatus",
    "IsolationLevel",
    "TransactionMode",
    "ImporterError",
    "ConfigurationError",
    "ConnectivityError",
    "ExecutionError",
    "InvalidStateError",
    "TransactionError",
]
