"""Exception hierarchy for dbimporter.

Every error raised by an importer belongs to one of five categories:

- ConnectivityError: the data source cannot be reached or tested
- ConfigurationError: missing or contradictory options/request fields
- InvalidStateError: an operation was requested in the wrong importer status
- ExecutionError: a query failed while executing or materializing rows
- TransactionError: a commit, rollback or begin failed
"""

from typing import Optional


class ImporterError(Exception):
    """Base exception for importer-related errors."""

    def __init__(self, message: str, importer_name: str = "unknown"):
        self.importer_name = importer_name
        self.message = message
        super().__init__(f"[{importer_name}] {message}")


class ConnectivityError(ImporterError):
    """The connection could not be established or tested."""


class ConfigurationError(ImporterError):
    """Options or import request fields are missing or contradictory."""


class InvalidStateError(ImporterError):
    """An operation was requested outside its allowed status."""

    def __init__(
        self,
        message: str,
        importer_name: str = "unknown",
        current_state: Optional[str] = None,
    ):
        self.current_state = current_state
        super().__init__(message, importer_name)


class ExecutionError(ImporterError):
    """A query failed during execution or row materialization."""


class TransactionError(ImporterError):
    """A transaction could not be begun, committed or rolled back."""
