from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, FrozenSet, Optional

from dbimporter.connectors.base.capabilities import ImporterCapabilities
from dbimporter.connectors.base.connection_test_result import ConnectionTestResult
from dbimporter.exceptions import InvalidStateError
from dbimporter.logging import get_logger
from dbimporter.models import DataSchema, ImportRequest, ImportResult

logger = get_logger(__name__)


class ImporterStatus(Enum):
    """Status of an importer."""

    CLOSED = "closed"
    OPEN = "open"
    IMPORTING = "importing"
    ERROR = "error"


# Every legal status change; anything else is an InvalidStateError.
# ERROR is sticky: only an explicit reset (-> CLOSED) or reopen (-> OPEN) leaves it.
TRANSITIONS: Dict[ImporterStatus, FrozenSet[ImporterStatus]] = {
    ImporterStatus.CLOSED: frozenset({ImporterStatus.OPEN}),
    ImporterStatus.OPEN: frozenset({ImporterStatus.IMPORTING, ImporterStatus.CLOSED}),
    ImporterStatus.IMPORTING: frozenset({ImporterStatus.OPEN, ImporterStatus.ERROR}),
    ImporterStatus.ERROR: frozenset({ImporterStatus.CLOSED, ImporterStatus.OPEN}),
}


def can_transition(current: ImporterStatus, target: ImporterStatus) -> bool:
    return target in TRANSITIONS[current]


class Importer(ABC):
    """Base class for all importers.

    Subclasses implement the I/O; this class owns the status state machine.
    """

    importer_type: str = "unknown"

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.description = description
        self._status = ImporterStatus.CLOSED

    @property
    def status(self) -> ImporterStatus:
        return self._status

    def _transition_to(self, target: ImporterStatus) -> None:
        """Move to ``target`` or raise InvalidStateError if the move is illegal."""
        if not can_transition(self._status, target):
            raise InvalidStateError(
                f"Cannot move from {self._status.value} to {target.value}",
                importer_name=self.name,
                current_state=self._status.value,
            )
        logger.debug(
            f"Importer '{self.name}': {self._status.value} -> {target.value}"
        )
        self._status = target

    def _require_status(self, required: ImporterStatus, operation: str) -> None:
        if self._status is not required:
            raise InvalidStateError(
                f"Cannot {operation} in status {self._status.value}",
                importer_name=self.name,
                current_state=self._status.value,
            )

    @abstractmethod
    async def open(self) -> None:
        """Open the underlying connection."""

    @abstractmethod
    async def close(self) -> None:
        """Close the underlying connection."""

    @abstractmethod
    async def test_connection(self) -> ConnectionTestResult:
        """Test the connection to the data source without changing status.

        Returns
        -------
            Result of the connection test

        """

    @abstractmethod
    async def import_data(self, request: ImportRequest) -> ImportResult:
        """Import data described by ``request``.

        Args:
        ----
            request: What to import

        Returns:
        -------
            The import result; execution failures are reported in it

        Raises:
        ------
            InvalidStateError: If the importer is not open
            ConfigurationError: If the request is incomplete

        """

    @abstractmethod
    async def get_schema(self) -> DataSchema:
        """Discover the schema of the data source."""

    @abstractmethod
    def get_capabilities(self) -> ImporterCapabilities:
        """Describe what this importer supports."""

    async def dispose(self) -> None:
        """Release all resources. Safe to call more than once."""

    async def __aenter__(self) -> "Importer":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> Optional[bool]:
        await self.dispose()
        return None
