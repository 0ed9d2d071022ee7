"""Tests for the importer status state machine."""

import pytest

from dbimporter.connectors.base import (
    TRANSITIONS,
    ConnectionTestResult,
    Importer,
    ImporterCapabilities,
    ImporterStatus,
    can_transition,
)
from dbimporter.exceptions import InvalidStateError
from dbimporter.models import DataSchema, ImportResult


class RecordingImporter(Importer):
    """Minimal importer that only drives the state machine."""

    importer_type = "Recording"

    def __init__(self):
        super().__init__("recording")
        self.calls = []

    async def open(self):
        self.calls.append("open")
        self._transition_to(ImporterStatus.OPEN)

    async def close(self):
        self.calls.append("close")
        self._transition_to(ImporterStatus.CLOSED)

    async def test_connection(self):
        return ConnectionTestResult(True)

    async def import_data(self, request):
        self._require_status(ImporterStatus.OPEN, "import data")
        return ImportResult.succeeded(request.import_id, [], [])

    async def get_schema(self):
        return DataSchema(name="recording")

    def get_capabilities(self):
        return ImporterCapabilities()

    async def dispose(self):
        self.calls.append("dispose")
        self._status = ImporterStatus.CLOSED


@pytest.mark.parametrize(
    "current,target,allowed",
    [
        (ImporterStatus.CLOSED, ImporterStatus.OPEN, True),
        (ImporterStatus.CLOSED, ImporterStatus.IMPORTING, False),
        (ImporterStatus.OPEN, ImporterStatus.IMPORTING, True),
        (ImporterStatus.OPEN, ImporterStatus.CLOSED, True),
        (ImporterStatus.OPEN, ImporterStatus.ERROR, False),
        (ImporterStatus.IMPORTING, ImporterStatus.OPEN, True),
        (ImporterStatus.IMPORTING, ImporterStatus.ERROR, True),
        (ImporterStatus.IMPORTING, ImporterStatus.CLOSED, False),
        (ImporterStatus.ERROR, ImporterStatus.CLOSED, True),
        (ImporterStatus.ERROR, ImporterStatus.OPEN, True),
        (ImporterStatus.ERROR, ImporterStatus.IMPORTING, False),
    ],
)
def test_can_transition(current, target, allowed):
    assert can_transition(current, target) is allowed


def test_every_status_has_transitions():
    assert set(TRANSITIONS) == set(ImporterStatus)


def test_illegal_transition_raises_invalid_state():
    importer = RecordingImporter()
    with pytest.raises(InvalidStateError) as exc_info:
        importer._transition_to(ImporterStatus.IMPORTING)

    assert exc_info.value.current_state == "closed"
    assert exc_info.value.importer_name == "recording"
    assert importer.status is ImporterStatus.CLOSED


@pytest.mark.asyncio
async def test_async_context_manager_opens_and_disposes():
    importer = RecordingImporter()
    async with importer as entered:
        assert entered is importer
        assert importer.status is ImporterStatus.OPEN

    assert importer.calls == ["open", "dispose"]
    assert importer.status is ImporterStatus.CLOSED


def test_connection_test_result_truthiness():
    assert ConnectionTestResult(True, "ok")
    assert not ConnectionTestResult(False, "down")
    assert "success=False" in repr(ConnectionTestResult(False, "down"))


def test_capabilities_are_frozen():
    capabilities = ImporterCapabilities(max_batch_size=10)
    with pytest.raises(AttributeError):
        capabilities.max_batch_size = 20
