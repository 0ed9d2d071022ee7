from typing import Dict, Optional


class ConnectionTestResult:
    """Result of a connection test."""

    def __init__(
        self,
        success: bool,
        message: Optional[str] = None,
        duration_ms: int = 0,
        details: Optional[Dict[str, str]] = None,
    ):
        """Initialize a ConnectionTestResult.

        Args:
        ----
            success: Whether the test was successful
            message: Optional message with details
            duration_ms: How long the test took
            details: Non-secret connection details (backend, host, database)

        """
        self.success = success
        self.message = message
        self.duration_ms = duration_ms
        self.details = details or {}

    def __bool__(self) -> bool:
        return self.success

    def __repr__(self) -> str:
        return (
            f"ConnectionTestResult(success={self.success}, message={self.message!r}, "
            f"duration_ms={self.duration_ms})"
        )
