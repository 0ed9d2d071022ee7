"""Import result value object."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

import pandas as pd

# SQL NULL in imported records; distinct from Python None on every backend
NULL = pd.NA


class ErrorKind(Enum):
    """Category of the failure captured in a failed ImportResult."""

    CONFIGURATION = "configuration"
    CONNECTIVITY = "connectivity"
    EXECUTION = "execution"
    TIMEOUT = "timeout"
    TRANSACTION = "transaction"


@dataclass
class ImportResult:
    """Outcome of a single import call."""

    import_id: str
    success: bool
    records_imported: int = 0
    records_skipped: int = 0
    records_failed: int = 0
    total_records: int = 0
    columns: List[str] = field(default_factory=list)
    records: List[Dict[str, Any]] = field(default_factory=list)
    error_message: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    retryable: bool = False
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def duration_ms(self) -> Optional[int]:
        if self.started_at is None or self.finished_at is None:
            return None
        return int((self.finished_at - self.started_at).total_seconds() * 1000)

    @property
    def has_more_records(self) -> bool:
        return self.records_imported + self.records_failed < self.total_records

    @classmethod
    def succeeded(
        cls,
        import_id: str,
        columns: List[str],
        records: List[Dict[str, Any]],
        started_at: Optional[datetime] = None,
        total_records: Optional[int] = None,
    ) -> "ImportResult":
        """Build a successful result; records_imported is the number of records."""
        return cls(
            import_id=import_id,
            success=True,
            records_imported=len(records),
            total_records=len(records) if total_records is None else total_records,
            columns=list(columns),
            records=records,
            started_at=started_at,
            finished_at=datetime.now(timezone.utc),
        )

    @classmethod
    def failed(
        cls,
        import_id: str,
        error_message: str,
        error_kind: ErrorKind = ErrorKind.EXECUTION,
        retryable: bool = False,
        started_at: Optional[datetime] = None,
        records_failed: int = 0,
    ) -> "ImportResult":
        """Build a failed result. Failed results carry no records."""
        return cls(
            import_id=import_id,
            success=False,
            records_failed=records_failed,
            error_message=error_message,
            error_kind=error_kind,
            retryable=retryable,
            started_at=started_at,
            finished_at=datetime.now(timezone.utc),
        )

    def to_dataframe(self) -> pd.DataFrame:
        """Return the imported records as a pandas DataFrame.

        Column order follows the result set; NULLs stay as ``pd.NA``.
        """
        return pd.DataFrame.from_records(self.records, columns=self.columns)
