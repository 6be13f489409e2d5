from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from enum import Enum

"""Error models for the ingestion engine.

ValidationError is the row-level entry of a batch's error log: it is collected,
never raised. ErrorRecord is its JSON Lines form written by
workorder_ingest.logging.error_log; row=-1 marks file-level failures where no
row applies.
"""

__all__ = [
    "ErrorCode",
    "ErrorRecord",
    "ValidationError",
]


class ErrorCode(Enum):
    MISSING_COMPANY = "MISSING_COMPANY"
    MISSING_PO_NUMBER = "MISSING_PO_NUMBER"
    MISSING_PART_NAME = "MISSING_PART_NAME"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    FORMAT_ERROR = "FORMAT_ERROR"


@dataclass(frozen=True)
class ValidationError:
    """One rejected source row.

    Attributes:
        row: 1-based row number as shown by the spreadsheet (header = 1)
        message: operator-facing explanation
        code: machine-readable classification
    """
    row: int
    message: str
    code: ErrorCode | None = None

    def format(self) -> str:
        return f"Row {self.row}: {self.message}"


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging."""
    timestamp: str  # ISO8601 UTC
    file: str
    row: int  # -1 when unknown / file-level
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(file: str, row: int, error_type: str, message: str) -> ErrorRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            row=row,
            error_type=error_type,
            message=message,
        )

    @staticmethod
    def from_validation_error(file: str, error: ValidationError) -> ErrorRecord:
        return ErrorRecord.create(
            file=file,
            row=error.row,
            error_type=error.code.value if error.code else "VALIDATION_ERROR",
            message=error.message,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
