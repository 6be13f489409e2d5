from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import NamedTuple

from .error_record import ValidationError
from .work_order import GroupedRecord

"""Result models for the ingestion engine and the batch driver.

BatchResult is what the engine returns for one file. FileStat and RunResult
aggregate a multi-file CLI run for the SUMMARY line.
"""

__all__ = [
    "BatchResult",
    "FileStat",
    "FileStatus",
    "RunResult",
]


class BatchResult(NamedTuple):
    """Records and error log produced from one uploaded file."""
    records: list[GroupedRecord]
    errors: list[ValidationError]


class FileStatus(Enum):
    """Outcome of one file in a run.

    FAILED means the file was unreadable (batch-fatal); row-level errors still
    leave the file SUCCESS.
    """
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class FileStat:
    file_name: str
    status: FileStatus
    records: int  # grouped records produced
    errors: int  # row-level validation errors
    elapsed_seconds: float
    inserted_rows: int = 0
    error: str | None = None  # batch-fatal reason


@dataclass(frozen=True)
class RunResult:
    """Aggregated results for a CLI run across one or more files."""
    success_files: int
    failed_files: int
    total_records: int  # records of successful files only
    total_errors: int
    total_inserted: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    file_stats: list[FileStat] = field(default_factory=list)
    records: list[GroupedRecord] = field(default_factory=list)
    errors: dict[str, list[ValidationError]] = field(default_factory=dict)  # file name -> errors

    @property
    def total_files(self) -> int:
        return self.success_files + self.failed_files
