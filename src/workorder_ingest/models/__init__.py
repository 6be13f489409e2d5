"""Domain models for the work-order ingestion engine.

Stage-specific record types (RawRow -> NormalizedRow -> DraftRecord ->
CandidateRecord -> GroupedRecord), the row-level error log entry and the
configuration dataclasses.
"""

from .config_models import DEFAULT_COMPANY_NAME, DEFAULT_LIMITS, DatabaseConfig, IngestConfig, InputLimits
from .error_record import ErrorCode, ErrorRecord, ValidationError
from .processing_result import BatchResult, FileStat, FileStatus, RunResult
from .rows import NormalizedRow, RawRow, is_blank
from .work_order import CandidateRecord, Coerced, DraftRecord, GroupedRecord, Priority, Status

__all__ = [
    # Configuration models
    "DEFAULT_COMPANY_NAME",
    "DEFAULT_LIMITS",
    "DatabaseConfig",
    "IngestConfig",
    "InputLimits",
    # Pipeline records
    "RawRow",
    "NormalizedRow",
    "is_blank",
    "Coerced",
    "DraftRecord",
    "CandidateRecord",
    "GroupedRecord",
    "Priority",
    "Status",
    # Errors and results
    "ErrorCode",
    "ErrorRecord",
    "ValidationError",
    "BatchResult",
    "FileStat",
    "FileStatus",
    "RunResult",
]
