from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path, PurePath
from typing import Any

from ..db.batch_insert import BatchInsertError, fetch_existing_keys, filter_new_records, insert_work_orders
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.config_models import DEFAULT_COMPANY_NAME, DEFAULT_LIMITS, IngestConfig, InputLimits
from ..models.error_record import ErrorCode, ValidationError
from ..models.processing_result import BatchResult, FileStat, FileStatus, RunResult
from ..models.work_order import CandidateRecord, GroupedRecord
from ..tabular.headers import normalize_row
from ..tabular.reader import FormatError, TableFormat, detect_format, read_table
from .carry_forward import carry_forward
from .coercion import build_draft
from .grouping import group_candidates, identity_key
from .progress import ProgressTracker
from .summary import format_error_preview
from .validation import validate_draft

"""Batch orchestration.

process() is the engine entry point for one uploaded file:

    Reader -> Header Normalizer -> Carry-Forward -> Coercers -> Validator -> Grouping

Row-level problems are collected as ValidationError entries; only a FormatError
from the reader aborts the batch. The engine keeps no state between calls, so
callers may process several files concurrently.

process_files() is the multi-file driver behind the CLI: progress display,
JSON Lines error log and the optional bulk insert.
"""

__all__ = [
    "ProcessingError",
    "process",
    "process_files",
    "process_path",
]

logger = logging.getLogger(__name__)


class ProcessingError(Exception):
    """Fatal run-level error (nothing could be processed)."""


def _resolve_format(fmt: TableFormat | str | PurePath) -> TableFormat:
    if isinstance(fmt, TableFormat):
        return fmt
    return detect_format(fmt)


def process(
    file_bytes: bytes,
    fmt: TableFormat | str | PurePath,
    default_company_name: str = DEFAULT_COMPANY_NAME,
    *,
    limits: InputLimits = DEFAULT_LIMITS,
    now: datetime | None = None,
) -> BatchResult:
    """Turn one uploaded file into grouped work orders plus an error log.

    Args:
        file_bytes: complete file contents
        fmt: TableFormat, or a file name whose extension decides the format
        default_company_name: used while no company value has been seen
        limits: field bounds
        now: fallback creation time for rows without a usable date
            (one value per call so rows of a file agree)

    Raises:
        FormatError: unsupported extension or undecodable content
    """
    table_format = _resolve_format(fmt)
    raw_rows = read_table(file_bytes, table_format)
    now = now or datetime.now(UTC)

    # Entirely blank rows are skipped silently (not counted as errors)
    rows = [normalize_row(raw) for raw in raw_rows if not raw.is_blank()]

    errors: list[ValidationError] = []
    candidates: list[CandidateRecord] = []
    for row in carry_forward(rows):
        draft = build_draft(row, default_company_name, now, limits)
        candidate = validate_draft(draft, errors, limits)
        if candidate is not None:
            candidates.append(candidate)

    records = group_candidates(candidates, limits.part_name_max)
    logger.debug(
        "rows=%d blank=%d candidates=%d records=%d errors=%d",
        len(raw_rows),
        len(raw_rows) - len(rows),
        len(candidates),
        len(records),
        len(errors),
    )
    return BatchResult(records=records, errors=errors)


def process_path(
    path: Path,
    default_company_name: str = DEFAULT_COMPANY_NAME,
    *,
    limits: InputLimits = DEFAULT_LIMITS,
) -> BatchResult:
    """Read ``path`` fully and process it; the format comes from its extension."""
    table_format = detect_format(path.name)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise FormatError(f"no se pudo leer el archivo: {e}") from e
    return process(data, table_format, default_company_name, limits=limits)


def _insert_batch(cursor: Any, records: list[GroupedRecord], existing_keys: set[str], table: str) -> int:
    """Insert the not-yet-stored records of one file inside its own transaction."""
    new_records = filter_new_records(records, existing_keys)
    skipped = len(records) - len(new_records)
    if skipped:
        logger.info(f"{skipped} order(s) already exist and were skipped")
    try:
        result = insert_work_orders(
            cursor,
            new_records,
            table=table,
            metrics_callback=lambda m: logger.debug(
                "batch insert rows=%d elapsed=%.3fs", m.batch_size, m.elapsed_seconds
            ),
        )
        cursor.execute("COMMIT")
    except BatchInsertError:
        cursor.execute("ROLLBACK")
        raise
    except Exception as e:
        cursor.execute("ROLLBACK")
        raise BatchInsertError(f"commit failed: {e}") from e
    existing_keys.update(identity_key(r.company_name, r.po_number) for r in new_records)
    return result.inserted_rows


def process_files(
    paths: Sequence[Path],
    config: IngestConfig | None = None,
    cursor: Any = None,
) -> RunResult:
    """Process every file in ``paths`` and aggregate a RunResult.

    A FormatError fails only its own file. With a ``cursor`` the grouped
    records of each file are filtered against the stored orders and inserted
    (one transaction per file).

    Raises:
        ProcessingError: no input files, or existing orders cannot be read
    """
    if not paths:
        raise ProcessingError("no input files")
    config = config or IngestConfig()
    start_time = datetime.now(UTC)
    error_log = ErrorLogBuffer(config.error_log_dir)
    table = config.database.table

    existing_keys: set[str] = set()
    if cursor is not None:
        try:
            existing_keys = fetch_existing_keys(cursor, table)
        except BatchInsertError as e:
            raise ProcessingError(str(e)) from e

    file_stats: list[FileStat] = []
    all_records: list[GroupedRecord] = []
    all_errors: dict[str, list[ValidationError]] = {}

    with ProgressTracker(len(paths)) as progress:
        for path in paths:
            progress.start_file(path)
            file_start = time.perf_counter()
            try:
                batch = process_path(path, config.default_company_name, limits=config.limits)
            except FormatError as e:
                logger.error(f"{path.name}: {e}")
                error_log.append(
                    ErrorRecord.create(file=path.name, row=-1, error_type=ErrorCode.FORMAT_ERROR.value, message=str(e))
                )
                file_stats.append(
                    FileStat(
                        file_name=path.name,
                        status=FileStatus.FAILED,
                        records=0,
                        errors=0,
                        elapsed_seconds=time.perf_counter() - file_start,
                        error=str(e),
                    )
                )
                progress.finish_file(failed=path.name)
                continue

            error_log.extend_from_batch(path.name, batch.errors)
            for line in format_error_preview(batch.errors, config.error_preview_limit):
                logger.warning(f"{path.name}: {line}")

            status = FileStatus.SUCCESS
            failure: str | None = None
            inserted = 0
            if cursor is not None:
                try:
                    inserted = _insert_batch(cursor, batch.records, existing_keys, table)
                except BatchInsertError as e:
                    logger.error(f"{path.name}: insert failed: {e}")
                    status, failure = FileStatus.FAILED, str(e)

            logger.info(f"{path.name}: records={len(batch.records)} errors={len(batch.errors)} inserted={inserted}")
            if status is FileStatus.SUCCESS:
                all_records.extend(batch.records)
            all_errors[path.name] = batch.errors
            file_stats.append(
                FileStat(
                    file_name=path.name,
                    status=status,
                    records=len(batch.records),
                    errors=len(batch.errors),
                    elapsed_seconds=time.perf_counter() - file_start,
                    inserted_rows=inserted,
                    error=failure,
                )
            )
            progress.finish_file(records=len(all_records))

    try:
        log_path = error_log.flush()
    except OSError as e:
        logger.warning(f"could not write error log: {e}")
    else:
        if log_path is not None:
            logger.info(f"error log written to {log_path}")

    end_time = datetime.now(UTC)
    success = [s for s in file_stats if s.status is FileStatus.SUCCESS]
    return RunResult(
        success_files=len(success),
        failed_files=len(file_stats) - len(success),
        total_records=sum(s.records for s in success),
        total_errors=sum(s.errors for s in file_stats),
        total_inserted=sum(s.inserted_rows for s in file_stats),
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        file_stats=file_stats,
        records=all_records,
        errors=all_errors,
    )
