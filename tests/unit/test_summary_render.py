from __future__ import annotations

from datetime import UTC, datetime

from workorder_ingest.models.error_record import ValidationError
from workorder_ingest.models.processing_result import RunResult
from workorder_ingest.services.summary import format_error_preview, format_seconds, render_summary_line


def _result(**kw) -> RunResult:
    values = dict(
        success_files=2,
        failed_files=1,
        total_records=7,
        total_errors=3,
        total_inserted=0,
        start_time=datetime(2026, 1, 1, tzinfo=UTC),
        end_time=datetime(2026, 1, 1, 0, 0, 1, tzinfo=UTC),
        elapsed_seconds=1.25,
    )
    values.update(kw)
    return RunResult(**values)


def test_render_summary_line():
    assert render_summary_line(_result()) == (
        "SUMMARY files=3 success=2 failed=1 records=7 errors=3 inserted=0 elapsed_sec=1.25"
    )


def test_render_summary_line_integer_seconds():
    line = render_summary_line(_result(elapsed_seconds=2.0, total_inserted=5))
    assert line.endswith("inserted=5 elapsed_sec=2")


def test_format_seconds():
    assert format_seconds(0) == "0"
    assert format_seconds(0.5) == "0.5"
    assert format_seconds(0.001234) == "0.001234"
    assert format_seconds(12.3456) == "12.346"


def test_error_preview_limit_and_more():
    errors = [ValidationError(row=n, message="Cantidad inválida") for n in range(2, 16)]
    lines = format_error_preview(errors)
    assert len(lines) == 11
    assert lines[0] == "Row 2: Cantidad inválida"
    assert lines[9] == "Row 11: Cantidad inválida"
    assert lines[10] == "+4 more"


def test_error_preview_without_overflow():
    errors = [ValidationError(row=3, message="x")]
    assert format_error_preview(errors, limit=10) == ["Row 3: x"]
    assert format_error_preview([], limit=10) == []


def test_error_preview_zero_limit():
    errors = [ValidationError(row=3, message="x"), ValidationError(row=4, message="y")]
    assert format_error_preview(errors, limit=0) == ["+2 more"]
