from __future__ import annotations

from collections.abc import Sequence

from ..models.error_record import ValidationError
from ..models.processing_result import RunResult

"""Operator-facing summaries: the error preview and the SUMMARY line."""

__all__ = [
    "format_error_preview",
    "format_seconds",
    "render_summary_line",
]


def format_error_preview(errors: Sequence[ValidationError], limit: int = 10) -> list[str]:
    """First ``limit`` errors as "Row {row}: {message}", then "+N more".

    Examples:
        >>> errs = [ValidationError(row=n, message="Nombre de parte vacío") for n in (2, 5, 9)]
        >>> format_error_preview(errs, limit=2)
        ['Row 2: Nombre de parte vacío', 'Row 5: Nombre de parte vacío', '+1 more']
    """
    lines = [e.format() for e in errors[:limit]]
    remaining = len(errors) - limit
    if remaining > 0:
        lines.append(f"+{remaining} more")
    return lines


def format_seconds(seconds: float) -> str:
    """Compact rendering: integers without decimals, no scientific notation."""
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: RunResult) -> str:
    """Render the SUMMARY line for a run.

    Format:
    SUMMARY files={n} success={s} failed={f} records={r} errors={e}
    inserted={i} elapsed_sec={x}
    """
    return (
        f"SUMMARY files={result.total_files} "
        f"success={result.success_files} "
        f"failed={result.failed_files} "
        f"records={result.total_records} "
        f"errors={result.total_errors} "
        f"inserted={result.total_inserted} "
        f"elapsed_sec={format_seconds(result.elapsed_seconds)}"
    )
