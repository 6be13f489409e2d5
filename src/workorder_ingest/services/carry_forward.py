from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from ..models.rows import NormalizedRow
from ..tabular.headers import CanonicalField
from .coercion import cell_text

"""Carry-forward resolver for visually merged order / company cells.

Source spreadsheets often merge the order and company cells of consecutive
part lines, which leaves those cells blank in the underlying rows. A blank
Order or Company cell takes the last non-blank value seen above it in the same
file. The "last seen" state is an immutable value threaded through the rows,
so nothing leaks between files or concurrent calls.
"""

__all__ = [
    "CarryState",
    "carry_forward",
    "resolve_row",
]


@dataclass(frozen=True)
class CarryState:
    last_order: str = ""
    last_company: str = ""


def resolve_row(row: NormalizedRow, state: CarryState) -> tuple[NormalizedRow, CarryState]:
    """Fill blank Order / Company cells of ``row`` and return the next state.

    Order falls back to the last seen order and, when there is none yet, to
    the first non-empty cell of the row. The state only remembers values that
    were actually present in the Order / Company columns.
    """
    order = cell_text(row.get(CanonicalField.ORDER))
    company = cell_text(row.get(CanonicalField.COMPANY))

    next_state = CarryState(
        last_order=order or state.last_order,
        last_company=company or state.last_company,
    )

    updates: dict[CanonicalField, str] = {}
    if not order:
        fallback = state.last_order or cell_text(row.first_non_empty())
        if fallback:
            updates[CanonicalField.ORDER] = fallback
    if not company and state.last_company:
        updates[CanonicalField.COMPANY] = state.last_company

    if updates:
        row = row.with_fields(updates)
    return row, next_state


def carry_forward(rows: Iterable[NormalizedRow], state: CarryState | None = None) -> list[NormalizedRow]:
    """Resolve a file's rows in order, starting from an empty state."""
    state = state or CarryState()
    resolved: list[NormalizedRow] = []
    for row in rows:
        row, state = resolve_row(row, state)
        resolved.append(row)
    return resolved
