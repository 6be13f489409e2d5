from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..tabular.headers import CanonicalField

"""Stage-specific row types flowing through the ingestion pipeline.

RawRow comes straight out of the tabular reader; NormalizedRow has its headers
mapped to canonical fields. Both carry the 1-based physical row number of the
source file (header = row 1, first data row = row 2).
"""

__all__ = [
    "NormalizedRow",
    "RawRow",
    "is_blank",
]


def is_blank(value: Any) -> bool:
    """True for None, NaN/NaT and whitespace-only strings."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    # NaN / NaT are the only cell values not equal to themselves
    try:
        return bool(value != value)
    except (TypeError, ValueError):
        return False


@dataclass(frozen=True)
class RawRow:
    """One physical row as decoded by the reader (blank cells are None)."""
    row_number: int
    cells: dict[str, Any]

    def is_blank(self) -> bool:
        return all(is_blank(v) for v in self.cells.values())


@dataclass(frozen=True)
class NormalizedRow:
    """A RawRow whose recognised headers were replaced by canonical fields.

    Unrecognised headers are kept unchanged in ``extras``; ``values`` keeps
    every cell in column order for the first-non-empty-cell fallback.
    """
    row_number: int
    fields: dict[CanonicalField, Any]
    extras: dict[str, Any] = field(default_factory=dict)
    values: tuple[Any, ...] = ()

    def is_blank(self) -> bool:
        return all(is_blank(v) for v in self.values)

    def get(self, canonical: CanonicalField) -> Any:
        value = self.fields.get(canonical)
        return None if is_blank(value) else value

    def first_non_empty(self) -> Any:
        for value in self.values:
            if not is_blank(value):
                return value
        return None

    def with_fields(self, updates: dict[CanonicalField, Any]) -> NormalizedRow:
        """Return a copy with the given canonical fields replaced."""
        merged = {**self.fields, **updates}
        return NormalizedRow(
            row_number=self.row_number,
            fields=merged,
            extras=self.extras,
            values=self.values,
        )
