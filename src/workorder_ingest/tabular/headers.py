from __future__ import annotations

import re
from enum import Enum
from typing import Any

from ..models.rows import NormalizedRow, RawRow, is_blank

"""Header normalizer: raw spreadsheet headers -> canonical fields.

Uploaded files come from departments with no shared template, so many header
spellings map onto one canonical field. Matching is case-insensitive and
ignores surrounding / repeated whitespace. Unknown headers are passed through
unchanged in NormalizedRow.extras.
"""

__all__ = [
    "CanonicalField",
    "HEADER_SYNONYMS",
    "canonical_field",
    "header_key",
    "normalize_row",
]

_WHITESPACE_RX = re.compile(r"\s+")


class CanonicalField(Enum):
    ORDER = "Orden"
    PART_NUMBER = "NumeroParte"
    DESCRIPTION = "Descripcion"
    PART = "Parte"  # combined "description or part number" column
    QUANTITY = "Cantidad"
    DATE = "Fecha"
    STATUS = "Estatus"
    COMPANY = "Compania"


# Keys are already in header_key() form.
HEADER_SYNONYMS: dict[CanonicalField, tuple[str, ...]] = {
    CanonicalField.ORDER: (
        "orden",
        "no. orden",
        "no orden",
        "no. de orden",
        "nº orden",
        "num. orden",
        "num orden",
        "numero orden",
        "número orden",
        "numero de orden",
        "número de orden",
        "orden de compra",
        "order",
        "order #",
        "order number",
        "po",
        "po #",
        "po number",
        "purchase order",
        "so",
        "so/orden",
        "so / orden",
        "ref",
        "referencia",
        "reference",
    ),
    CanonicalField.PART_NUMBER: (
        "numero parte",
        "número parte",
        "numero de parte",
        "número de parte",
        "numeroparte",
        "no. parte",
        "part number",
        "part no",
        "part #",
    ),
    CanonicalField.DESCRIPTION: (
        "descripcion",
        "descripción",
        "description",
    ),
    CanonicalField.PART: (
        "parte",
        "part",
        "descripcion o numero de parte",
        "descripción o número de parte",
    ),
    CanonicalField.QUANTITY: (
        "cantidad",
        "cant",
        "cant.",
        "qty",
        "quantity",
    ),
    CanonicalField.DATE: (
        "fecha",
        "fecha de creacion",
        "fecha de creación",
        "fecha creacion",
        "fecha creación",
        "date",
        "created",
        "created at",
    ),
    CanonicalField.STATUS: (
        "estatus",
        "estado",
        "status",
    ),
    CanonicalField.COMPANY: (
        "compania",
        "compañia",
        "compañía",
        "companía",
        "empresa",
        "cliente",
        "company",
        "customer",
    ),
}


def header_key(raw: Any) -> str:
    """Trim, lower-case and collapse internal whitespace."""
    if raw is None:
        return ""
    return _WHITESPACE_RX.sub(" ", str(raw).strip().lower())


def _build_lookup(table: dict[CanonicalField, tuple[str, ...]]) -> dict[str, CanonicalField]:
    missing = [f.name for f in CanonicalField if not table.get(f)]
    if missing:
        raise ValueError(f"canonical fields without synonyms: {missing}")
    lookup: dict[str, CanonicalField] = {}
    for canonical, synonyms in table.items():
        for synonym in synonyms:
            key = header_key(synonym)
            owner = lookup.get(key)
            if owner is not None and owner is not canonical:
                raise ValueError(f"synonym {synonym!r} maps to both {owner.name} and {canonical.name}")
            lookup[key] = canonical
    return lookup


_LOOKUP = _build_lookup(HEADER_SYNONYMS)


def canonical_field(raw_header: Any) -> CanonicalField | None:
    """Return the canonical field for a raw header, or None when unknown."""
    return _LOOKUP.get(header_key(raw_header))


def normalize_row(raw: RawRow) -> NormalizedRow:
    """Map a RawRow's headers onto canonical fields.

    When several raw headers map to the same field the first non-blank value
    is kept.
    """
    fields: dict[CanonicalField, Any] = {}
    extras: dict[str, Any] = {}
    for header, value in raw.cells.items():
        canonical = canonical_field(header)
        if canonical is None:
            extras[str(header).strip()] = value
        elif canonical not in fields or (is_blank(fields[canonical]) and not is_blank(value)):
            fields[canonical] = value
    return NormalizedRow(
        row_number=raw.row_number,
        fields=fields,
        extras=extras,
        values=tuple(raw.cells.values()),
    )
