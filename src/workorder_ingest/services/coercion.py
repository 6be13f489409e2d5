from __future__ import annotations

import math
import numbers
import re
import unicodedata
from datetime import UTC, date, datetime, timedelta
from typing import Any

import pandas as pd

from ..models.config_models import DEFAULT_LIMITS, InputLimits
from ..models.rows import NormalizedRow, is_blank
from ..models.work_order import Coerced, DraftRecord, Status
from ..tabular.headers import CanonicalField

"""Cell coercers: normalized cells -> domain values.

Every function here is total: it never raises and always returns a
best-effort value, flagging substituted defaults through Coerced.used_default.
Only the row validator decides whether a row is rejected.
"""

__all__ = [
    "DEFAULT_PART_NAME",
    "STATUS_LABELS",
    "build_draft",
    "cell_text",
    "excel_serial_to_iso",
    "map_status",
    "normalize_po_number",
    "pad_po_to_five_digits",
    "parse_date",
    "parse_quantity",
    "resolve_part_name",
    "sanitize_text",
    "title_case_company",
    "to_iso",
]

DEFAULT_PART_NAME = "Sin nombre"
PO_PADDED_LENGTH = 5
EXCEL_EPOCH_OFFSET_DAYS = 25569  # 1970-01-01 as a spreadsheet serial date
MAX_EXCEL_SERIAL = 2958465  # 9999-12-31
UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

_PO_PREFIX_RX = re.compile(r"^(?:SO|PO)\s*/?\s*", re.IGNORECASE)
_NON_DIGIT_RX = re.compile(r"\D")
_LEADING_INT_RX = re.compile(r"^[+-]?\d+")
_THOUSANDS_RX = re.compile(r"[,_'\s]")
_DOTTED_THOUSANDS_RX = re.compile(r"^[+-]?\d{1,3}(\.\d{3})+$")  # "1.500" (es-MX / EU grouping)
_NUMERIC_RX = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)$")
_COMPACT_DATE_RX = re.compile(r"^\d{4}(\d{4})?$")  # "2024", "20240115"
_WHITESPACE_RX = re.compile(r"\s+")

# Order matters: it is also the order of the substring fallback.
STATUS_LABELS: dict[str, Status] = {
    "programada": Status.SCHEDULED,
    "scheduled": Status.SCHEDULED,
    "en producción": Status.PRODUCTION,
    "production": Status.PRODUCTION,
    "calidad": Status.QUALITY,
    "quality": Status.QUALITY,
    "hold": Status.HOLD,
    "en hold": Status.HOLD,
}


def cell_text(value: Any) -> str:
    """Render a cell as trimmed text ("" for blank cells)."""
    if is_blank(value):
        return ""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime | date):
        return value.isoformat()
    return str(value).strip()


def sanitize_text(value: Any, max_length: int) -> str:
    """Drop control characters, trim and truncate to ``max_length``."""
    text = "".join(ch for ch in cell_text(value) if unicodedata.category(ch) != "Cc")
    return text.strip()[:max_length].strip()


def pad_po_to_five_digits(value: str) -> str:
    """Digits only, last five kept, left-padded with zeros ("" if no digits)."""
    digits = _NON_DIGIT_RX.sub("", value or "")
    if not digits:
        return ""
    return digits[-PO_PADDED_LENGTH:].zfill(PO_PADDED_LENGTH)


def _strip_po_prefixes(text: str) -> str:
    previous = None
    while previous != text:
        previous = text
        text = _PO_PREFIX_RX.sub("", text, count=1).strip()
    return text


def normalize_po_number(value: Any, max_length: int = DEFAULT_LIMITS.po_number_max) -> str:
    """Canonical order number.

    "SO20691" -> "20691", "179" -> "00179", "202600072" -> "00072". Text without
    digits is kept (prefix-stripped when something remains). Idempotent.
    """
    text = cell_text(value)
    remainder = _strip_po_prefixes(text)
    padded = pad_po_to_five_digits(remainder)
    if padded:
        return padded
    return (remainder or text)[:max_length].strip()


def resolve_part_name(row: NormalizedRow, max_length: int = DEFAULT_LIMITS.part_name_max) -> Coerced[str]:
    """Part cell wins; otherwise "<number> - <description>"; else "Sin nombre"."""
    part = cell_text(row.get(CanonicalField.PART))
    if not part:
        number = cell_text(row.get(CanonicalField.PART_NUMBER))
        description = cell_text(row.get(CanonicalField.DESCRIPTION))
        part = " - ".join(s for s in (number, description) if s)
    part = part[:max_length].strip()
    if not part:
        return Coerced(DEFAULT_PART_NAME, used_default=True)
    return Coerced(part)


def parse_quantity(value: Any, maximum: int = DEFAULT_LIMITS.quantity_max) -> Coerced[int]:
    """Integer quantity clamped to [0, maximum]; unusable input yields 0."""
    if is_blank(value) or isinstance(value, bool):
        return Coerced(0, used_default=True)
    if isinstance(value, numbers.Real):
        if not math.isfinite(value):
            return Coerced(0, used_default=True)
        number = int(value)
    else:
        text = _THOUSANDS_RX.sub("", str(value))
        if _DOTTED_THOUSANDS_RX.match(text):
            text = text.replace(".", "")
        match = _LEADING_INT_RX.match(text)
        if match is None:
            return Coerced(0, used_default=True)
        number = int(match.group())
    if number < 0:
        return Coerced(0, used_default=True)
    return Coerced(min(number, maximum))


def to_iso(moment: datetime) -> str:
    """ISO-8601 UTC instant with millisecond precision and a "Z" suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def excel_serial_to_iso(serial: float) -> str | None:
    """Spreadsheet serial date -> ISO instant (None when out of range)."""
    try:
        return to_iso(UNIX_EPOCH + timedelta(days=serial - EXCEL_EPOCH_OFFSET_DAYS))
    except (OverflowError, ValueError):
        return None


def _parse_free_text_date(text: str) -> str | None:
    try:
        parsed = pd.to_datetime(text, errors="coerce", utc=True, format="mixed")
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(parsed):
        return None
    return to_iso(parsed.to_pydatetime())


def _is_serial(number: float) -> bool:
    return 0 < number <= MAX_EXCEL_SERIAL


def parse_date(value: Any, now: datetime | None = None) -> Coerced[str]:
    """Creation date as an ISO instant.

    Datetime cells are taken as-is (naive = UTC). Numbers within the
    spreadsheet serial range are serial dates, and so are numeric strings
    unless they read as a compact year (``2024``) or ``YYYYMMDD`` date.
    Other text is parsed as a free-text date. Anything else falls back to
    ``now``.
    """
    fallback = Coerced(to_iso(now or datetime.now(UTC)), used_default=True)
    if is_blank(value) or isinstance(value, bool):
        return fallback
    if isinstance(value, datetime):
        return Coerced(to_iso(value))
    if isinstance(value, date):
        return Coerced(to_iso(datetime(value.year, value.month, value.day)))
    if isinstance(value, numbers.Real):
        iso = excel_serial_to_iso(float(value)) if _is_serial(value) else None
        return Coerced(iso) if iso else fallback
    text = str(value).strip()
    if _NUMERIC_RX.match(text) and not _COMPACT_DATE_RX.match(text):
        serial = float(text)
        iso = excel_serial_to_iso(serial) if _is_serial(serial) else None
        return Coerced(iso) if iso else fallback
    iso = _parse_free_text_date(text)
    return Coerced(iso) if iso else fallback


def map_status(value: Any) -> Coerced[Status]:
    """Status label -> Status (exact, then substring both ways, else scheduled)."""
    key = _WHITESPACE_RX.sub(" ", cell_text(value).lower())
    if not key:
        return Coerced(Status.SCHEDULED, used_default=True)
    if key in STATUS_LABELS:
        return Coerced(STATUS_LABELS[key])
    for label, status in STATUS_LABELS.items():
        if label in key or key in label:
            return Coerced(status)
    return Coerced(Status.SCHEDULED, used_default=True)


def title_case_company(value: Any) -> str:
    """Collapse whitespace and title-case; 2-5 letter words read as acronyms."""
    words = _WHITESPACE_RX.sub(" ", cell_text(value)).split(" ")
    out = []
    for word in words:
        if not word:
            continue
        if 2 <= len(word) <= 5:
            out.append(word.upper())
        else:
            out.append(word[:1].upper() + word[1:].lower())
    return " ".join(out)


def build_draft(
    row: NormalizedRow,
    default_company_name: str,
    now: datetime,
    limits: InputLimits = DEFAULT_LIMITS,
) -> DraftRecord:
    """Coerce every field of a (carry-forward resolved) row."""
    company_cell = cell_text(row.get(CanonicalField.COMPANY))
    if company_cell:
        company = Coerced(title_case_company(company_cell))
    else:
        company = Coerced(title_case_company(default_company_name), used_default=True)

    return DraftRecord(
        row_number=row.row_number,
        company_name=company,
        po_number=Coerced(normalize_po_number(row.get(CanonicalField.ORDER), limits.po_number_max)),
        part_name=resolve_part_name(row, limits.part_name_max),
        quantity_total=parse_quantity(row.get(CanonicalField.QUANTITY), limits.quantity_max),
        status=map_status(row.get(CanonicalField.STATUS)),
        created_at=parse_date(row.get(CanonicalField.DATE), now),
    )
