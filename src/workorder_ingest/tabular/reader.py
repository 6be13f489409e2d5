from __future__ import annotations

import csv
import io
import logging
from enum import Enum
from pathlib import PurePath
from typing import Any

import pandas as pd

from ..models.rows import RawRow

"""Tabular reader: workbook / delimited-text bytes -> list[RawRow].

- The first row is the header; data rows are numbered from 2 so row numbers
  match what the operator sees in a spreadsheet.
- Workbooks: only the first sheet is read.
- Blank cells are kept as None rather than dropped.
- FormatError is the only batch-fatal condition of the engine.
"""

__all__ = [
    "FormatError",
    "TableFormat",
    "detect_format",
    "read_table",
]

logger = logging.getLogger(__name__)

UNSUPPORTED_FORMAT_MESSAGE = "Formato no soportado. Use .xlsx, .xls o .csv"
CANDIDATE_DELIMITERS = ",;\t|"
FIRST_DATA_ROW = 2


class FormatError(Exception):
    """Raised when the input bytes cannot be decoded in the declared format."""


class TableFormat(Enum):
    WORKBOOK = "workbook"
    DELIMITED = "delimited"


_EXTENSIONS = {
    ".xlsx": TableFormat.WORKBOOK,
    ".xls": TableFormat.WORKBOOK,
    ".csv": TableFormat.DELIMITED,
}


def detect_format(filename: str | PurePath) -> TableFormat:
    """Infer the table format from a file name extension."""
    suffix = PurePath(str(filename)).suffix.lower()
    try:
        return _EXTENSIONS[suffix]
    except KeyError:
        raise FormatError(UNSUPPORTED_FORMAT_MESSAGE) from None


def read_table(data: bytes, fmt: TableFormat) -> list[RawRow]:
    """Decode ``data`` as ``fmt`` and return its rows in file order."""
    if fmt is TableFormat.WORKBOOK:
        df = _read_workbook(data)
    elif fmt is TableFormat.DELIMITED:
        df = _read_delimited(data)
    else:  # pragma: no cover - closed enum
        raise FormatError(UNSUPPORTED_FORMAT_MESSAGE)
    rows = _frame_to_rows(df)
    logger.debug("read %d rows (%s) columns=%s", len(rows), fmt.value, list(df.columns))
    return rows


def _read_workbook(data: bytes) -> pd.DataFrame:
    # pandas picks openpyxl (.xlsx) or xlrd (.xls) from the content itself
    try:
        return pd.read_excel(io.BytesIO(data), sheet_name=0, header=0, dtype=object)
    except Exception as e:
        raise FormatError(f"archivo de Excel ilegible: {e}") from e


def _read_delimited(data: bytes) -> pd.DataFrame:
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise FormatError(f"CSV no es UTF-8 válido: {e}") from e
    if not text.strip():
        return pd.DataFrame()
    try:
        return pd.read_csv(
            io.StringIO(text),
            sep=_detect_delimiter(text),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=False,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError, csv.Error) as e:
        raise FormatError(f"CSV mal formado: {e}") from e


def _detect_delimiter(text: str) -> str:
    sample = "\n".join([line for line in text.splitlines() if line.strip()][:25])
    try:
        return csv.Sniffer().sniff(sample, delimiters=CANDIDATE_DELIMITERS).delimiter
    except csv.Error:
        return ","


def _clean_cell(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str):
        return value if value.strip() else None
    if pd.isna(value):
        return None
    return value


def _frame_to_rows(df: pd.DataFrame) -> list[RawRow]:
    headers = [str(c).strip() for c in df.columns]
    rows: list[RawRow] = []
    for offset, raw in enumerate(df.itertuples(index=False, name=None)):
        cells = {h: _clean_cell(v) for h, v in zip(headers, raw, strict=False)}
        rows.append(RawRow(row_number=offset + FIRST_DATA_ROW, cells=cells))
    return rows
