"""Tabular input: format detection, decoding and header normalization."""

from .headers import CanonicalField, canonical_field, normalize_row
from .reader import FormatError, TableFormat, detect_format, read_table

__all__ = [
    "CanonicalField",
    "FormatError",
    "TableFormat",
    "canonical_field",
    "detect_format",
    "normalize_row",
    "read_table",
]
