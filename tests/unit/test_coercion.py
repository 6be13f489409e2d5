from __future__ import annotations

from datetime import UTC, date, datetime

import pytest

from workorder_ingest.models.config_models import InputLimits
from workorder_ingest.models.rows import NormalizedRow
from workorder_ingest.models.work_order import Status
from workorder_ingest.services.coercion import (
    DEFAULT_PART_NAME,
    build_draft,
    cell_text,
    excel_serial_to_iso,
    map_status,
    normalize_po_number,
    pad_po_to_five_digits,
    parse_date,
    parse_quantity,
    resolve_part_name,
    sanitize_text,
    title_case_company,
    to_iso,
)
from workorder_ingest.tabular.headers import CanonicalField

NOW = datetime(2026, 3, 1, 12, 30, tzinfo=UTC)
NOW_ISO = "2026-03-01T12:30:00.000Z"


def _row(**fields) -> NormalizedRow:
    mapped = {CanonicalField[k.upper()]: v for k, v in fields.items()}
    return NormalizedRow(row_number=2, fields=mapped, values=tuple(mapped.values()))


# --- text -------------------------------------------------------------------

def test_cell_text():
    assert cell_text(None) == ""
    assert cell_text(float("nan")) == ""
    assert cell_text(179.0) == "179"
    assert cell_text(12.5) == "12.5"
    assert cell_text("  Bracket ") == "Bracket"


def test_sanitize_text_strips_control_chars_and_truncates():
    assert sanitize_text(" Acme\x00 Corp\x07 ", 200) == "Acme Corp"
    assert sanitize_text("abcdef", 3) == "abc"
    assert sanitize_text("<b>Acme</b>", 200) == "<b>Acme</b>"


# --- PO numbers ---------------------------------------------------------------

@pytest.mark.parametrize(
    "raw,expected",
    [
        ("202600072", "00072"),
        (179, "00179"),
        (179.0, "00179"),
        ("SO20691", "20691"),
        ("so 20691", "20691"),
        ("PO/1234", "01234"),
        ("SO-PO 55", "00055"),
        ("ABC", "ABC"),
        ("", ""),
        (None, ""),
    ],
)
def test_normalize_po_number(raw, expected):
    assert normalize_po_number(raw) == expected


@pytest.mark.parametrize("raw", ["202600072", "SO20691", "179", "PO PO 7", "ABC", "00179"])
def test_normalize_po_number_idempotent(raw):
    once = normalize_po_number(raw)
    assert normalize_po_number(once) == once


def test_normalize_po_text_truncated():
    assert normalize_po_number("X" * 150, max_length=100) == "X" * 100


def test_pad_po_to_five_digits():
    assert pad_po_to_five_digits("7") == "00007"
    assert pad_po_to_five_digits("A-12-B3") == "00123"
    assert pad_po_to_five_digits("none") == ""


# --- part name ----------------------------------------------------------------

def test_part_name_part_cell_wins():
    coerced = resolve_part_name(_row(part="Bracket", part_number="BR-1", description="Steel"))
    assert coerced.value == "Bracket"
    assert not coerced.used_default


def test_part_name_number_and_description_combined():
    assert resolve_part_name(_row(part_number="BR-1", description="Steel bracket")).value == "BR-1 - Steel bracket"
    assert resolve_part_name(_row(description="Steel bracket")).value == "Steel bracket"
    assert resolve_part_name(_row(part_number=4471)).value == "4471"


def test_part_name_default():
    coerced = resolve_part_name(_row(order="179"))
    assert coerced.value == DEFAULT_PART_NAME
    assert coerced.used_default


def test_part_name_truncated():
    assert resolve_part_name(_row(part="x" * 400), max_length=300).value == "x" * 300


# --- quantity -----------------------------------------------------------------

@pytest.mark.parametrize(
    "raw,expected,defaulted",
    [
        (10, 10, False),
        ("10", 10, False),
        (12.9, 12, False),
        ("12.7", 12, False),
        ("1,500", 1500, False),
        ("1.500", 1500, False),
        ("1 500", 1500, False),
        ("7 pcs", 7, False),
        ("0", 0, False),
        (2_000_000, 999999, False),
        ("-5", 0, True),
        ("abc", 0, True),
        ("", 0, True),
        (None, 0, True),
        (float("inf"), 0, True),
        (True, 0, True),
    ],
)
def test_parse_quantity(raw, expected, defaulted):
    coerced = parse_quantity(raw)
    assert coerced.value == expected
    assert coerced.used_default is defaulted


def test_parse_quantity_custom_maximum():
    assert parse_quantity("500", maximum=100).value == 100


# --- dates --------------------------------------------------------------------

def test_to_iso_naive_is_utc():
    assert to_iso(datetime(2025, 1, 2, 3, 4, 5)) == "2025-01-02T03:04:05.000Z"


def test_excel_serial_to_iso():
    assert excel_serial_to_iso(45658) == "2025-01-01T00:00:00.000Z"
    assert excel_serial_to_iso(45658.5) == "2025-01-01T12:00:00.000Z"
    assert excel_serial_to_iso(1e12) is None


@pytest.mark.parametrize(
    "raw,expected",
    [
        (datetime(2025, 5, 6, 7, 8, 9), "2025-05-06T07:08:09.000Z"),
        (date(2025, 5, 6), "2025-05-06T00:00:00.000Z"),
        (45658, "2025-01-01T00:00:00.000Z"),
        ("45658", "2025-01-01T00:00:00.000Z"),
        ("2025-03-15", "2025-03-15T00:00:00.000Z"),
        ("45000", "2023-03-15T00:00:00.000Z"),
        ("2024", "2024-01-01T00:00:00.000Z"),
        ("20240115", "2024-01-15T00:00:00.000Z"),
    ],
)
def test_parse_date(raw, expected):
    coerced = parse_date(raw, NOW)
    assert coerced.value == expected
    assert not coerced.used_default


@pytest.mark.parametrize("raw", [None, "", "not a date", 0, -3, "-3", 2958466, "3000000", True])
def test_parse_date_falls_back_to_now(raw):
    coerced = parse_date(raw, NOW)
    assert coerced.value == NOW_ISO
    assert coerced.used_default


# --- status -------------------------------------------------------------------

@pytest.mark.parametrize(
    "raw,expected",
    [
        ("Programada", Status.SCHEDULED),
        ("En Producción", Status.PRODUCTION),
        ("PRODUCTION", Status.PRODUCTION),
        ("calidad", Status.QUALITY),
        ("En   Hold", Status.HOLD),
        ("Revisión de calidad", Status.QUALITY),
    ],
)
def test_map_status(raw, expected):
    coerced = map_status(raw)
    assert coerced.value is expected
    assert not coerced.used_default


@pytest.mark.parametrize("raw", [None, "", "cancelada"])
def test_map_status_default(raw):
    coerced = map_status(raw)
    assert coerced.value is Status.SCHEDULED
    assert coerced.used_default


# --- company ------------------------------------------------------------------

def test_title_case_company():
    assert title_case_company("industrias  del pacifico") == "Industrias DEL Pacifico"
    assert title_case_company("importación") == "Importación"
    assert title_case_company("  ") == ""


# --- draft --------------------------------------------------------------------

def test_build_draft_uses_default_company():
    draft = build_draft(_row(order="SO179", part="Bracket", quantity="3"), "importación", NOW)
    assert draft.row_number == 2
    assert draft.company_name.value == "Importación"
    assert draft.company_name.used_default
    assert draft.po_number.value == "00179"
    assert draft.part_name.value == "Bracket"
    assert draft.quantity_total.value == 3
    assert draft.status.value is Status.SCHEDULED
    assert draft.created_at.value == NOW_ISO


def test_build_draft_company_cell_wins():
    draft = build_draft(_row(order="1", company="corporativo alfa", part="x"), "Importación", NOW)
    assert draft.company_name.value == "Corporativo ALFA"
    assert not draft.company_name.used_default


def test_build_draft_applies_limits():
    limits = InputLimits(part_name_max=5, quantity_max=10)
    draft = build_draft(_row(order="1", part="Bracket", quantity="99"), "Acme", NOW, limits)
    assert draft.part_name.value == "Brack"
    assert draft.quantity_total.value == 10
