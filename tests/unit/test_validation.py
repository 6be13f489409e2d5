from __future__ import annotations

import pytest

from workorder_ingest.models.config_models import InputLimits
from workorder_ingest.models.error_record import ErrorCode
from workorder_ingest.models.work_order import Coerced, DraftRecord, Priority, Status
from workorder_ingest.services.validation import MESSAGES, validate_draft


def _draft(**overrides) -> DraftRecord:
    values = {
        "company_name": "Acme",
        "po_number": "00179",
        "part_name": "Bracket",
        "quantity_total": 10,
        "status": Status.QUALITY,
        "created_at": "2025-01-01T00:00:00.000Z",
    }
    values.update(overrides)
    return DraftRecord(row_number=7, **{k: Coerced(v) for k, v in values.items()})


def test_valid_draft_becomes_candidate():
    errors = []
    candidate = validate_draft(_draft(), errors)
    assert errors == []
    assert candidate is not None
    assert candidate.company_name == "Acme"
    assert candidate.po_number == "00179"
    assert candidate.part_name == "Bracket"
    assert candidate.quantity_total == 10
    assert candidate.quantity_completed == 0
    assert candidate.status is Status.QUALITY
    assert candidate.priority is Priority.NORMAL
    assert candidate.created_at == "2025-01-01T00:00:00.000Z"


@pytest.mark.parametrize(
    "overrides,code",
    [
        ({"company_name": "  "}, ErrorCode.MISSING_COMPANY),
        ({"po_number": ""}, ErrorCode.MISSING_PO_NUMBER),
        ({"part_name": "\x00"}, ErrorCode.MISSING_PART_NAME),
        ({"quantity_total": 1_000_000}, ErrorCode.INVALID_QUANTITY),
        ({"quantity_total": -1}, ErrorCode.INVALID_QUANTITY),
    ],
)
def test_rejected_draft_logs_one_error(overrides, code):
    errors = []
    assert validate_draft(_draft(**overrides), errors) is None
    assert len(errors) == 1
    assert errors[0].row == 7
    assert errors[0].code is code
    assert errors[0].message == MESSAGES[code]


def test_first_failing_check_wins():
    errors = []
    validate_draft(_draft(company_name="", po_number="", part_name=""), errors)
    assert [e.code for e in errors] == [ErrorCode.MISSING_COMPANY]


def test_errors_accumulate_across_rows():
    errors = []
    validate_draft(_draft(po_number=""), errors)
    validate_draft(_draft(), errors)
    validate_draft(_draft(part_name=""), errors)
    assert [e.code for e in errors] == [ErrorCode.MISSING_PO_NUMBER, ErrorCode.MISSING_PART_NAME]


def test_zero_quantity_is_valid():
    errors = []
    assert validate_draft(_draft(quantity_total=0), errors) is not None
    assert errors == []


def test_sanitizes_and_truncates():
    limits = InputLimits(company_name_max=4)
    candidate = validate_draft(_draft(company_name=" Acme\x07 Corp "), [], limits)
    assert candidate is not None
    assert candidate.company_name == "Acme"


def test_messages_are_operator_facing_spanish():
    assert MESSAGES[ErrorCode.MISSING_PART_NAME] == "Nombre de parte vacío"
    assert set(MESSAGES) == {
        ErrorCode.MISSING_COMPANY,
        ErrorCode.MISSING_PO_NUMBER,
        ErrorCode.MISSING_PART_NAME,
        ErrorCode.INVALID_QUANTITY,
    }
