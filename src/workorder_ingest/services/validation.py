from __future__ import annotations

import logging

from ..models.config_models import DEFAULT_LIMITS, InputLimits
from ..models.error_record import ErrorCode, ValidationError
from ..models.work_order import CandidateRecord, DraftRecord
from .coercion import sanitize_text

"""Row validator: DraftRecord -> CandidateRecord or one ValidationError.

Checks run in a fixed order (company, PO number, part name, quantity) and stop
at the first failure. A rejected row produces exactly one error entry and no
record; errors are appended to the batch log, never raised.
"""

__all__ = [
    "MESSAGES",
    "validate_draft",
]

logger = logging.getLogger(__name__)

# Operator-facing messages (the dashboard UI is in Spanish)
MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.MISSING_COMPANY: "Falta compañía (use columna o valor por defecto)",
    ErrorCode.MISSING_PO_NUMBER: "Número de PO vacío o inválido",
    ErrorCode.MISSING_PART_NAME: "Nombre de parte vacío",
    ErrorCode.INVALID_QUANTITY: "Cantidad inválida",
}


def _reject(draft: DraftRecord, code: ErrorCode, errors: list[ValidationError]) -> None:
    error = ValidationError(row=draft.row_number, message=MESSAGES[code], code=code)
    logger.debug("row %d rejected: %s", draft.row_number, code.value)
    errors.append(error)


def validate_draft(
    draft: DraftRecord,
    errors: list[ValidationError],
    limits: InputLimits = DEFAULT_LIMITS,
) -> CandidateRecord | None:
    """Validate and sanitize one draft.

    Returns the CandidateRecord, or None after appending one ValidationError
    to ``errors``.
    """
    company_name = sanitize_text(draft.company_name.value, limits.company_name_max)
    if not company_name:
        _reject(draft, ErrorCode.MISSING_COMPANY, errors)
        return None

    po_number = sanitize_text(draft.po_number.value, limits.po_number_max)
    if not po_number:
        _reject(draft, ErrorCode.MISSING_PO_NUMBER, errors)
        return None

    part_name = sanitize_text(draft.part_name.value, limits.part_name_max)
    if not part_name:
        _reject(draft, ErrorCode.MISSING_PART_NAME, errors)
        return None

    quantity_total = draft.quantity_total.value
    if quantity_total < 0 or quantity_total > limits.quantity_max:
        _reject(draft, ErrorCode.INVALID_QUANTITY, errors)
        return None

    # status / priority / created_at are defaulted by construction
    return CandidateRecord(
        company_name=company_name,
        po_number=po_number,
        part_name=part_name,
        quantity_total=quantity_total,
        created_at=draft.created_at.value,
        status=draft.status.value,
        priority=draft.priority,
    )
