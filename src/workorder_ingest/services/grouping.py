from __future__ import annotations

import re
from collections.abc import Iterable

from ..models.config_models import DEFAULT_LIMITS
from ..models.work_order import CandidateRecord, GroupedRecord
from .coercion import pad_po_to_five_digits

"""Grouping / reconciliation of validated line items into work orders.

Line items sharing an identity key (normalized company + normalized PO) become
one GroupedRecord: distinct part names are joined in first-seen order,
quantities are summed, and status / priority / created_at come from the first
line item of the group.
"""

__all__ = [
    "group_candidates",
    "identity_key",
    "normalize_company",
    "normalize_part_name",
    "normalize_po_for_comparison",
]

PART_NAME_SEPARATOR = ", "

_WHITESPACE_RX = re.compile(r"\s+")
_PO_PREFIX_RX = re.compile(r"^(?:SO|PO)\s*/?\s*", re.IGNORECASE)
_NON_ALNUM_RX = re.compile(r"[^0-9a-z]", re.IGNORECASE)


def _collapse(value: str | None) -> str:
    return _WHITESPACE_RX.sub(" ", (value or "").strip())


def normalize_company(company_name: str | None) -> str:
    return _collapse(company_name).lower()


def normalize_part_name(part_name: str | None) -> str:
    return _collapse(part_name).lower()


def normalize_po_for_comparison(po_number: str | None) -> str:
    """Prefix-stripped, 5-digit PO; text-only POs compare on lower-case alnum."""
    text = (po_number or "").strip()
    text = _PO_PREFIX_RX.sub("", text, count=1).strip()
    padded = pad_po_to_five_digits(text)
    if padded:
        return padded
    alnum = _NON_ALNUM_RX.sub("", text).lower()
    return alnum or _collapse(text).lower()


def identity_key(company_name: str | None, po_number: str | None) -> str:
    """Grouping key shared with the persistence layer's duplicate check."""
    return f"{normalize_company(company_name)}|{normalize_po_for_comparison(po_number)}"


def group_candidates(
    candidates: Iterable[CandidateRecord],
    part_name_max: int = DEFAULT_LIMITS.part_name_max,
) -> list[GroupedRecord]:
    """Collapse candidates into one GroupedRecord per identity key."""
    buckets: dict[str, list[CandidateRecord]] = {}
    for candidate in candidates:
        key = identity_key(candidate.company_name, candidate.po_number)
        buckets.setdefault(key, []).append(candidate)

    grouped: list[GroupedRecord] = []
    for members in buckets.values():
        first = members[0]
        seen: set[str] = set()
        part_names: list[str] = []
        for member in members:
            norm = normalize_part_name(member.part_name)
            if norm and norm not in seen:
                seen.add(norm)
                part_names.append(member.part_name.strip())
        part_name = PART_NAME_SEPARATOR.join(part_names)[:part_name_max].rstrip(", ")
        grouped.append(
            GroupedRecord(
                company_name=first.company_name,
                po_number=first.po_number,
                part_name=part_name or first.part_name,
                quantity_total=sum(m.quantity_total for m in members),
                created_at=first.created_at,
                status=first.status,
                priority=first.priority,
            )
        )
    return grouped
