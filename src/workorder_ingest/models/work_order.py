from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

"""Work-order record types produced by the ingestion pipeline.

DraftRecord  -> fully coerced row, not yet validated (fields carry a
                "used default" flag)
CandidateRecord -> validated line item; only exists when every field is valid
GroupedRecord   -> one record per identity key after reconciliation
"""

__all__ = [
    "CandidateRecord",
    "Coerced",
    "DraftRecord",
    "GroupedRecord",
    "Priority",
    "Status",
]

T = TypeVar("T")


class Status(Enum):
    """Closed set of production states."""
    SCHEDULED = "scheduled"
    PRODUCTION = "production"
    QUALITY = "quality"
    HOLD = "hold"


class Priority(Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass(frozen=True)
class Coerced(Generic[T]):
    """Best-effort coercion output.

    ``used_default`` is True when the source cell was absent or unusable and
    the documented default was substituted instead.
    """
    value: T
    used_default: bool = False


@dataclass(frozen=True)
class DraftRecord:
    row_number: int  # 1-based source row
    company_name: Coerced[str]
    po_number: Coerced[str]
    part_name: Coerced[str]
    quantity_total: Coerced[int]
    status: Coerced[Status]
    created_at: Coerced[str]
    priority: Priority = Priority.NORMAL


@dataclass(frozen=True)
class CandidateRecord:
    company_name: str
    po_number: str
    part_name: str
    quantity_total: int
    created_at: str  # ISO-8601 UTC, "Z" suffix
    status: Status = Status.SCHEDULED
    priority: Priority = Priority.NORMAL
    quantity_completed: int = 0  # fresh imports never carry progress


@dataclass(frozen=True)
class GroupedRecord:
    """Final output: one work order per company + PO identity key."""
    company_name: str
    po_number: str
    part_name: str  # distinct part names joined with ", "
    quantity_total: int  # exact sum across the group
    created_at: str
    status: Status = Status.SCHEDULED
    priority: Priority = Priority.NORMAL
    quantity_completed: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "company_name": self.company_name,
            "po_number": self.po_number,
            "part_name": self.part_name,
            "quantity_total": self.quantity_total,
            "quantity_completed": self.quantity_completed,
            "priority": self.priority.value,
            "status": self.status.value,
            "created_at": self.created_at,
        }
