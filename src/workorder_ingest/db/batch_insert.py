from __future__ import annotations

import re
import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from psycopg2.extras import execute_values

from ..models.work_order import GroupedRecord
from ..services.grouping import identity_key

"""Bulk insert of grouped work orders (persistence boundary).

The engine's output may still contain orders that already exist in the
database; fetch_existing_keys / filter_new_records drop those using the same
identity key the grouping step uses, then insert_work_orders writes the rest
with psycopg2.extras.execute_values.
"""

__all__ = [
    "WORK_ORDER_COLUMNS",
    "BatchInsertError",
    "BatchMetrics",
    "InsertResult",
    "fetch_existing_keys",
    "filter_new_records",
    "insert_work_orders",
]

WORK_ORDER_COLUMNS: tuple[str, ...] = (
    "company_name",
    "po_number",
    "part_name",
    "quantity_total",
    "quantity_completed",
    "priority",
    "status",
    "created_at",
)

_TABLE_RX = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")


class BatchInsertError(Exception):
    pass


@dataclass(frozen=True)
class BatchMetrics:
    """Timing for a single execute_values call."""
    batch_size: int
    elapsed_seconds: float


@dataclass(frozen=True)
class InsertResult:
    inserted_rows: int
    skipped_existing: int = 0


def _checked_table(table: str) -> str:
    if not _TABLE_RX.match(table):
        raise BatchInsertError(f"invalid table name: {table!r}")
    return table


def fetch_existing_keys(cursor: Any, table: str = "work_orders") -> set[str]:
    """Identity keys of the orders already stored in ``table``."""
    table = _checked_table(table)
    try:
        cursor.execute(f"SELECT company_name, po_number FROM {table}")
        rows = cursor.fetchall()
    except Exception as e:
        raise BatchInsertError(f"failed reading existing orders: {e}") from e
    return {identity_key(company, po) for company, po in rows}


def filter_new_records(records: Iterable[GroupedRecord], existing_keys: set[str]) -> list[GroupedRecord]:
    return [r for r in records if identity_key(r.company_name, r.po_number) not in existing_keys]


def _record_values(record: GroupedRecord) -> tuple[Any, ...]:
    values = record.to_dict()
    return tuple(values[c] for c in WORK_ORDER_COLUMNS)


def insert_work_orders(
    cursor: Any,
    records: Sequence[GroupedRecord],
    table: str = "work_orders",
    page_size: int = 1000,
    metrics_callback: Callable[[BatchMetrics], None] | None = None,
) -> InsertResult:
    """INSERT ``records`` into ``table`` in pages of ``page_size``.

    metrics_callback receives one BatchMetrics per call; it is not invoked when
    there is nothing to insert.
    """
    table = _checked_table(table)
    rows = [_record_values(r) for r in records]
    if not rows:
        return InsertResult(inserted_rows=0)

    cols_sql = ",".join(f'"{c}"' for c in WORK_ORDER_COLUMNS)
    sql = f"INSERT INTO {table} ({cols_sql}) VALUES %s"

    start = time.perf_counter()
    try:
        execute_values(cursor, sql, rows, page_size=page_size)
    except Exception as e:
        raise BatchInsertError(str(e)) from e
    finally:
        if metrics_callback is not None:
            metrics_callback(BatchMetrics(batch_size=len(rows), elapsed_seconds=time.perf_counter() - start))

    return InsertResult(inserted_rows=len(rows))
