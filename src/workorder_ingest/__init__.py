"""Bulk tabular ingestion of purchase-order files into grouped work orders.

Typical use::

    from workorder_ingest import process

    records, errors = process(data, "orders.xlsx", "Acme")
"""

from .models import BatchResult, GroupedRecord, Priority, Status, ValidationError
from .services.orchestrator import ProcessingError, process, process_files, process_path
from .tabular import FormatError, TableFormat, detect_format

__version__ = "0.1.0"

__all__ = [
    "BatchResult",
    "FormatError",
    "GroupedRecord",
    "Priority",
    "ProcessingError",
    "Status",
    "TableFormat",
    "ValidationError",
    "detect_format",
    "process",
    "process_files",
    "process_path",
]
