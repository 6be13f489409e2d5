from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the work-order ingestion engine.

The loader in workorder_ingest.config.loader builds these from YAML; the
engine itself only needs InputLimits and falls back to DEFAULT_LIMITS.
"""

__all__ = [
    "DEFAULT_COMPANY_NAME",
    "DEFAULT_LIMITS",
    "DatabaseConfig",
    "IngestConfig",
    "InputLimits",
]

DEFAULT_COMPANY_NAME = "Importación"


@dataclass(frozen=True)
class InputLimits:
    """Field bounds applied by the coercers and the row validator."""
    company_name_max: int = 200
    po_number_max: int = 100
    part_name_max: int = 300
    quantity_max: int = 999999


DEFAULT_LIMITS = InputLimits()


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection fallback used by the bulk-insert step.

    Environment variables (and .env) take precedence over these values.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None
    table: str = "work_orders"


@dataclass(frozen=True)
class IngestConfig:
    """Root configuration object for an ingestion run."""
    default_company_name: str = DEFAULT_COMPANY_NAME
    error_preview_limit: int = 10  # errors shown to the operator before "+N more"
    error_log_dir: str = "./logs"
    limits: InputLimits = field(default_factory=InputLimits)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
