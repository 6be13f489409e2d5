from __future__ import annotations

import argparse
import dataclasses
import json
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import psycopg2
from dotenv import load_dotenv

from workorder_ingest.config.loader import ConfigError, load_config
from workorder_ingest.logging.init import log_summary, set_debug, setup_logging
from workorder_ingest.models.config_models import DatabaseConfig
from workorder_ingest.models.processing_result import RunResult
from workorder_ingest.services.orchestrator import ProcessingError, process_files
from workorder_ingest.services.summary import render_summary_line

"""CLI entrypoint.

- Load config (config/ingest.yml when present, or --config)
- Process every given .xlsx / .xls / .csv file
- Optionally write the records + errors as JSON and/or bulk insert them
- Print the SUMMARY line; exit code tells success / partial failure / fatal
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2


def _resolve_dsn(db_cfg: DatabaseConfig) -> str:
    """Connection string: DATABASE_URL / PGDSN, then PG* variables, then config."""
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


@contextmanager
def _db_connection(db_cfg: DatabaseConfig) -> Iterator[Any]:  # pragma: no cover (needs a live database)
    conn = psycopg2.connect(_resolve_dsn(db_cfg))
    conn.autocommit = False  # orchestrator commits / rolls back per file
    try:
        with conn.cursor() as cur:
            yield cur
    finally:
        conn.close()


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="workorder-ingest",
        description="Bulk work-order ingestion from Excel / CSV purchase-order files",
    )
    p.add_argument("files", nargs="+", type=Path, help=".xlsx, .xls or .csv files")
    p.add_argument("--company", help="Default company name for rows without one")
    p.add_argument("--config", type=Path, help="YAML config (default: config/ingest.yml if present)")
    p.add_argument("--output", type=Path, help="Write grouped records and errors as JSON")
    p.add_argument("--insert", action="store_true", help="Bulk insert new orders into the database")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _write_output(path: Path, result: RunResult) -> None:
    payload = {
        "records": [r.to_dict() for r in result.records],
        "errors": [
            {"file": file_name, "row": e.row, "message": e.message}
            for file_name, errors in result.errors.items()
            for e in errors
        ],
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None only: an explicit [] must not pick up pytest's own argv
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    load_dotenv(dotenv_path=Path(".env"), override=True)

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL
    if args.company is not None:
        cfg = dataclasses.replace(cfg, default_company_name=args.company)

    try:
        if args.insert:
            with _db_connection(cfg.database) as cur:
                result = process_files(args.files, cfg, cursor=cur)
        else:
            result = process_files(args.files, cfg)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL
    except psycopg2.Error as e:
        logger.error(f"database: {e}")
        return EXIT_FATAL

    if args.output is not None:
        _write_output(args.output, result)
        logger.info(f"records written to {args.output}")

    summary_line = render_summary_line(result)
    log_summary(summary_line.removeprefix("SUMMARY "))

    if result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
