# Shared pytest fixtures
from __future__ import annotations

import io
import logging
import tempfile
from collections.abc import Callable
from pathlib import Path

import pandas as pd
import pytest

from workorder_ingest.logging.init import APP_LOGGER_NAME, reset_logging


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture(autouse=True)
def clean_logging():
    # setup_logging binds its handler to the sys.stdout of the first call
    reset_logging()
    yield
    reset_logging()
    app_logger = logging.getLogger(APP_LOGGER_NAME)
    for handler in app_logger.handlers[:]:
        app_logger.removeHandler(handler)


@pytest.fixture()
def sample_config_yaml() -> str:
    return """default_company_name: Acme
error_preview_limit: 3
error_log_dir: ./logs
limits:
  part_name_max: 50
database:
  table: work_orders
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "ingest.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


def xlsx_bytes(rows: list[dict], columns: list[str] | None = None) -> bytes:
    """Build a one-sheet workbook in memory."""
    buf = io.BytesIO()
    df = pd.DataFrame(rows, columns=columns)
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name="Pedidos", index=False)
    return buf.getvalue()


def csv_bytes(text: str) -> bytes:
    return text.encode("utf-8")


@pytest.fixture()
def write_csv(temp_workdir: Path) -> Callable[[str, str], Path]:
    def _write(name: str, text: str) -> Path:
        path = temp_workdir / "data" / name
        path.write_bytes(csv_bytes(text))
        return path
    return _write


@pytest.fixture()
def write_xlsx(temp_workdir: Path) -> Callable[..., Path]:
    def _write(name: str, rows: list[dict], columns: list[str] | None = None) -> Path:
        path = temp_workdir / "data" / name
        path.write_bytes(xlsx_bytes(rows, columns))
        return path
    return _write


@pytest.fixture()
def xlsx_factory() -> Callable[..., bytes]:
    return xlsx_bytes
