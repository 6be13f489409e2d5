from __future__ import annotations

import json

import jsonschema
import pytest
import yaml
from jsonschema.exceptions import ValidationError

from workorder_ingest.config.loader import SCHEMA_PATH

"""Config schema contract (bundled config_schema.json)."""


@pytest.fixture()
def schema() -> dict:
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


def test_config_schema_valid_example(schema, sample_config_yaml):
    jsonschema.validate(yaml.safe_load(sample_config_yaml), schema)


def test_config_schema_empty_is_valid(schema):
    jsonschema.validate({}, schema)


def test_config_schema_full_example(schema):
    config = {
        "default_company_name": "Importación",
        "error_preview_limit": 10,
        "error_log_dir": "./logs",
        "limits": {
            "company_name_max": 200,
            "po_number_max": 100,
            "part_name_max": 300,
            "quantity_max": 999999,
        },
        "database": {
            "table": "public.work_orders",
            "dsn": "postgresql://app@localhost/app",
            "host": None,
            "port": None,
        },
    }
    jsonschema.validate(config, schema)


def test_config_schema_rejects_extra_key(schema):
    with pytest.raises(ValidationError):
        jsonschema.validate({"source_directory": "./data"}, schema)


def test_config_schema_rejects_unknown_limit(schema):
    with pytest.raises(ValidationError):
        jsonschema.validate({"limits": {"row_max": 10}}, schema)


def test_config_schema_rejects_bad_types(schema):
    with pytest.raises(ValidationError):
        jsonschema.validate({"database": {"port": "5432"}}, schema)
