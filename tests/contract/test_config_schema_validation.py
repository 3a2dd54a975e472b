from __future__ import annotations

import json

import jsonschema
import pytest
import yaml
from jsonschema.exceptions import ValidationError

from census_diff.config.loader import SCHEMA_PATH

"""Config schema contract test."""


def _schema() -> dict:
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


def test_config_schema_valid_example():
    config = {
        "extraction": {
            "validity_threshold": 0.7,
            "sample_rows": 5,
            "header_scan_rows": 10,
            "fuzzy_threshold": 0.5,
            "default_fill": "Unknown",
            "keep_na_strings": True,
        },
        "export": {
            "directory": "./reports",
            "filename_template": "variance_analysis_{date}.xlsx",
            "sheet_name": "Variance Analysis",
        },
        "log_directory": "./logs",
    }
    jsonschema.validate(config, _schema())


def test_config_schema_empty_is_valid():
    jsonschema.validate({}, _schema())


def test_sample_config_yaml_is_valid(sample_config_yaml: str):
    jsonschema.validate(yaml.safe_load(sample_config_yaml), _schema())


@pytest.mark.parametrize(
    "config",
    [
        {"database": {"host": "localhost"}},
        {"extraction": {"validity_threshold": -0.1}},
        {"extraction": {"sample_rows": 1.5}},
        {"extraction": {"keep_na_strings": "yes"}},
        {"export": {"sheet_name": "x" * 32}},
        {"export": {"directory": ""}},
    ],
)
def test_config_schema_rejects(config):
    with pytest.raises(ValidationError):
        jsonschema.validate(config, _schema())
