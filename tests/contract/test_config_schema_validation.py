from __future__ import annotations

import json

import jsonschema

from guest_import.config.loader import SCHEMA_PATH


def test_schema_is_valid_draft_2020_12():
    schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
    jsonschema.Draft202012Validator.check_schema(schema)
    assert schema["additionalProperties"] is False


def test_sample_config_validates(sample_config_yaml: str):
    import yaml

    schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
    jsonschema.validate(yaml.safe_load(sample_config_yaml), schema)
