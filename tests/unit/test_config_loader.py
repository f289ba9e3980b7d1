from __future__ import annotations

from pathlib import Path

import pytest

from guest_import.config.loader import SCHEMA_PATH, ConfigError, load_config
from guest_import.models.fields import ImportFlow


def test_load_config_ok(write_config: Path):
    cfg = load_config(write_config)
    assert cfg.flow is ImportFlow.STORAGE
    assert cfg.table == "guests"
    assert cfg.page_size == 500
    assert cfg.event_id == "evt_1"
    assert cfg.null_sentinels == {"NULL", "N/A"}
    assert cfg.database.port == 5432
    assert cfg.database.dsn is None


def test_load_config_defaults(temp_workdir: Path):
    path = temp_workdir / "config" / "import.yml"
    path.write_text("", encoding="utf-8")
    cfg = load_config(path)
    assert cfg.flow is ImportFlow.STORAGE
    assert cfg.table == "guests"
    assert cfg.page_size == 1000
    assert cfg.event_id is None
    assert cfg.column_mapping == {}
    assert cfg.null_sentinels is None
    assert cfg.error_log_dir == "./logs"


def test_load_config_interactive_mapping(temp_workdir: Path):
    path = temp_workdir / "config" / "import.yml"
    path.write_text("flow: interactive\ncolumn_mapping:\n  name: 1\n  phone: 0\n  amount: 2\n", encoding="utf-8")
    cfg = load_config(path)
    assert cfg.flow is ImportFlow.INTERACTIVE
    assert cfg.column_mapping == {"name": 1, "phone": 0, "amount": 2}


def test_missing_config(temp_workdir: Path):
    with pytest.raises(ConfigError, match="config file not found"):
        load_config(temp_workdir / "config" / "missing.yml")


def test_invalid_yaml(temp_workdir: Path):
    path = temp_workdir / "config" / "import.yml"
    path.write_text("flow: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid yaml"):
        load_config(path)


@pytest.mark.parametrize(
    "body",
    [
        "flow: bulk\n",
        "page_size: 0\n",
        "unknown_key: 1\n",
        "table: 'guests; drop'\n",
        "column_mapping:\n  name: -1\n",
        "database:\n  port: 'abc'\n",
    ],
)
def test_schema_violations(temp_workdir: Path, body: str):
    path = temp_workdir / "config" / "import.yml"
    path.write_text(body, encoding="utf-8")
    with pytest.raises(ConfigError, match="config validation failed"):
        load_config(path)


def test_root_must_be_mapping(temp_workdir: Path):
    path = temp_workdir / "config" / "import.yml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(path)


def test_schema_ships_with_package():
    assert SCHEMA_PATH.exists()
