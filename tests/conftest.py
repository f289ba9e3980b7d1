# Shared pytest fixtures
from __future__ import annotations

import sys
import tempfile
from collections.abc import Sequence
from pathlib import Path

import pytest

import guest_import.db.batch_insert  # noqa: F401
from guest_import.db.guest_store import GuestStoreError
from guest_import.logging.init import reset_logging
from guest_import.models.guest_record import GuestRecord


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
def _reset_logging_state():
    # handler は作成時の sys.stdout を掴むのでテスト毎に作り直す
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def sample_config_yaml() -> str:
    return """flow: storage
table: guests
page_size: 500
event_id: evt_1
null_sentinels: ["NULL", "N/A"]
error_log_dir: ./logs
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def write_csv(temp_workdir: Path):
    def _write(text: str, name: str = "guests.csv") -> Path:
        path = temp_workdir / "data" / name
        path.write_text(text, encoding="utf-8")
        return path
    return _write


@pytest.fixture()
def valid_csv_text() -> str:
    return (
        "name,phone_number,amount,guest_group,status\n"
        "Jane Doe,+1-555-0000,2,Family,approved\n"
        "John Roe,(555) 123-4567,1,Friends,\n"
    )


class RecordingStore:
    """GuestStore stub that records every call."""

    def __init__(self, existing: set[str] | None = None, fail_with: str | None = None) -> None:
        self.existing = set(existing or ())
        self.fail_with = fail_with
        self.fetch_calls: list[str] = []
        self.insert_calls: list[tuple[str, list[GuestRecord]]] = []
        self.stored: list[GuestRecord] = []

    def fetch_existing_phones(self, event_id: str) -> set[str]:
        self.fetch_calls.append(event_id)
        return set(self.existing)

    def insert_guests(self, event_id: str, records: Sequence[GuestRecord]) -> int:
        self.insert_calls.append((event_id, list(records)))
        if self.fail_with is not None:
            raise GuestStoreError(self.fail_with)
        self.stored.extend(records)
        return len(records)


@pytest.fixture()
def recording_store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture()
def make_store():
    return RecordingStore


class DummyCursor:
    """Minimal psycopg2 cursor double: records SQL, returns canned rows."""

    def __init__(self, fetched: list[tuple] | None = None, fail_on: str | None = None) -> None:
        self.queries: list[str] = []
        self.params: list[tuple | None] = []
        self.fetched = fetched or []
        self.fail_on = fail_on

    def execute(self, sql: str, params: tuple | None = None) -> None:
        self.queries.append(sql)
        self.params.append(params)
        if self.fail_on is not None and sql.startswith(self.fail_on):
            raise RuntimeError(f"boom on {self.fail_on}")

    def fetchall(self) -> list[tuple]:
        return self.fetched


@pytest.fixture()
def dummy_cursor() -> DummyCursor:
    return DummyCursor()


@pytest.fixture()
def make_cursor():
    return DummyCursor


@pytest.fixture()
def patch_execute_values(monkeypatch):
    """Replace psycopg2's execute_values; calls are appended to the returned list."""
    bi = sys.modules["guest_import.db.batch_insert"]

    calls: list[dict] = []

    def fake_execute_values(cursor, sql, rows, page_size=1000, template=None):
        cursor.queries.append(sql)
        calls.append({"sql": sql, "rows": list(rows), "page_size": page_size})

    monkeypatch.setattr(bi, "execute_values", fake_execute_values)
    return calls
