from __future__ import annotations

import json
from pathlib import Path

import pytest

from guest_import.models import (
    CanonicalField,
    ErrorRecord,
    GuestRecord,
    ImportResult,
    ImportRun,
    ImportStatus,
    ParsedFile,
    RowError,
    ValidatedRow,
)
from guest_import.models.import_run import InvalidTransitionError


def test_canonical_field_parse():
    assert CanonicalField.parse("rsvpstatus") is CanonicalField.RSVP_STATUS
    assert CanonicalField.parse("DIETARY_RESTRICTIONS") is CanonicalField.DIETARY_RESTRICTIONS
    assert CanonicalField.NAME.required
    assert not CanonicalField.NOTES.required
    with pytest.raises(ValueError):
        CanonicalField.parse("email")


def test_guest_record_db_row_floors_amount():
    row = GuestRecord(name="A", phone="55555", amount=3.99, notes="", dietary_restrictions="vegan").to_db_row("e1")
    assert row == {
        "event_id": "e1",
        "name": "A",
        "phone_number": "55555",
        "guest_group": None,
        "rsvp_status": "pending",
        "amount": 3,
        "dietary_restrictions": "vegan",
        "notes": None,
    }


def test_parsed_file_is_frozen():
    parsed = ParsedFile(headers=["a"], rows=[])
    with pytest.raises(AttributeError):
        parsed.separator = ";"  # type: ignore[misc]


def test_validated_row_number():
    row = ValidatedRow(row_index=0, original_row=[], data=GuestRecord(name="A", phone="55555"), is_valid=True, errors=[])
    assert row.row_number == 2


def test_import_result_to_dict_failure():
    result = ImportResult.failure("No valid guests found in CSV file", [RowError(2, "bad")], failed_count=1)
    assert result.to_dict() == {
        "success": False,
        "message": "No valid guests found in CSV file",
        "failedCount": 1,
        "errors": [{"row": 2, "message": "bad"}],
    }
    assert result.summary.imported_count == 0


def test_import_run_happy_path():
    run = ImportRun.for_path(Path("data/guests.csv"), "evt")
    assert run.source == "guests.csv"
    run.advance(ImportStatus.PARSING)
    run.advance(ImportStatus.VALIDATING)
    run.advance(ImportStatus.WRITING)
    run.finish(ImportResult(success=True, message="ok", imported_count=1))
    assert run.status is ImportStatus.SUCCEEDED
    assert run.history == [ImportStatus.IDLE, ImportStatus.PARSING, ImportStatus.VALIDATING, ImportStatus.WRITING]
    assert run.elapsed_seconds >= 0
    assert run.end_time is not None


@pytest.mark.parametrize(
    "path",
    [
        [ImportStatus.WRITING],
        [ImportStatus.PARSING, ImportStatus.SUCCEEDED],
        [ImportStatus.PARSING, ImportStatus.FAILED, ImportStatus.PARSING],
    ],
)
def test_import_run_rejects_illegal_transitions(path):
    run = ImportRun(source="x.csv", event_id="evt")
    with pytest.raises(InvalidTransitionError):
        for status in path:
            run.advance(status)


def test_import_run_validating_may_fail():
    run = ImportRun(source="x.csv", event_id="evt")
    run.advance(ImportStatus.PARSING)
    run.advance(ImportStatus.VALIDATING)
    run.finish(ImportResult.failure("No valid guests found in CSV file"))
    assert run.status is ImportStatus.FAILED
    assert run.status.terminal


def test_error_record_json_line():
    rec = ErrorRecord.create("guests.csv", 3, "ROW_VALIDATION_ERROR", "Duplicate phone number in CSV file")
    data = json.loads(rec.to_json_line())
    assert set(data) == {"timestamp", "file", "row", "error_type", "message"}
    assert data["timestamp"].endswith("Z")
    assert data["row"] == 3
