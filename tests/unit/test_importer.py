from __future__ import annotations

from unittest.mock import MagicMock

from guest_import.models.guest_record import CandidateRecord, GuestRecord
from guest_import.services.importer import import_guests


def test_import_no_records(recording_store):
    result = import_guests("evt", [], recording_store)
    assert not result.success
    assert result.message == "No guests to import"
    assert recording_store.insert_calls == []


def test_import_all_invalid(recording_store):
    result = import_guests(
        "evt",
        [CandidateRecord(name="", phone="55555"), {"name": "B", "phone": "12"}],
        recording_store,
    )
    assert not result.success
    assert result.message == "No valid guests to import"
    assert result.failed_count == 2
    assert [(e.row, e.message) for e in result.errors] == [
        (2, "Name is required and cannot be empty"),
        (3, "Phone number appears to be invalid"),
    ]
    assert recording_store.insert_calls == []


def test_import_partial(recording_store):
    records = [
        GuestRecord(name="A", phone="55555", amount=2),
        {"name": "", "phone": "66666"},
        {"name": "C", "phone": "77777", "amount": "3.9"},
    ]
    result = import_guests("evt", records, recording_store)
    assert result.success
    assert result.message == "Successfully imported 2 guests"
    assert result.imported_count == 2
    assert result.failed_count == 1
    assert result.errors[0].row == 3
    event_id, written = recording_store.insert_calls[0]
    assert event_id == "evt"
    assert [g.name for g in written] == ["A", "C"]


def test_import_single_guest_message(recording_store):
    result = import_guests("evt", [GuestRecord(name="A", phone="55555")], recording_store)
    assert result.message == "Successfully imported 1 guest"
    assert result.to_dict() == {
        "success": True,
        "message": "Successfully imported 1 guest",
        "importedCount": 1,
        "failedCount": 0,
    }


def test_import_store_failure_keeps_nothing(make_store):
    store = make_store(fail_with="connection reset")
    result = import_guests("evt", [GuestRecord(name="A", phone="55555")], store)
    assert not result.success
    assert result.message == "Database error: connection reset"
    assert result.imported_count is None
    assert store.stored == []
    assert len(store.insert_calls) == 1


def test_import_unexpected_error_never_raises():
    store = MagicMock()
    store.insert_guests.side_effect = RuntimeError("kaboom")
    result = import_guests("evt", [GuestRecord(name="A", phone="55555")], store)
    assert not result.success
    assert result.message == "Failed to import guests: kaboom"


def test_import_reports_first_message_per_record(recording_store):
    result = import_guests("evt", [{"name": "", "phone": "12", "amount": "0"}], recording_store)
    assert not result.success
    assert [(e.row, e.message) for e in result.errors] == [
        (2, "Name is required and cannot be empty"),
    ]
