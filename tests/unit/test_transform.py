from __future__ import annotations

import pytest

from guest_import.models.column_mapping import ColumnMapping
from guest_import.models.fields import CanonicalField
from guest_import.services.transform import map_status_to_rsvp, normalize_phone, transform_row

FULL = ColumnMapping({
    0: CanonicalField.NAME,
    1: CanonicalField.PHONE,
    2: CanonicalField.AMOUNT,
    3: CanonicalField.GROUP,
    4: CanonicalField.RSVP_STATUS,
    5: CanonicalField.NOTES,
    6: CanonicalField.DIETARY_RESTRICTIONS,
})


def test_transform_full_row():
    rec = transform_row([" Jane ", "555-0000", "3", "Family", "Approved", "vip", "vegan"], FULL)
    assert rec.name == "Jane"
    assert rec.phone == "555-0000"
    assert rec.amount == "3"
    assert rec.group == "Family"
    assert rec.rsvp_status == "confirmed"
    assert rec.notes == "vip"
    assert rec.dietary_restrictions == "vegan"


def test_transform_defaults_for_unmapped_fields():
    mapping = ColumnMapping({0: CanonicalField.NAME})
    rec = transform_row(["Jane"], mapping)
    assert rec.phone == ""
    assert rec.amount == 1
    assert rec.group is None
    assert rec.rsvp_status is None


def test_transform_out_of_range_and_empty_cells():
    rec = transform_row(["Jane", "", ""], FULL)
    assert rec.phone == ""
    assert rec.amount == 1
    assert rec.notes is None
    # status column mapped but missing -> pending
    assert rec.rsvp_status == "pending"


def test_transform_null_sentinels():
    rec = transform_row(["Jane", "55555", "n/a", "NULL"], FULL, null_sentinels=["NULL", "N/A"])
    assert rec.amount == 1
    assert rec.group is None


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("approved", "confirmed"),
        ("CONFIRMED", "confirmed"),
        ("Accept", "confirmed"),
        ("declined", "declined"),
        ("reject", "declined"),
        ("Rejected", "declined"),
        ("maybe", "pending"),
        ("", "pending"),
        (None, "pending"),
    ],
)
def test_map_status_to_rsvp(raw, expected):
    assert map_status_to_rsvp(raw) == expected


def test_normalize_phone():
    assert normalize_phone("+1 (555) 123-45.67") == "+15551234567"
