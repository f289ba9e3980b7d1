from __future__ import annotations

from pathlib import Path

import pytest

from guest_import.csvfile.reader import (
    CsvStructureError,
    MissingColumnsError,
    decode_content,
    load_guest_csv,
    read_csv_file,
)


def test_decode_content_strips_bom():
    assert decode_content(b"\xef\xbb\xbfname,phone") == "name,phone"
    assert decode_content("\ufeffname") == "name"
    assert decode_content("name") == "name"


def test_load_empty_file():
    with pytest.raises(CsvStructureError, match="CSV file is empty"):
        load_guest_csv("   \n\n")


def test_load_missing_required_columns():
    with pytest.raises(MissingColumnsError) as exc:
        load_guest_csv("name,amount\nJane,2\n")
    assert str(exc.value) == "Missing required columns: phone_number"
    assert exc.value.missing == ["phone_number"]


def test_missing_columns_checked_before_rows():
    with pytest.raises(MissingColumnsError):
        load_guest_csv("notes\n")


def test_load_header_only():
    with pytest.raises(CsvStructureError, match="at least one data row"):
        load_guest_csv("name,phone_number,amount\n\n")


def test_load_skips_header_check_when_not_required():
    parsed = load_guest_csv("Full Name,Mobile\nJane,55555\n", require_headers=False)
    assert parsed.headers == ["Full Name", "Mobile"]
    assert parsed.rows == [["Jane", "55555"]]


def test_load_bytes_with_bom():
    parsed = load_guest_csv(b"\xef\xbb\xbfname,phone_number,amount\nJane,55555,1\n")
    assert parsed.headers[0] == "name"


def test_read_csv_file_missing(temp_workdir: Path):
    with pytest.raises(CsvStructureError, match="Failed to read CSV file"):
        read_csv_file(temp_workdir / "nope.csv")


def test_read_csv_file(write_csv):
    path = write_csv("name,phone_number,amount\nJane,55555,1\n")
    assert read_csv_file(path).startswith("name,")
