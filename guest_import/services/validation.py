from __future__ import annotations

from collections.abc import Callable, Collection, Iterable, Mapping
from dataclasses import replace
from typing import Any

from pydantic import ValidationError

from ..models.column_mapping import ColumnMapping
from ..models.guest_record import CandidateRecord, GuestRecord, parse_amount
from ..models.validated_row import ValidatedRow
from .transform import DEFAULT_AMOUNT, normalize_phone, transform_row

"""Row validator.

Per-row order:
1. short row (fewer fields than the header) -> one error, nothing else checked
2. schema checks on the transformed candidate (GuestRecord, pydantic)
3. only when 2 passed: phone already stored for the event
4. only when 2 passed: phone seen earlier in the same file

validate_rows() owns the running set of phones seen so far. Every row's
normalized phone is added after the row is validated, valid or not, so a later
duplicate is still caught relative to an earlier invalid row.
"""

__all__ = [
    "MSG_PHONE_EXISTS",
    "MSG_PHONE_DUPLICATE",
    "parse_amount",
    "coerce_amount",
    "validate_candidate",
    "candidate_from_mapping",
    "as_candidate",
    "validate_row",
    "validate_rows",
]

MSG_PHONE_EXISTS = "Phone number already exists in your guest list"
MSG_PHONE_DUPLICATE = "Duplicate phone number in CSV file"


def coerce_amount(raw: Any) -> float:
    """Best-effort numeric amount for display: unparsable or zero -> 1."""
    return parse_amount(raw) or DEFAULT_AMOUNT


def validate_candidate(candidate: CandidateRecord) -> tuple[GuestRecord | None, list[str]]:
    """Schema validation: every failing field contributes one message."""
    try:
        record = GuestRecord(
            name=candidate.name,
            phone=candidate.phone,
            amount=candidate.amount,
            group=candidate.group,
            rsvp_status=candidate.rsvp_status,
            notes=candidate.notes,
            dietary_restrictions=candidate.dietary_restrictions,
        )
    except ValidationError as e:
        return None, [err["msg"] for err in e.errors()]
    return record, []


def _first(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return None


def candidate_from_mapping(data: Mapping[str, Any]) -> CandidateRecord:
    """Accept plain dicts (camelCase app keys or snake_case DB keys)."""
    amount = _first(data, "amount")
    return CandidateRecord(
        name=str(_first(data, "name") or "").strip(),
        phone=str(_first(data, "phone", "phone_number") or "").strip(),
        amount=DEFAULT_AMOUNT if amount is None else amount,
        group=_first(data, "group", "guestGroup", "guest_group"),
        rsvp_status=_first(data, "rsvpStatus", "rsvp_status"),
        notes=_first(data, "notes"),
        dietary_restrictions=_first(data, "dietaryRestrictions", "dietary_restrictions"),
    )


def as_candidate(record: GuestRecord | CandidateRecord | Mapping[str, Any]) -> CandidateRecord:
    if isinstance(record, CandidateRecord):
        return record
    if isinstance(record, GuestRecord):
        return CandidateRecord(
            name=record.name,
            phone=record.phone,
            amount=record.amount,
            group=record.group,
            rsvp_status=record.rsvp_status,
            notes=record.notes,
            dietary_restrictions=record.dietary_restrictions,
        )
    if isinstance(record, Mapping):
        return candidate_from_mapping(record)
    raise TypeError(f"unsupported guest record type: {type(record).__name__}")


def validate_row(
    row: list[str],
    row_index: int,
    mapping: ColumnMapping,
    existing_phones: Collection[str] | None = None,
    csv_phones_so_far: Collection[str] | None = None,
    *,
    expected_columns: int | None = None,
    null_sentinels: Iterable[str] | None = None,
) -> ValidatedRow:
    """Validate one data row. Does not modify either phone collection."""
    candidate = transform_row(row, mapping, null_sentinels)
    fallback = replace(candidate, amount=coerce_amount(candidate.amount))

    if expected_columns is not None and len(row) < expected_columns:
        return ValidatedRow(
            row_index=row_index,
            original_row=row,
            data=fallback,
            is_valid=False,
            errors=[f"Insufficient columns. Expected {expected_columns}, found {len(row)}"],
        )

    record, errors = validate_candidate(candidate)

    if record is not None and not errors:
        phone_key = normalize_phone(candidate.phone)
        if existing_phones is not None and phone_key in existing_phones:
            errors.append(MSG_PHONE_EXISTS)
        if csv_phones_so_far is not None and phone_key in csv_phones_so_far:
            errors.append(MSG_PHONE_DUPLICATE)

    return ValidatedRow(
        row_index=row_index,
        original_row=row,
        data=record if record is not None else fallback,
        is_valid=not errors,
        errors=errors,
    )


def validate_rows(
    rows: list[list[str]],
    mapping: ColumnMapping,
    existing_phones: Collection[str] | None = None,
    *,
    expected_columns: int | None = None,
    null_sentinels: Iterable[str] | None = None,
    on_row: Callable[[ValidatedRow], None] | None = None,
) -> list[ValidatedRow]:
    """Validate every row in file order, threading the seen-phones accumulator."""
    seen_phones: set[str] = set()
    results: list[ValidatedRow] = []

    for index, row in enumerate(rows):
        validated = validate_row(
            row,
            index,
            mapping,
            existing_phones,
            seen_phones,
            expected_columns=expected_columns,
            null_sentinels=null_sentinels,
        )
        # 無効行でも電話番号は記録 (後続の重複検出用)
        phone = transform_row(row, mapping, null_sentinels).phone
        if phone:
            seen_phones.add(normalize_phone(phone))

        results.append(validated)
        if on_row is not None:
            on_row(validated)

    return results
