from __future__ import annotations

import re
from collections.abc import Iterable

from ..models.column_mapping import ColumnMapping
from ..models.fields import CanonicalField, RsvpStatus
from ..models.guest_record import CandidateRecord

"""Row transformer: raw CSV row + column mapping -> CandidateRecord.

Defaults:
- name / phone: '' when unmapped or empty
- amount: the raw mapped string, or the literal 1 when unmapped or empty
  (an unmapped amount is NOT an error)
- optional fields: passed through or None
"""

__all__ = [
    "DEFAULT_AMOUNT",
    "transform_row",
    "map_status_to_rsvp",
    "normalize_phone",
    "normalize_sentinels",
]

DEFAULT_AMOUNT = 1

_PHONE_FORMATTING_RE = re.compile(r"[\s\-().]")

_CONFIRMED = frozenset({"approved", "confirmed", "accept"})
_DECLINED = frozenset({"declined", "reject", "rejected"})


def normalize_phone(phone: str) -> str:
    """Strip formatting characters so phones compare equal across notations."""
    return _PHONE_FORMATTING_RE.sub("", phone)


def map_status_to_rsvp(status: str | None) -> str:
    """Map free-form CSV status text to an RSVP status (default pending)."""
    normalized = (status or "").strip().lower()
    if normalized in _CONFIRMED:
        return RsvpStatus.CONFIRMED.value
    if normalized in _DECLINED:
        return RsvpStatus.DECLINED.value
    return RsvpStatus.PENDING.value


def normalize_sentinels(values: Iterable[str] | None) -> frozenset[str]:
    if not values:
        return frozenset()
    return frozenset(v.strip().upper() for v in values if isinstance(v, str) and v.strip())


def _cell(row: list[str], index: int, null_sentinels: frozenset[str]) -> str | None:
    if index < 0 or index >= len(row):
        return None
    value = row[index].strip()
    if not value:
        return None
    # NULL サニタイズ
    if value.upper() in null_sentinels:
        return None
    return value


def transform_row(
    row: list[str],
    mapping: ColumnMapping,
    null_sentinels: Iterable[str] | None = None,
) -> CandidateRecord:
    """Project a raw row onto the candidate record shape."""
    sentinels = normalize_sentinels(null_sentinels)
    values: dict[CanonicalField, str | None] = {}
    for index, field in mapping.items():
        values[field] = _cell(row, index, sentinels)

    rsvp_status = None
    if CanonicalField.RSVP_STATUS in values:
        rsvp_status = map_status_to_rsvp(values[CanonicalField.RSVP_STATUS])

    return CandidateRecord(
        name=values.get(CanonicalField.NAME) or "",
        phone=values.get(CanonicalField.PHONE) or "",
        amount=values.get(CanonicalField.AMOUNT) or DEFAULT_AMOUNT,
        group=values.get(CanonicalField.GROUP),
        rsvp_status=rsvp_status,
        notes=values.get(CanonicalField.NOTES),
        dietary_restrictions=values.get(CanonicalField.DIETARY_RESTRICTIONS),
    )
