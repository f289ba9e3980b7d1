from __future__ import annotations

from enum import Enum

"""Canonical guest fields and import flow enums.

A CSV column can be mapped to exactly one canonical field. Required fields
must all be mapped before rows are transformed; optional fields pass through
when present.
"""

__all__ = [
    "CanonicalField",
    "ImportFlow",
    "RsvpStatus",
    "REQUIRED_FIELDS",
    "OPTIONAL_FIELDS",
]


class CanonicalField(Enum):
    """Guest attributes a CSV column can be mapped to."""
    NAME = "name"
    PHONE = "phone"
    AMOUNT = "amount"
    GROUP = "group"
    RSVP_STATUS = "rsvpStatus"
    NOTES = "notes"
    DIETARY_RESTRICTIONS = "dietaryRestrictions"

    @property
    def required(self) -> bool:
        return self in REQUIRED_FIELDS

    @classmethod
    def parse(cls, value: str) -> CanonicalField:
        """Resolve a field from its value or enum name (case-insensitive).

        Raises:
            ValueError: if no canonical field matches
        """
        key = value.strip()
        for field in cls:
            if key == field.value or key.lower() == field.value.lower() or key.upper() == field.name:
                return field
        raise ValueError(f"unknown field: {value!r}")


REQUIRED_FIELDS: tuple[CanonicalField, ...] = (
    CanonicalField.NAME,
    CanonicalField.PHONE,
    CanonicalField.AMOUNT,
)

OPTIONAL_FIELDS: tuple[CanonicalField, ...] = (
    CanonicalField.GROUP,
    CanonicalField.RSVP_STATUS,
    CanonicalField.NOTES,
    CanonicalField.DIETARY_RESTRICTIONS,
)


class ImportFlow(Enum):
    """Which import pipeline variant is running.

    - STORAGE: headers are normalized and auto-mapped, including rsvp status
    - INTERACTIVE: caller supplies the column mapping; status is never auto-mapped
    """
    STORAGE = "storage"
    INTERACTIVE = "interactive"

    @property
    def auto_maps_status(self) -> bool:
        return self is ImportFlow.STORAGE


class RsvpStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    DECLINED = "declined"
