from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic_core import PydanticCustomError

from .fields import RsvpStatus

"""Guest record models.

CandidateRecord is the per-row projection before validation (raw strings,
amount possibly still a string). GuestRecord is the validated shape handed
to the storage collaborator; constructing one runs the guest schema and
raises pydantic.ValidationError with one error per failing field.

Phone rule (single canonical rule for both import flows):
- required
- only ASCII digits, spaces, '-', '.', parentheses and an optional leading '+'
- at least 5 digits
- at most 20 characters
"""

__all__ = [
    "CandidateRecord",
    "GuestRecord",
    "DB_COLUMNS",
    "NAME_MAX_LENGTH",
    "PHONE_MAX_LENGTH",
    "MIN_PHONE_DIGITS",
    "MIN_AMOUNT",
    "parse_amount",
]

# INSERT 対象列 (guests テーブル)
DB_COLUMNS: tuple[str, ...] = (
    "event_id",
    "name",
    "phone_number",
    "guest_group",
    "rsvp_status",
    "amount",
    "dietary_restrictions",
    "notes",
)

NAME_MAX_LENGTH = 100
PHONE_MAX_LENGTH = 20
MIN_PHONE_DIGITS = 5
MIN_AMOUNT = 1

MSG_NAME_REQUIRED = "Name is required and cannot be empty"
MSG_NAME_TOO_LONG = f"Name must be less than {NAME_MAX_LENGTH} characters"
MSG_PHONE_REQUIRED = "Phone number is required and cannot be empty"
MSG_PHONE_FORMAT = "Invalid phone format (use digits, spaces, +, -, or parentheses)"
MSG_PHONE_INVALID = "Phone number appears to be invalid"
MSG_PHONE_TOO_LONG = "Phone number is too long"
MSG_AMOUNT_REQUIRED = "Amount is required and cannot be empty"
MSG_RSVP_STATUS = "RSVP status must be pending, confirmed, or declined"

# ASCII only: \d would also accept fullwidth / Arabic-Indic digits
_PHONE_RE = re.compile(r"^\+?[\d\s\-().]+$", re.ASCII)
_ASCII_DIGITS = frozenset("0123456789")
_NUMBER_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$", re.ASCII)
_RSVP_VALUES = frozenset(s.value for s in RsvpStatus)


def _format_number(value: float) -> str:
    if value == int(value):
        return str(int(value))
    return str(value)


def parse_amount(raw: Any) -> float | None:
    """Parse an amount cell; None when it is not a finite plain decimal number."""
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    elif isinstance(raw, str):
        text = raw.strip()
        if not _NUMBER_RE.match(text):
            return None
        value = float(text)
    else:
        return None
    return value if math.isfinite(value) else None


@dataclass(frozen=True)
class CandidateRecord:
    """Raw values keyed by canonical field, before validation."""
    name: str = ""
    phone: str = ""
    amount: str | float = 1  # mapped raw string, or literal 1 when unmapped/empty
    group: str | None = None
    rsvp_status: str | None = None
    notes: str | None = None
    dietary_restrictions: str | None = None


class GuestRecord(BaseModel):
    """A guest that passed schema validation.

    amount may carry decimals; it is floored when converted to a DB row.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    phone: str
    amount: float = 1.0
    group: Optional[str] = None
    rsvp_status: Optional[str] = None
    notes: Optional[str] = None
    dietary_restrictions: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise PydanticCustomError("name_required", MSG_NAME_REQUIRED)
        if len(v) > NAME_MAX_LENGTH:
            raise PydanticCustomError("name_too_long", MSG_NAME_TOO_LONG)
        return v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        if not v.strip():
            raise PydanticCustomError("phone_required", MSG_PHONE_REQUIRED)
        if not _PHONE_RE.match(v):
            raise PydanticCustomError("phone_format", MSG_PHONE_FORMAT)
        if sum(1 for ch in v if ch in _ASCII_DIGITS) < MIN_PHONE_DIGITS:
            raise PydanticCustomError("phone_invalid", MSG_PHONE_INVALID)
        if len(v) > PHONE_MAX_LENGTH:
            raise PydanticCustomError("phone_too_long", MSG_PHONE_TOO_LONG)
        return v

    @field_validator("amount", mode="before")
    @classmethod
    def validate_amount(cls, v: Any) -> float:
        if isinstance(v, str) and not v.strip():
            raise PydanticCustomError("amount_required", MSG_AMOUNT_REQUIRED)
        value = parse_amount(v)
        if value is None:
            raise PydanticCustomError(
                "amount_not_number",
                'Amount must be a valid number, got: "{raw}"',
                {"raw": str(v)},
            )
        if value < MIN_AMOUNT:
            raise PydanticCustomError(
                "amount_too_small",
                "Amount must be at least {minimum}, got: {got}",
                {"minimum": MIN_AMOUNT, "got": _format_number(value)},
            )
        return value

    @field_validator("rsvp_status")
    @classmethod
    def validate_rsvp_status(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in _RSVP_VALUES:
            raise PydanticCustomError("rsvp_status", MSG_RSVP_STATUS)
        return v

    def to_db_row(self, event_id: str) -> dict[str, Any]:
        return {
            "event_id": event_id,
            "name": self.name,
            "phone_number": self.phone,
            "guest_group": self.group,
            "rsvp_status": self.rsvp_status or RsvpStatus.PENDING.value,
            "amount": int(math.floor(self.amount)),
            "dietary_restrictions": self.dietary_restrictions or None,
            "notes": self.notes or None,
        }

    def to_db_values(self, event_id: str) -> list[Any]:
        row = self.to_db_row(event_id)
        return [row[c] for c in DB_COLUMNS]
