from __future__ import annotations

import re

from ..models.fields import CanonicalField, ImportFlow

"""Header normalization.

normalize_header() canonicalizes case, whitespace and known synonyms so that
"Phone Number", "phoneNumber" and "phone" all become "phone_number". It is
idempotent: normalize_header(normalize_header(x)) == normalize_header(x).
"""

__all__ = [
    "REQUIRED_HEADERS",
    "normalize_header",
    "missing_required_headers",
    "field_for_header",
]

REQUIRED_HEADERS: tuple[str, ...] = ("name", "phone_number", "amount")

_WHITESPACE_RE = re.compile(r"\s+")

# normalized spelling -> canonical header
_SYNONYMS: dict[str, str] = {
    "phone": "phone_number",
    "phonenumber": "phone_number",
    "phone_number": "phone_number",
    "status": "status",
    "rsvpstatus": "status",
    "rsvp_status": "status",
    "group": "guest_group",
    "guestgroup": "guest_group",
    "guest_group": "guest_group",
    "dietary": "dietary_restrictions",
    "dietaryrestrictions": "dietary_restrictions",
    "dietary_restrictions": "dietary_restrictions",
}

_HEADER_FIELDS: dict[str, CanonicalField] = {
    "name": CanonicalField.NAME,
    "phone_number": CanonicalField.PHONE,
    "amount": CanonicalField.AMOUNT,
    "guest_group": CanonicalField.GROUP,
    "status": CanonicalField.RSVP_STATUS,
    "notes": CanonicalField.NOTES,
    "dietary_restrictions": CanonicalField.DIETARY_RESTRICTIONS,
}


def normalize_header(raw: str) -> str:
    normalized = _WHITESPACE_RE.sub("_", raw.strip().lower())
    return _SYNONYMS.get(normalized, normalized)


def missing_required_headers(headers: list[str]) -> list[str]:
    """Required header names absent after normalization, in canonical order."""
    present = {normalize_header(h) for h in headers if h}
    return [h for h in REQUIRED_HEADERS if h not in present]


def field_for_header(header: str, flow: ImportFlow = ImportFlow.STORAGE) -> CanonicalField | None:
    """Canonical field a header maps to by default, or None.

    Status is only auto-mapped in the storage flow; the interactive flow
    leaves it to the user.
    """
    field = _HEADER_FIELDS.get(normalize_header(header))
    if field is CanonicalField.RSVP_STATUS and not flow.auto_maps_status:
        return None
    return field
