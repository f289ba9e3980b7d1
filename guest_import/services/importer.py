from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from ..db.guest_store import GuestStore, GuestStoreError
from ..models.guest_record import CandidateRecord, GuestRecord
from ..models.import_result import ImportResult, RowError
from ..models.validated_row import HEADER_ROW_OFFSET
from .validation import as_candidate, validate_candidate

"""Import executor: validated records -> one batch write -> ImportResult.

Records are re-validated here because callers can reach this function without
going through the row validator. Only the first schema message of an
invalid record is reported (the row validator reports every message).
Nothing is written when no record passes, and a failed write keeps nothing
(the store commits all rows or none).
Never raises: every failure path returns ImportResult(success=False).
"""

__all__ = [
    "import_guests",
]

logger = logging.getLogger(__name__)

GuestInput = GuestRecord | CandidateRecord | Mapping[str, Any]


def _plural(count: int) -> str:
    return "guest" if count == 1 else "guests"


def import_guests(
    event_id: str,
    records: Sequence[GuestInput],
    store: GuestStore,
) -> ImportResult:
    """Validate and persist guests for an event.

    Parameters
    ----------
    event_id: target event
    records: guests to import (index i is reported as row i + 2)
    store: storage collaborator performing the single batch write
    """
    try:
        if not records:
            return ImportResult.failure("No guests to import")

        valid: list[GuestRecord] = []
        errors: list[RowError] = []
        for index, record in enumerate(records):
            guest, messages = validate_candidate(as_candidate(record))
            if guest is None:
                errors.append(RowError(row=index + HEADER_ROW_OFFSET, message=messages[0]))
                continue
            valid.append(guest)

        if not valid:
            logger.warning("event=%s no valid guests among %d records", event_id, len(records))
            return ImportResult.failure(
                "No valid guests to import",
                errors=errors,
                failed_count=len(errors),
            )

        try:
            inserted = store.insert_guests(event_id, valid)
        except GuestStoreError as e:
            logger.error("event=%s batch write failed: %s", event_id, e)
            return ImportResult.failure(f"Database error: {e}", errors=errors)

        logger.info("event=%s imported=%d failed=%d", event_id, inserted, len(errors))
        return ImportResult(
            success=True,
            message=f"Successfully imported {inserted} {_plural(inserted)}",
            imported_count=inserted,
            failed_count=len(errors),
            errors=tuple(errors),
        )
    except Exception as e:
        logger.exception("unexpected error importing guests for event=%s", event_id)
        return ImportResult.failure(f"Failed to import guests: {e}")
