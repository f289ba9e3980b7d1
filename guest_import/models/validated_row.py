from __future__ import annotations

from dataclasses import dataclass

from .guest_record import CandidateRecord, GuestRecord

"""ValidatedRow model: outcome of validating one CSV data row.

Created once per row and never mutated; callers exclude rows by index
instead of editing them.
"""

__all__ = [
    "ValidatedRow",
    "HEADER_ROW_OFFSET",
]

# row_index (0-based data row) -> file line number (header is line 1)
HEADER_ROW_OFFSET = 2


@dataclass(frozen=True)
class ValidatedRow:
    row_index: int  # 0-based index among data rows
    original_row: list[str]
    data: GuestRecord | CandidateRecord  # best-effort record, amount always numeric
    is_valid: bool
    errors: list[str]

    @property
    def row_number(self) -> int:
        """1-based line number in the original file."""
        return self.row_index + HEADER_ROW_OFFSET
