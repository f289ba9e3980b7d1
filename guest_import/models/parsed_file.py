from __future__ import annotations

from dataclasses import dataclass

"""ParsedFile model: tokenized CSV content.

Rows may have fewer fields than the header; that is reported by the row
validator, never by the tokenizer.
"""

__all__ = [
    "ParsedFile",
]


@dataclass(frozen=True)
class ParsedFile:
    headers: list[str]  # Trimmed header cells, original spelling
    rows: list[list[str]]  # Data rows (blank lines already dropped)
    separator: str = ","  # Detected from the header line

    @property
    def expected_columns(self) -> int:
        """Column count a data row must reach: up to the last non-empty header.

        Trailing empty header cells (e.g. a dangling separator) are not counted.
        """
        count = len(self.headers)
        while count > 0 and not self.headers[count - 1]:
            count -= 1
        return count

    @property
    def row_count(self) -> int:
        return len(self.rows)
