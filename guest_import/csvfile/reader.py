from __future__ import annotations

from pathlib import Path

from ..models.parsed_file import ParsedFile
from .headers import missing_required_headers
from .tokenizer import tokenize

"""CSV file reader.

Decodes raw content, tokenizes it and applies the file-structural checks that
reject a whole import before any row is looked at:

1. empty file
2. missing required headers (name, phone_number, amount) when required
3. no data row after the header
"""

__all__ = [
    "CsvStructureError",
    "MissingColumnsError",
    "decode_content",
    "read_csv_file",
    "load_guest_csv",
]

_UTF8_BOM = b"\xef\xbb\xbf"


class CsvStructureError(Exception):
    """Raised when the file as a whole cannot be imported."""


class MissingColumnsError(CsvStructureError):
    """Raised when required header columns are missing."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"Missing required columns: {', '.join(self.missing)}")


def decode_content(raw: str | bytes) -> str:
    """Decode bytes as UTF-8 and strip a leading BOM."""
    if isinstance(raw, bytes):
        if raw.startswith(_UTF8_BOM):
            raw = raw[len(_UTF8_BOM):]
        return raw.decode("utf-8", errors="replace")
    if raw.startswith("\ufeff"):
        return raw[1:]
    return raw


def read_csv_file(path: Path) -> str:
    try:
        return decode_content(path.read_bytes())
    except OSError as e:
        raise CsvStructureError(f"Failed to read CSV file: {e}") from e


def load_guest_csv(content: str | bytes, *, require_headers: bool = True) -> ParsedFile:
    """Tokenize CSV content and validate its overall structure.

    Parameters
    ----------
    content: raw CSV (bytes or str)
    require_headers: check for name / phone_number / amount headers. The
        interactive flow maps columns by hand and skips this check.

    Raises
    ------
    CsvStructureError / MissingColumnsError for file-level problems
    """
    text = decode_content(content)
    if not text.strip():
        raise CsvStructureError("CSV file is empty")

    parsed = tokenize(text)

    if require_headers:
        missing = missing_required_headers(parsed.headers)
        if missing:
            raise MissingColumnsError(missing)

    if not parsed.rows:
        raise CsvStructureError("CSV file must have at least one data row")

    return parsed
