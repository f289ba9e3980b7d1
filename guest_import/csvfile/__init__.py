"""CSV tokenizing, header normalization and file-level structure checks."""

from .headers import REQUIRED_HEADERS, field_for_header, missing_required_headers, normalize_header
from .reader import CsvStructureError, MissingColumnsError, decode_content, load_guest_csv, read_csv_file
from .tokenizer import detect_separator, parse_line, split_lines, tokenize

__all__ = [
    "REQUIRED_HEADERS",
    "CsvStructureError",
    "MissingColumnsError",
    "decode_content",
    "detect_separator",
    "field_for_header",
    "load_guest_csv",
    "missing_required_headers",
    "normalize_header",
    "parse_line",
    "read_csv_file",
    "split_lines",
    "tokenize",
]
