from __future__ import annotations

from ..models.parsed_file import ParsedFile

"""CSV tokenizer.

Line-oriented, quote-aware splitting with a comma or semicolon separator.
Never raises: unbalanced quotes are closed implicitly at end of line.

File-level rules:
- split on '\\n', trim each line, drop empty lines (blank data rows are
  skipped silently, they are not errors)
- separator is ';' if the header line contains one, otherwise ','
"""

__all__ = [
    "parse_line",
    "detect_separator",
    "split_lines",
    "strip_outer_quotes",
    "tokenize",
]

QUOTE = '"'


def parse_line(line: str, separator: str = ",") -> list[str]:
    """Split one CSV line into trimmed fields.

    A quote toggles quoting unless we are inside quotes and the next char is
    another quote, in which case a literal quote is emitted ("" escaping).
    The separator only splits outside quotes. Always returns >= 1 field.

    >>> parse_line('"a,b","c""d"', ",")
    ['a,b', 'c"d']
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0
    n = len(line)
    while i < n:
        ch = line[i]
        if ch == QUOTE:
            if in_quotes and i + 1 < n and line[i + 1] == QUOTE:
                current.append(QUOTE)
                i += 2
                continue
            in_quotes = not in_quotes
        elif ch == separator and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
        i += 1
    fields.append("".join(current).strip())
    return fields


def detect_separator(header_line: str) -> str:
    return ";" if ";" in header_line else ","


def split_lines(text: str) -> list[str]:
    """Split file text into trimmed, non-empty lines (handles CRLF via strip)."""
    return [s for s in (line.strip() for line in text.split("\n")) if s]


def strip_outer_quotes(value: str) -> str:
    """Drop one leading and one trailing quote left over after tokenizing."""
    if value.startswith(QUOTE):
        value = value[1:]
    if value.endswith(QUOTE):
        value = value[:-1]
    return value.strip()


def tokenize(text: str) -> ParsedFile:
    """Tokenize full CSV text: first non-empty line is the header."""
    lines = split_lines(text)
    if not lines:
        return ParsedFile(headers=[], rows=[], separator=",")
    separator = detect_separator(lines[0])
    headers = [strip_outer_quotes(h) for h in parse_line(lines[0], separator)]
    rows = [
        [strip_outer_quotes(v) for v in parse_line(line, separator)]
        for line in lines[1:]
    ]
    return ParsedFile(headers=headers, rows=rows, separator=separator)
