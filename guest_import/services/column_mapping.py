from __future__ import annotations

from collections.abc import Iterable, Mapping

from ..csvfile.headers import field_for_header
from ..models.column_mapping import ColumnMapping, ColumnMappingError
from ..models.fields import CanonicalField, ImportFlow

"""Column mapping service.

Associates CSV column indices with canonical guest fields, either with an
automatic default pass over the headers or from explicit FIELD=INDEX strings
("name=0", "phone=2") supplied on the command line / in the config file.
"""

__all__ = [
    "auto_map_columns",
    "parse_mapping_spec",
    "mapping_from_config",
    "missing_required_fields",
    "all_fields_mapped",
    "get_sample_data",
]


def auto_map_columns(headers: list[str], flow: ImportFlow = ImportFlow.STORAGE) -> ColumnMapping:
    """Default mapping from header names; the first column for a field wins."""
    mapping = ColumnMapping()
    for index, header in enumerate(headers):
        if not header:
            continue
        field = field_for_header(header, flow)
        if field is None or field in mapping.mapped_fields:
            continue
        mapping.assign(index, field)
    return mapping


def parse_mapping_spec(specs: Iterable[str]) -> ColumnMapping:
    """Build a mapping from FIELD=INDEX strings.

    Raises:
        ColumnMappingError: malformed entry, unknown field or duplicate field
    """
    mapping = ColumnMapping()
    for spec in specs:
        name, sep, index_str = spec.partition("=")
        if not sep or not name.strip() or not index_str.strip():
            raise ColumnMappingError(f"invalid mapping '{spec}' (expected FIELD=INDEX)")
        try:
            field = CanonicalField.parse(name)
            index = int(index_str)
        except ValueError as e:
            raise ColumnMappingError(f"invalid mapping '{spec}': {e}") from e
        mapping.assign(index, field)
    return mapping


def mapping_from_config(raw: Mapping[str, int]) -> ColumnMapping:
    """Build a mapping from the config file's field -> column index table."""
    return parse_mapping_spec(f"{name}={index}" for name, index in raw.items())


def missing_required_fields(mapping: ColumnMapping) -> list[str]:
    return [f.value for f in mapping.missing_required]


def all_fields_mapped(mapping: ColumnMapping) -> bool:
    """True iff every required canonical field has a source column."""
    return mapping.is_complete


def get_sample_data(rows: list[list[str]], column_index: int, max_rows_to_check: int = 5) -> str:
    """First non-empty value of a column within the first few rows ('' if none)."""
    for row in rows[:max_rows_to_check]:
        if column_index < len(row):
            value = row[column_index].strip()
            if value:
                return value
    return ""
