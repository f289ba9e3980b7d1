from __future__ import annotations

from collections.abc import Iterator, Mapping

from .fields import REQUIRED_FIELDS, CanonicalField

"""ColumnMapping model: CSV column index -> canonical guest field.

Invariants:
- at most one column maps to a given canonical field
- a mapping is complete iff every required field has a source column
"""

__all__ = [
    "ColumnMapping",
    "ColumnMappingError",
]


class ColumnMappingError(Exception):
    """Raised when a mapping would assign one canonical field to two columns."""


class ColumnMapping:
    """Association from CSV column index to an optional canonical field."""

    def __init__(self, pairs: Mapping[int, CanonicalField | None] | None = None) -> None:
        self._by_index: dict[int, CanonicalField | None] = {}
        if pairs:
            for index, field in pairs.items():
                self.assign(index, field)

    def assign(self, column_index: int, field: CanonicalField | None) -> None:
        """Map a column to a field (None = skip the column).

        Raises:
            ColumnMappingError: negative index, or field already mapped elsewhere
        """
        if column_index < 0:
            raise ColumnMappingError(f"column index must be >= 0, got {column_index}")
        if field is not None:
            current = self.column_for(field)
            if current is not None and current != column_index:
                raise ColumnMappingError(
                    f"field '{field.value}' is already mapped to column {current}"
                )
        self._by_index[column_index] = field

    def column_for(self, field: CanonicalField) -> int | None:
        for index, mapped in self._by_index.items():
            if mapped is field:
                return index
        return None

    def field_at(self, column_index: int) -> CanonicalField | None:
        return self._by_index.get(column_index)

    @property
    def mapped_fields(self) -> set[CanonicalField]:
        return {f for f in self._by_index.values() if f is not None}

    @property
    def missing_required(self) -> list[CanonicalField]:
        """Required fields without a source column, in canonical order."""
        mapped = self.mapped_fields
        return [f for f in REQUIRED_FIELDS if f not in mapped]

    @property
    def is_complete(self) -> bool:
        return not self.missing_required

    def items(self) -> Iterator[tuple[int, CanonicalField]]:
        """Yield (column_index, field) for mapped columns only, by column order."""
        for index in sorted(self._by_index):
            field = self._by_index[index]
            if field is not None:
                yield index, field

    def to_dict(self) -> dict[str, int]:
        return {field.value: index for index, field in self.items()}

    def __len__(self) -> int:
        return sum(1 for _ in self.items())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ColumnMapping):
            return NotImplemented
        return dict(self.items()) == dict(other.items())

    def __repr__(self) -> str:  # pragma: no cover (debug aid)
        return f"ColumnMapping({self.to_dict()!r})"
