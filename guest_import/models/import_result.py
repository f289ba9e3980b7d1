from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

"""Import result models.

ImportResult is the tagged result every pipeline entry point returns: the
caller never sees an exception, only success=True/False with a message and
optional per-row errors. to_dict() renders the external interface shape.
"""

__all__ = [
    "RowError",
    "ImportSummary",
    "ImportResult",
]


@dataclass(frozen=True)
class RowError:
    row: int  # 1-based file line number (0 / -1 never used for row-level errors)
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"row": self.row, "message": self.message}


@dataclass(frozen=True)
class ImportSummary:
    """Counts and per-row errors of one finished batch."""
    imported_count: int
    failed_count: int
    errors: tuple[RowError, ...] = ()


@dataclass(frozen=True)
class ImportResult:
    success: bool
    message: str
    imported_count: int | None = None
    failed_count: int | None = None
    errors: tuple[RowError, ...] = field(default_factory=tuple)

    @classmethod
    def failure(
        cls,
        message: str,
        errors: list[RowError] | tuple[RowError, ...] | None = None,
        failed_count: int | None = None,
    ) -> ImportResult:
        return cls(
            success=False,
            message=message,
            failed_count=failed_count,
            errors=tuple(errors or ()),
        )

    @property
    def summary(self) -> ImportSummary:
        return ImportSummary(
            imported_count=self.imported_count or 0,
            failed_count=self.failed_count or 0,
            errors=self.errors,
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"success": self.success, "message": self.message}
        if self.imported_count is not None:
            out["importedCount"] = self.imported_count
        if self.failed_count is not None:
            out["failedCount"] = self.failed_count
        if self.errors:
            out["errors"] = [e.to_dict() for e in self.errors]
        return out
