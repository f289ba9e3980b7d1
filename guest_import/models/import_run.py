from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path

from .import_result import ImportResult

"""ImportRun domain model and ImportStatus enum.

Tracks a single import invocation through its lifecycle:

    idle -> parsing -> validating -> (failed | writing -> (failed | succeeded))

failed and succeeded are terminal. There are no automatic retries; the caller
starts a new run from idle.
"""

__all__ = [
    "ImportStatus",
    "ImportRun",
    "InvalidTransitionError",
]


class InvalidTransitionError(Exception):
    """Raised when a run is moved to a state not reachable from its current one."""


class ImportStatus(Enum):
    IDLE = "idle"
    PARSING = "parsing"
    VALIDATING = "validating"
    WRITING = "writing"
    FAILED = "failed"
    SUCCEEDED = "succeeded"

    @property
    def terminal(self) -> bool:
        return self in (ImportStatus.FAILED, ImportStatus.SUCCEEDED)


_TRANSITIONS: dict[ImportStatus, frozenset[ImportStatus]] = {
    ImportStatus.IDLE: frozenset({ImportStatus.PARSING, ImportStatus.FAILED}),
    ImportStatus.PARSING: frozenset({ImportStatus.VALIDATING, ImportStatus.FAILED}),
    ImportStatus.VALIDATING: frozenset({ImportStatus.WRITING, ImportStatus.FAILED}),
    ImportStatus.WRITING: frozenset({ImportStatus.SUCCEEDED, ImportStatus.FAILED}),
    ImportStatus.FAILED: frozenset(),
    ImportStatus.SUCCEEDED: frozenset(),
}


@dataclass
class ImportRun:
    """Processing context for one CSV file import."""
    source: str  # file name (or "<memory>" for in-memory content)
    event_id: str
    status: ImportStatus = ImportStatus.IDLE
    start_time: datetime | None = None
    end_time: datetime | None = None
    total_rows: int = 0  # data rows read (blank lines excluded)
    excluded_rows: int = 0  # rows dropped by the caller before writing
    result: ImportResult | None = None
    history: list[ImportStatus] = field(default_factory=list)

    @classmethod
    def for_path(cls, path: Path, event_id: str) -> ImportRun:
        return cls(source=path.name, event_id=event_id)

    def advance(self, status: ImportStatus) -> None:
        if status not in _TRANSITIONS[self.status]:
            raise InvalidTransitionError(
                f"cannot move import from {self.status.value} to {status.value}"
            )
        if self.start_time is None:
            self.start_time = datetime.now(UTC)
        self.history.append(self.status)
        self.status = status
        if status.terminal:
            self.end_time = datetime.now(UTC)

    def finish(self, result: ImportResult) -> ImportResult:
        """Record the final result and move to the matching terminal state."""
        self.result = result
        self.advance(ImportStatus.SUCCEEDED if result.success else ImportStatus.FAILED)
        return result

    @property
    def elapsed_seconds(self) -> float:
        if self.start_time is None or self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time).total_seconds()
