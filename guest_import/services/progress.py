from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Row progress display with tqdm (TTY only).

A single tqdm bar counts validated rows. In non-TTY environments (CI, pipes)
the bar is disabled to avoid ANSI control sequence spam.
"""

__all__ = [
    "RowProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    """True if stdout is a TTY and progress should be displayed."""
    return sys.stdout.isatty()


class RowProgressTracker:
    """Progress bar over the data rows of one CSV file."""

    def __init__(self, total_rows: int, *, description: str = "Validating rows", enabled: bool = True) -> None:
        """Initialize progress tracker.

        Args:
            total_rows: Total number of data rows
            description: Description for the progress bar
            enabled: Caller-level switch; the bar is still suppressed without a TTY
        """
        self.total_rows = total_rows
        self.description = description
        self.current_row = 0
        self.valid = 0
        self.invalid = 0

        self.enabled = enabled and is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_rows,
                desc=description,
                unit="row",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def advance(self, is_valid: bool) -> None:
        """Count one validated row."""
        self.current_row += 1
        if is_valid:
            self.valid += 1
        else:
            self.invalid += 1

        if self.enabled and self.pbar is not None:
            self.pbar.update(1)
            self.pbar.set_postfix(valid=self.valid, invalid=self.invalid)

    def close(self) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> RowProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
