from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from typing import Any, Protocol

from ..models.guest_record import DB_COLUMNS, GuestRecord
from ..services.transform import normalize_phone
from .batch_insert import BatchInsertError, BatchMetrics, batch_insert

"""Guest storage collaborator.

The import pipeline only needs two things from storage:
- the normalized phone numbers already on record for an event
- one all-or-nothing write of every validated guest

PostgresGuestStore implements both on a psycopg2 cursor. With cursor=None it
runs in mock mode: no existing phones, and every insert reports success
without touching a database (used by --dry-run).
"""

logger = logging.getLogger(__name__)

_TABLE_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")


class GuestStoreError(Exception):
    """Raised when the storage write (or read) fails; message is surfaced as-is."""


class GuestStore(Protocol):
    def fetch_existing_phones(self, event_id: str) -> set[str]: ...

    def insert_guests(self, event_id: str, records: Sequence[GuestRecord]) -> int: ...


class PostgresGuestStore:
    def __init__(self, cursor: Any = None, table: str = "guests", page_size: int = 1000) -> None:
        if not _TABLE_NAME_RE.match(table):
            raise GuestStoreError(f"invalid table name: {table!r}")
        self.cursor = cursor
        self.table = table
        self.page_size = page_size

    @property
    def mock_mode(self) -> bool:
        return self.cursor is None

    def fetch_existing_phones(self, event_id: str) -> set[str]:
        if self.cursor is None:
            return set()
        try:
            self.cursor.execute(
                f"SELECT phone_number FROM {self.table} WHERE event_id = %s",
                (event_id,),
            )
            rows = self.cursor.fetchall()
        except Exception as e:
            raise GuestStoreError(f"failed to load existing guests: {e}") from e
        return {normalize_phone(r[0]) for r in rows if r and r[0]}

    def insert_guests(self, event_id: str, records: Sequence[GuestRecord]) -> int:
        """Insert all records in one transaction; nothing is kept on failure."""
        if self.cursor is None:
            logger.debug("mock mode: skipping insert of %d guests", len(records))
            return len(records)

        rows = [r.to_db_values(event_id) for r in records]

        def _log_metrics(metrics: BatchMetrics) -> None:
            logger.debug(
                "table=%s batch_size=%d elapsed_sec=%.4f",
                self.table,
                metrics.batch_size,
                metrics.elapsed_seconds,
            )

        try:
            self.cursor.execute("BEGIN")
            result = batch_insert(
                self.cursor,
                table=self.table,
                columns=DB_COLUMNS,
                rows=rows,
                page_size=self.page_size,
                metrics_callback=_log_metrics,
            )
            self.cursor.execute("COMMIT")
        except BatchInsertError as e:
            self._rollback()
            raise GuestStoreError(str(e)) from e
        except Exception as e:
            self._rollback()
            raise GuestStoreError(f"transaction failed: {e}") from e

        return result.inserted_rows

    def _rollback(self) -> None:
        try:
            self.cursor.execute("ROLLBACK")
        except Exception:
            # 元のエラーを優先 (rollback 失敗は記録のみ)
            logger.warning("rollback failed for table=%s", self.table, exc_info=True)
