from __future__ import annotations

from dataclasses import dataclass, field

from .fields import ImportFlow

"""Config dataclasses for the guest importer.

Built by guest_import.config.loader from config/import.yml after JSON schema
validation. Environment variables take precedence over DatabaseConfig values
when connecting.
"""


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection fallback values (used when PG* env vars are unset)."""
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class ImportConfig:
    """Root configuration object for an import run."""
    flow: ImportFlow = ImportFlow.STORAGE
    table: str = "guests"  # target table name
    page_size: int = 1000  # execute_values page size
    event_id: str | None = None  # default event when --event-id is omitted
    column_mapping: dict[str, int] = field(default_factory=dict)  # field -> column index
    null_sentinels: set[str] | None = None  # 大文字化済 (空扱いする文字列)
    error_log_dir: str = "./logs"
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
