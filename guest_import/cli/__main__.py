from __future__ import annotations

import argparse
import json
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import psycopg2
from dotenv import load_dotenv

from guest_import.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from guest_import.csvfile.headers import normalize_header
from guest_import.csvfile.reader import CsvStructureError, read_csv_file
from guest_import.csvfile.tokenizer import tokenize
from guest_import.db.guest_store import GuestStoreError, PostgresGuestStore
from guest_import.logging.error_log import ErrorLogBuffer
from guest_import.logging.init import log_summary, setup_logging
from guest_import.models.column_mapping import ColumnMapping, ColumnMappingError
from guest_import.models.config_models import ImportConfig
from guest_import.models.fields import ImportFlow
from guest_import.services.column_mapping import (
    auto_map_columns,
    get_sample_data,
    mapping_from_config,
    parse_mapping_spec,
)
from guest_import.services.orchestrator import ImportOptions, run_import
from guest_import.services.progress import is_tty_enabled
from guest_import.services.summary import render_summary_line

"""CLI entrypoint.

python -m guest_import.cli CSV_FILE [--event-id ID] [--config PATH] ...

Exit codes:
- 0: every row imported
- 2: import succeeded but some rows failed validation
- 1: fatal (bad config / file structure / database failure / nothing imported)
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1


@contextmanager
def _db_connection(cfg: ImportConfig) -> Iterator[Any]:  # pragma: no cover (thin wrapper)
    """Provide a psycopg2 cursor.

    接続情報の優先順位:
        1. `.env` で読み込まれた環境変数 (main() で上書きロード済み)
           - DATABASE_URL / PGDSN があれば DSN 全体をそのまま使用
           - 個別 PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE
        2. config の database セクション (不足分のフォールバック)
    """
    db_cfg = cfg.database
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if not dsn:
        host = os.getenv("PGHOST", db_cfg.host or "localhost")
        port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
        user = os.getenv("PGUSER", db_cfg.user or "postgres")
        password = os.getenv("PGPASSWORD", db_cfg.password or "")
        database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
        dsn = f"host={host} port={port} user={user} dbname={database}"
        if password:
            dsn += f" password={password}"

    conn = psycopg2.connect(dsn)
    # トランザクション境界は GuestStore が BEGIN/COMMIT で明示
    conn.autocommit = True
    try:
        with conn.cursor() as cur:
            yield cur
    finally:
        conn.close()


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv (override=True: .env wins over the process env)."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="python -m guest_import.cli",
        description="CSV -> PostgreSQL guest list importer",
    )
    p.add_argument("csv_file", type=Path, help="Guest CSV file")
    p.add_argument("--event-id", help="Event that receives the guests (default: config event_id)")
    p.add_argument("--config", type=Path, help=f"Config file (default: {DEFAULT_CONFIG_PATH})")
    p.add_argument(
        "--flow",
        choices=[f.value for f in ImportFlow],
        help="storage: header-driven mapping; interactive: explicit --map mapping",
    )
    p.add_argument(
        "--map",
        dest="mappings",
        action="append",
        default=[],
        metavar="FIELD=INDEX",
        help="Map a canonical field to a 0-based column index (repeatable)",
    )
    p.add_argument(
        "--exclude-row",
        dest="excluded_rows",
        action="append",
        type=int,
        default=[],
        metavar="N",
        help="Skip file row N (as reported in row errors; repeatable)",
    )
    p.add_argument("--dry-run", action="store_true", help="Validate only, no database access")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print headers, samples and mapping then exit")
    p.add_argument("--json", action="store_true", help="Print the import result as JSON")
    return p.parse_args(argv)


def _resolve_config(path: Path | None) -> ImportConfig:
    if path is not None:
        return load_config(path)
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return ImportConfig()


def _resolve_mapping(args: argparse.Namespace, cfg: ImportConfig) -> ColumnMapping | None:
    if args.mappings:
        return parse_mapping_spec(args.mappings)
    if cfg.column_mapping:
        return mapping_from_config(cfg.column_mapping)
    return None


def _inspect_data(csv_file: Path, flow: ImportFlow) -> int:
    try:
        parsed = tokenize(read_csv_file(csv_file))
    except CsvStructureError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL

    print(f"FILE: {csv_file.name}")
    print(f"  separator={parsed.separator!r} rows={parsed.row_count}")
    for index, header in enumerate(parsed.headers):
        sample = get_sample_data(parsed.rows, index)
        print(f"  [{index}] {header!r} -> {normalize_header(header)!r} sample={sample!r}")
    mapping = auto_map_columns(parsed.headers, flow)
    print(f"  mapping={mapping.to_dict()}")
    if not mapping.is_complete:
        print(f"  missing={[f.value for f in mapping.missing_required]}")
    return 0


def _exit_code(run) -> int:
    result = run.result
    if result is None or not result.success:
        return EXIT_FATAL
    if result.failed_count:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    # argv=[] はテストから渡されるので None のときだけ sys.argv を読む
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    logger = setup_logging(debug=args.debug)
    if args.debug:
        logger.debug("debug mode enabled")

    # .env を最優先で読み込む (DB 接続パラメータ優先順位保証)
    _load_env_file(Path(".env"), override=True)

    try:
        cfg = _resolve_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    flow = ImportFlow(args.flow) if args.flow else cfg.flow

    if args.inspect_data:
        return _inspect_data(args.csv_file, flow)

    event_id = args.event_id or cfg.event_id
    if not event_id:
        logger.error("event id is required (--event-id or event_id in config)")
        return EXIT_FATAL

    try:
        mapping = _resolve_mapping(args, cfg)
    except ColumnMappingError as e:
        logger.error(f"mapping: {e}")
        return EXIT_FATAL

    options = ImportOptions(
        flow=flow,
        column_mapping=mapping,
        excluded_rows=frozenset(args.excluded_rows),
        null_sentinels=frozenset(cfg.null_sentinels) if cfg.null_sentinels else None,
        show_progress=is_tty_enabled(),
    )
    error_log = ErrorLogBuffer(Path(cfg.error_log_dir))

    logger.info(f"Importing {args.csv_file} into event {event_id} (flow={flow.value})")

    # DB 接続制御: --dry-run またはテスト用 DISABLE_DB_CONNECT=1 で mock mode
    mock = args.dry_run or os.getenv("DISABLE_DB_CONNECT") == "1"
    try:
        if mock:
            logger.debug("mock mode: no database connection")
            store = PostgresGuestStore(None, table=cfg.table, page_size=cfg.page_size)
            run = run_import(args.csv_file, event_id, store, options, error_log)
        else:
            with _db_connection(cfg) as cur:
                store = PostgresGuestStore(cur, table=cfg.table, page_size=cfg.page_size)
                run = run_import(args.csv_file, event_id, store, options, error_log)
    except (psycopg2.Error, GuestStoreError) as e:
        logger.error(f"database: {e}")
        return EXIT_FATAL

    result = run.result
    if result is not None:
        if result.success:
            logger.info(result.message)
        else:
            logger.error(result.message)
        for err in result.errors:
            logger.warning(f"row {err.row}: {err.message}")
        if args.json:
            print(json.dumps(result.to_dict(), ensure_ascii=False))

    # log_summary が "SUMMARY " を付けるので先頭を除く
    log_summary(render_summary_line(run).removeprefix("SUMMARY "))
    return _exit_code(run)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
