from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from ..csvfile.reader import CsvStructureError, load_guest_csv, read_csv_file
from ..db.guest_store import GuestStore, GuestStoreError
from ..logging.error_log import ErrorLogBuffer
from ..models.column_mapping import ColumnMapping, ColumnMappingError
from ..models.error_record import FILE_LEVEL_ROW, ErrorRecord
from ..models.fields import ImportFlow
from ..models.import_result import ImportResult, RowError
from ..models.import_run import ImportRun, ImportStatus
from ..models.validated_row import ValidatedRow
from .column_mapping import auto_map_columns, missing_required_fields
from .importer import import_guests
from .progress import RowProgressTracker
from .validation import validate_rows

"""Import pipeline: CSV source -> parse -> map -> validate -> one batch write.

run_import() never raises for problems with the file, the rows or the store.
Every outcome ends up as ImportRun.result, and every error is also appended to
the JSON Lines error log when one is supplied.

Row numbers in errors are 1-based file line numbers (header = line 1).
"""

__all__ = [
    "ProcessingError",
    "ImportOptions",
    "MEMORY_SOURCE",
    "run_import",
]

logger = logging.getLogger(__name__)

MEMORY_SOURCE = "<memory>"

ERR_FILE_STRUCTURE = "FILE_STRUCTURE_ERROR"
ERR_ROW_VALIDATION = "ROW_VALIDATION_ERROR"
ERR_DATABASE_READ = "DATABASE_READ_ERROR"
ERR_DATABASE_INSERT = "DATABASE_INSERT_ERROR"
ERR_UNEXPECTED = "UNEXPECTED_ERROR"


class ProcessingError(Exception):
    """Fatal pipeline error raised before any row is validated."""


@dataclass(frozen=True)
class ImportOptions:
    """Per-run options.

    excluded_rows holds file line numbers (the numbers shown in row errors)
    the user chose to drop after reviewing a previous validation pass.
    """
    flow: ImportFlow = ImportFlow.STORAGE
    column_mapping: ColumnMapping | None = None  # None = automatic mapping from headers
    excluded_rows: frozenset[int] = frozenset()
    null_sentinels: frozenset[str] | None = None
    show_progress: bool = False


def _log_error(
    error_log: ErrorLogBuffer | None,
    source: str,
    row: int,
    error_type: str,
    message: str,
) -> None:
    if error_log is not None:
        error_log.append(ErrorRecord.create(file=source, row=row, error_type=error_type, message=message))


def _finish(run: ImportRun, result: ImportResult) -> None:
    if run.status.terminal:
        # already closed by an earlier failure; keep the first result
        logger.debug("run for %s already %s", run.source, run.status.value)
        return
    run.finish(result)


def _row_errors(rows: list[ValidatedRow]) -> list[RowError]:
    return [RowError(row=r.row_number, message=msg) for r in rows for msg in r.errors]


def _load(source: Path | str | bytes, flow: ImportFlow):
    content = read_csv_file(source) if isinstance(source, Path) else source
    return load_guest_csv(content, require_headers=flow is ImportFlow.STORAGE)


def _resolve_mapping(headers: list[str], options: ImportOptions) -> ColumnMapping:
    mapping = options.column_mapping
    if mapping is None:
        mapping = auto_map_columns(headers, options.flow)
    if not mapping.is_complete:
        missing = ", ".join(missing_required_fields(mapping))
        raise ProcessingError(f"Missing required field mapping: {missing}")
    return mapping


def run_import(
    source: Path | str | bytes,
    event_id: str,
    store: GuestStore,
    options: ImportOptions | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> ImportRun:
    """Import one guest CSV for an event.

    Args:
        source: CSV file path, or in-memory CSV content (str / bytes)
        event_id: event that receives the guests
        store: storage collaborator (existing phones + batch write)
        options: flow, mapping, excluded rows, null sentinels, progress
        error_log: optional buffer that receives one record per error

    Returns:
        The finished ImportRun; run.result holds the ImportResult
    """
    options = options or ImportOptions()
    if isinstance(source, Path):
        run = ImportRun.for_path(source, event_id)
    else:
        run = ImportRun(source=MEMORY_SOURCE, event_id=event_id)
    name = run.source

    try:
        run.advance(ImportStatus.PARSING)
        if not event_id or not str(event_id).strip():
            raise ProcessingError("Event ID is required")

        parsed = _load(source, options.flow)
        run.total_rows = parsed.row_count
        mapping = _resolve_mapping(parsed.headers, options)
        logger.debug("file=%s separator=%r mapping=%s", name, parsed.separator, mapping.to_dict())

        run.advance(ImportStatus.VALIDATING)
        existing_phones = store.fetch_existing_phones(event_id)

        with RowProgressTracker(parsed.row_count, enabled=options.show_progress) as progress:
            validated = validate_rows(
                parsed.rows,
                mapping,
                existing_phones,
                expected_columns=parsed.expected_columns,
                null_sentinels=options.null_sentinels,
                on_row=lambda v: progress.advance(v.is_valid),
            )

        kept = [v for v in validated if v.row_number not in options.excluded_rows]
        run.excluded_rows = len(validated) - len(kept)
        valid_rows = [v for v in kept if v.is_valid]
        invalid_rows = [v for v in kept if not v.is_valid]
        row_errors = _row_errors(invalid_rows)
        for err in row_errors:
            _log_error(error_log, name, err.row, ERR_ROW_VALIDATION, err.message)

        logger.info(
            "file=%s rows=%d valid=%d invalid=%d excluded=%d",
            name, len(validated), len(valid_rows), len(invalid_rows), run.excluded_rows,
        )

        if not valid_rows:
            _finish(run, ImportResult.failure(
                "No valid guests found in CSV file",
                errors=row_errors,
                failed_count=len(invalid_rows),
            ))
            return run

        run.advance(ImportStatus.WRITING)
        outcome = import_guests(event_id, [v.data for v in valid_rows], store)

        # executor rows are positions in valid_rows (+2); map back to file lines
        executor_errors = [
            RowError(row=valid_rows[e.row - 2].row_number, message=e.message)
            if 0 <= e.row - 2 < len(valid_rows) else e
            for e in outcome.errors
        ]
        for err in executor_errors:
            _log_error(error_log, name, err.row, ERR_ROW_VALIDATION, err.message)

        failed = len(invalid_rows) + (outcome.failed_count or 0)
        errors = row_errors + executor_errors

        if not outcome.success:
            _log_error(error_log, name, FILE_LEVEL_ROW, ERR_DATABASE_INSERT, outcome.message)
            _finish(run, ImportResult.failure(outcome.message, errors=errors, failed_count=failed))
            return run

        message = outcome.message
        if failed:
            message += f" with {failed} error(s)"
        _finish(run, ImportResult(
            success=True,
            message=message,
            imported_count=outcome.imported_count,
            failed_count=failed,
            errors=tuple(errors),
        ))
    except (CsvStructureError, ColumnMappingError, ProcessingError) as e:
        logger.error("file=%s %s", name, e)
        _log_error(error_log, name, FILE_LEVEL_ROW, ERR_FILE_STRUCTURE, str(e))
        _finish(run, ImportResult.failure(str(e)))
    except GuestStoreError as e:
        logger.error("file=%s database error: %s", name, e)
        _log_error(error_log, name, FILE_LEVEL_ROW, ERR_DATABASE_READ, str(e))
        _finish(run, ImportResult.failure(f"Database error: {e}"))
    except Exception as e:
        logger.exception("file=%s unexpected error", name)
        _log_error(error_log, name, FILE_LEVEL_ROW, ERR_UNEXPECTED, str(e))
        _finish(run, ImportResult.failure(f"Failed to process CSV file: {e}"))
    finally:
        if error_log is not None and len(error_log):
            try:
                path = error_log.flush()
                logger.info("error log written: %s", path)
            except OSError as e:
                logger.warning("could not write error log: %s", e)

    return run
