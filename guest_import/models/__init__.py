"""Domain models for the CSV guest importer.

Every entity of the import pipeline lives here: parsed file, column mapping,
candidate / validated records, per-row validation results and the tagged
import result.
"""

from .column_mapping import ColumnMapping, ColumnMappingError
from .config_models import DatabaseConfig, ImportConfig
from .error_record import ErrorRecord
from .fields import CanonicalField, ImportFlow, RsvpStatus
from .guest_record import CandidateRecord, GuestRecord
from .import_result import ImportResult, ImportSummary, RowError
from .import_run import ImportRun, ImportStatus
from .parsed_file import ParsedFile
from .validated_row import ValidatedRow

__all__ = [
    # Configuration models
    "DatabaseConfig",
    "ImportConfig",
    # Field vocabulary
    "CanonicalField",
    "ImportFlow",
    "RsvpStatus",
    # Processing models
    "CandidateRecord",
    "ColumnMapping",
    "ColumnMappingError",
    "ErrorRecord",
    "GuestRecord",
    "ImportResult",
    "ImportRun",
    "ImportStatus",
    "ImportSummary",
    "ParsedFile",
    "RowError",
    "ValidatedRow",
]
