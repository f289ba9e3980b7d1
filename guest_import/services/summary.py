from __future__ import annotations

from ..models.import_run import ImportRun

"""SUMMARY line rendering.

Format:
SUMMARY file={name} status={status} rows={rows} imported={n} failed={n}
excluded={n} elapsed_sec={elapsed}
"""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # 指数表記を避ける
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(run: ImportRun) -> str:
    """Render the SUMMARY line for a finished import run.

    >>> from guest_import.models.import_run import ImportRun
    >>> render_summary_line(ImportRun(source="guests.csv", event_id="e1"))
    'SUMMARY file=guests.csv status=idle rows=0 imported=0 failed=0 excluded=0 elapsed_sec=0'
    """
    summary = run.result.summary if run.result is not None else None
    imported = summary.imported_count if summary else 0
    failed = summary.failed_count if summary else 0
    return (
        f"SUMMARY file={run.source} "
        f"status={run.status.value} "
        f"rows={run.total_rows} "
        f"imported={imported} "
        f"failed={failed} "
        f"excluded={run.excluded_rows} "
        f"elapsed_sec={_format_seconds(run.elapsed_seconds)}"
    )
