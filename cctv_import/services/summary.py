from __future__ import annotations

from ..models.import_outcome import ImportOutcome, Imported, InfrastructureError, ValidationFailed

"""SUMMARY line rendering.

Format:
SUMMARY file={name} status={status} inserted={n} errors={n} failed_row={row|-} elapsed_sec={elapsed}
"""


def _format_seconds(elapsed: float) -> str:
    if elapsed == 0:
        return "0"
    if elapsed == int(elapsed):
        return str(int(elapsed))
    if elapsed < 0.01:
        # Avoid scientific notation for very small numbers
        return f"{elapsed:.6f}".rstrip("0").rstrip(".")
    return f"{elapsed:.3f}".rstrip("0").rstrip(".")


def render_summary_line(file_name: str, outcome: ImportOutcome, elapsed_seconds: float) -> str:
    """Render the SUMMARY line for one import.

    Examples:
        >>> from cctv_import.models.import_outcome import Imported
        >>> render_summary_line("cams.csv", Imported(count=2), 1.5)
        'SUMMARY file=cams.csv status=imported inserted=2 errors=0 failed_row=- elapsed_sec=1.5'
    """
    inserted = 0
    errors = 0
    failed_row = "-"
    if isinstance(outcome, Imported):
        inserted = outcome.count
    elif isinstance(outcome, ValidationFailed):
        errors = len(outcome.errors)
    elif isinstance(outcome, InfrastructureError):
        inserted = outcome.persisted
        if outcome.row_index is not None:
            failed_row = str(outcome.row_index)

    return (
        f"SUMMARY file={file_name} "
        f"status={outcome.status.value} "
        f"inserted={inserted} "
        f"errors={errors} "
        f"failed_row={failed_row} "
        f"elapsed_sec={_format_seconds(elapsed_seconds)}"
    )
