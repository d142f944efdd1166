from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import date
from pathlib import Path
from typing import Any

from ..config.loader import ImportConfig, default_config
from ..db.camera_store import CameraStore
from ..errors import CameraImportError, StoreError
from ..logging.error_log import ErrorLogBuffer
from ..models.camera_record import CameraRecord, Submitter
from ..models.error_record import ErrorRecord
from ..models.import_outcome import ImportOutcome, Imported, InfrastructureError, ValidationFailed
from ..parsing.reader import detect_format, parse_file
from ..validation.validator import RecordValidator, today_in
from .normalizer import normalize_row
from .progress import ProgressTracker

"""Bulk import orchestration.

parse file -> validate every row -> (invalid: report | valid: normalize + insert row by row)

- No write happens before validation of the whole file has completed
- Duplicate checks and inserts are sequential, one remote call per row, in row order
- Inserts are independent (no transaction): when an insert fails, rows
  already written stay written and the outcome names the failing row
- Infrastructure exceptions from the parsing / store layers are caught here
  once and turned into an InfrastructureError outcome
"""

__all__ = [
    "BulkImporter",
]

logger = logging.getLogger(__name__)

FILE_LEVEL_ROW = -1


class _ProgressChecker:
    """Duplicate checker wrapper advancing a progress bar per lookup."""

    def __init__(self, store: CameraStore, progress: ProgressTracker) -> None:
        self._store = store
        self._progress = progress

    def exists(self, device_name: str, latitude: str, longitude: str) -> bool:
        try:
            return self._store.exists(device_name, latitude, longitude)
        finally:
            self._progress.advance()


class BulkImporter:
    """Import camera spreadsheets into the camera store.

    Args:
        store: Duplicate lookup + insert capability
        config: Validation rules, field aliases, defaults
        submitter: Authenticated user the import runs for (policeId fallback)
        error_log: Optional buffer receiving one ErrorRecord per problem
        today: Fixed reference date (tests); defaults to today in the configured timezone
    """

    def __init__(
        self,
        store: CameraStore,
        config: ImportConfig | None = None,
        submitter: Submitter | None = None,
        error_log: ErrorLogBuffer | None = None,
        today: date | None = None,
    ) -> None:
        self.store = store
        self.config = config or default_config()
        self.submitter = submitter
        self.error_log = error_log
        self._today = today

    def import_path(self, path: Path) -> ImportOutcome:
        """Read a file from disk and import it."""
        try:
            # 拡張子チェックはファイル読み込みより先に行う
            detect_format(path.name)
            file_bytes = path.read_bytes()
        except CameraImportError as e:
            return self._infrastructure_failure(path.name, str(e))
        except OSError as e:
            return self._infrastructure_failure(path.name, f"cannot read file '{path}': {e}")
        return self.import_file(file_bytes, path.name)

    def import_file(self, file_bytes: bytes, file_name: str) -> ImportOutcome:
        """Parse, validate and (when clean) persist the rows of one file."""
        logger.info("importing file=%s bytes=%d", file_name, len(file_bytes))
        try:
            detect_format(file_name)
            parsed = parse_file(file_bytes, file_name, field_aliases=self.config.field_aliases)
        except CameraImportError as e:
            return self._infrastructure_failure(file_name, str(e))

        logger.debug("parsed file=%s columns=%s rows=%d", file_name, parsed.columns, len(parsed.rows))
        return self.import_rows(parsed.rows, source=file_name)

    def import_rows(self, rows: Sequence[Mapping[str, Any]], source: str = "<rows>") -> ImportOutcome:
        """Validate and persist already parsed rows."""
        today = self._today or today_in(self.config.tzinfo)

        with ProgressTracker(len(rows), description="Checking duplicates") as progress:
            validator = RecordValidator(_ProgressChecker(self.store, progress), self.config, today=today)
            result = validator.validate(rows)

        if result.lookup_failures:
            first = result.lookup_failures[0]
            for failure in result.lookup_failures:
                self._record(ErrorRecord.create(source, failure.row_index, "DUPLICATE_CHECK_ERROR", failure.reason))
            reason = f"duplicate check failed for row {first.row_index}: {first.reason}"
            if len(result.lookup_failures) > 1:
                reason += f" ({len(result.lookup_failures)} rows affected)"
            return self._infrastructure_failure(source, reason, row_index=first.row_index, logged=True)

        if not result.valid:
            for err in result.errors:
                self._record(ErrorRecord.from_validation_error(source, err))
            logger.warning("validation failed file=%s rows=%d errors=%d", source, len(rows), len(result.errors))
            self._flush()
            return ValidationFailed(errors=result.errors)

        records = [
            normalize_row(
                row,
                submitter=self.submitter,
                today=today,
                unknown_police_id=self.config.unknown_police_id,
            )
            for row in rows
        ]
        return self._persist(records, source)

    def _persist(self, records: list[CameraRecord], source: str) -> ImportOutcome:
        persisted = 0
        with ProgressTracker(len(records), description="Inserting cameras") as progress:
            for idx, record in enumerate(records, start=1):
                try:
                    doc_id = self.store.insert(record)
                except StoreError as e:
                    reason = (
                        f"insert failed at row {idx}: {e}; "
                        f"{persisted} earlier row(s) were saved and remain in the store"
                    )
                    self._record(ErrorRecord.create(source, idx, "DATABASE_INSERT_ERROR", str(e)))
                    return self._infrastructure_failure(
                        source, reason, row_index=idx, persisted=persisted, logged=True
                    )
                persisted += 1
                logger.debug("inserted row=%d id=%s device=%s", idx, doc_id, record.deviceName)
                progress.advance(inserted=persisted)

        logger.info("imported file=%s inserted=%d", source, persisted)
        return Imported(count=persisted)

    def _infrastructure_failure(
        self,
        source: str,
        reason: str,
        row_index: int | None = None,
        persisted: int = 0,
        logged: bool = False,
    ) -> InfrastructureError:
        logger.error("file=%s %s", source, reason)
        if not logged:
            self._record(ErrorRecord.create(source, FILE_LEVEL_ROW, "INFRASTRUCTURE_ERROR", reason))
        self._flush()
        return InfrastructureError(reason=reason, row_index=row_index, persisted=persisted)

    def _record(self, record: ErrorRecord) -> None:
        if self.error_log is not None:
            self.error_log.append(record)

    def _flush(self) -> None:
        if self.error_log is None:
            return
        counts = self.error_log.counts_by_type()
        try:
            path = self.error_log.flush()
        except OSError as e:
            # エラーログ書き込み失敗で処理結果自体は変えない
            logger.warning("failed writing error log: %s", e)
            return
        if path is not None:
            breakdown = " ".join(f"{k}={v}" for k, v in counts.items())
            logger.info("error log written: %s (%s)", path, breakdown)
