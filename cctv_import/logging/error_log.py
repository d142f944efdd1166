from __future__ import annotations

import re
from collections import Counter
from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord

"""Per-import error log.

Every rejected row, failed lookup and aborted import of one upload ends up in
a JSON Lines file under ``logs/``. The file is named after the uploaded file
so several imports in one directory stay apart:

    logs/errors-<upload stem>-YYYYMMDD-HHMMSS.log   (UTC)
    logs/errors-YYYYMMDD-HHMMSS.log                  (no source given)

The file is only created when there is something to write.
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"

_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9_.-]+")


def _source_slug(source: str | None) -> str | None:
    """File-name-safe label for an upload ("Ward 5 cams.xlsx" -> "Ward_5_cams")."""
    if not source:
        return None
    slug = _UNSAFE_CHARS_RE.sub("_", Path(source).stem).strip("._-")
    return slug or None


class ErrorLogBuffer:
    """Collects ErrorRecords for one import and appends them to its log file on flush().

    Args:
        logs_dir: Target directory (default ``./logs``)
        source: Name of the uploaded file, used in the log file name
    """

    def __init__(self, logs_dir: Path | None = None, source: str | None = None) -> None:
        self._records: list[ErrorRecord] = []
        self._file_path: Path | None = None
        self._logs_dir = logs_dir if logs_dir is not None else LOGS_DIR
        self._slug = _source_slug(source)

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            name = f"errors-{self._slug}-{stamp}.log" if self._slug else f"errors-{stamp}.log"
            self._file_path = self._logs_dir / name
        return self._file_path

    @property
    def records(self) -> list[ErrorRecord]:
        return list(self._records)

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)

    def __len__(self) -> int:
        return len(self._records)

    def counts_by_type(self) -> dict[str, int]:
        """Pending records per error_type, most frequent first."""
        return dict(Counter(r.error_type for r in self._records).most_common())

    def flush(self) -> Path | None:
        """Append pending records; returns the log path, or None when nothing was pending."""
        if not self._records:
            return None
        target = self.file_path
        lines = "".join(r.to_json_line() + "\n" for r in self._records)
        with target.open("a", encoding="utf-8") as f:
            f.write(lines)
        self._records.clear()
        return target
