from __future__ import annotations

import logging
import math
import re
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from typing import Any, Protocol
from zoneinfo import ZoneInfo

from ..config.loader import ImportConfig, default_config
from ..errors import StoreError
from ..models.camera_record import WorkingCondition
from ..models.validation import ErrorKind, LookupFailure, ValidationError, ValidationResult

"""Row validation for camera spreadsheets.

Checks run per row in this order:

1. required fields (configured field order)
2. phone number format
3. dateChecked format, then future-date range
4. workingCondition enum (optional rule, off by default)
5. duplicate lookup against the remote store

Validation never short-circuits: every row is checked and every problem is
collected, so the user can fix the whole file in one pass. The duplicate
lookup is one remote call per row, issued sequentially in row order. A
failing lookup is recorded as a LookupFailure and checking moves on to the
next row.
"""

__all__ = [
    "DuplicateChecker",
    "RecordValidator",
    "is_blank",
    "today_in",
]

logger = logging.getLogger(__name__)

PHONE_RE = re.compile(r"[0-9]{10}")
DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")

# Fields making up the duplicate key
DEVICE_NAME, LATITUDE, LONGITUDE = "deviceName", "latitude", "longitude"


class DuplicateChecker(Protocol):
    def exists(self, device_name: str, latitude: str, longitude: str) -> bool: ...


def is_blank(value: Any) -> bool:
    """Absent, None, NaN, or empty after str() + strip()."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return str(value).strip() == ""


def _text(value: Any) -> str:
    return "" if is_blank(value) else str(value).strip()


def today_in(tz: ZoneInfo) -> date:
    """Current calendar date in the given timezone."""
    return datetime.now(tz).date()


class RecordValidator:
    """Validate raw spreadsheet rows.

    Args:
        checker: Duplicate lookup capability (usually the camera store)
        config: Field set, enabled rules, timezone
        today: Fixed reference date; when None the current date in the
            configured timezone is taken at the start of each validate() call
    """

    def __init__(
        self,
        checker: DuplicateChecker,
        config: ImportConfig | None = None,
        today: date | None = None,
    ) -> None:
        self.checker = checker
        self.config = config or default_config()
        self._today = today

    def validate(self, rows: Sequence[Mapping[str, Any]]) -> ValidationResult:
        today = self._today or today_in(self.config.tzinfo)
        errors: list[ValidationError] = []
        lookup_failures: list[LookupFailure] = []

        for idx, row in enumerate(rows, start=1):
            row_errors = self._check_fields(idx, row, today)
            if self.config.rule_enabled("duplicate"):
                try:
                    dup = self._check_duplicate(idx, row)
                except StoreError as e:
                    logger.warning("duplicate check failed row=%d: %s", idx, e)
                    lookup_failures.append(LookupFailure(row_index=idx, reason=str(e)))
                    dup = None
                if dup is not None:
                    row_errors.append(dup)
            errors.extend(row_errors)

        logger.debug(
            "validated rows=%d errors=%d lookup_failures=%d",
            len(rows),
            len(errors),
            len(lookup_failures),
        )
        return ValidationResult(errors=errors, lookup_failures=lookup_failures)

    def validate_row(self, row: Mapping[str, Any], row_index: int = 1) -> list[ValidationError]:
        """Field and format checks for a single row (no duplicate lookup)."""
        today = self._today or today_in(self.config.tzinfo)
        return self._check_fields(row_index, row, today)

    def _check_fields(self, idx: int, row: Mapping[str, Any], today: date) -> list[ValidationError]:
        cfg = self.config
        out: list[ValidationError] = []

        if cfg.rule_enabled("required"):
            for field_name in cfg.required_fields:
                if is_blank(row.get(field_name)):
                    out.append(ValidationError(idx, field_name, ErrorKind.MISSING_FIELD))

        if cfg.rule_enabled("phone"):
            phone = row.get("phoneNumber")
            if not is_blank(phone):
                value = _text(phone)
                if not PHONE_RE.fullmatch(value):
                    out.append(ValidationError(idx, "phoneNumber", ErrorKind.INVALID_PHONE, value))

        if cfg.rule_enabled("date"):
            checked = row.get("dateChecked")
            if not is_blank(checked):
                date_error = self._check_date(idx, _text(checked), today)
                if date_error is not None:
                    out.append(date_error)

        if cfg.rule_enabled("working_condition"):
            condition = row.get("workingCondition")
            if not is_blank(condition) and _text(condition) not in WorkingCondition.values():
                out.append(
                    ValidationError(
                        idx, "workingCondition", ErrorKind.INVALID_WORKING_CONDITION, _text(condition)
                    )
                )

        return out

    @staticmethod
    def _check_date(idx: int, value: str, today: date) -> ValidationError | None:
        if not DATE_RE.fullmatch(value):
            return ValidationError(idx, "dateChecked", ErrorKind.INVALID_DATE_FORMAT, value)
        try:
            parsed = datetime.strptime(value, "%Y-%m-%d").date()
        except ValueError:
            # 2023-02-30 のような存在しない日付も形式エラー扱い
            return ValidationError(idx, "dateChecked", ErrorKind.INVALID_DATE_FORMAT, value)
        if parsed > today:
            return ValidationError(idx, "dateChecked", ErrorKind.FUTURE_DATE, value)
        return None

    def _check_duplicate(self, idx: int, row: Mapping[str, Any]) -> ValidationError | None:
        key = (_text(row.get(DEVICE_NAME)), _text(row.get(LATITUDE)), _text(row.get(LONGITUDE)))
        try:
            found = self.checker.exists(*key)
        except StoreError as e:
            e.row_index = idx
            raise
        if not found:
            return None
        return ValidationError(idx, DEVICE_NAME, ErrorKind.DUPLICATE, key[0], context=key)
