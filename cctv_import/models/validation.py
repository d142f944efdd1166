from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

"""Validation result models.

Validation problems are carried as structured records (row, field, kind, value)
and only turned into display strings at the presentation boundary via
``ValidationError.message``. The wording of each message is fixed because the
report screen shows them verbatim.
"""

__all__ = [
    "ErrorKind",
    "LookupFailure",
    "ValidationError",
    "ValidationResult",
]


class ErrorKind(Enum):
    """Classification of a row-level validation problem (UPPER_SNAKE)."""
    MISSING_FIELD = "MISSING_FIELD"
    INVALID_PHONE = "INVALID_PHONE"
    INVALID_DATE_FORMAT = "INVALID_DATE_FORMAT"
    FUTURE_DATE = "FUTURE_DATE"
    INVALID_WORKING_CONDITION = "INVALID_WORKING_CONDITION"
    DUPLICATE = "DUPLICATE"


@dataclass(frozen=True)
class ValidationError:
    """One detected rule violation, tied to a 1-based data row (header excluded).

    Attributes:
        row_index: 1-based data row number
        field: Field the problem was found on (deviceName for duplicates)
        kind: Error classification
        value: Offending value as trimmed (None for missing fields)
        context: Extra values needed by the message (duplicate key parts)
    """
    row_index: int
    field: str
    kind: ErrorKind
    value: str | None = None
    context: tuple[str, ...] = ()

    @property
    def message(self) -> str:
        i = self.row_index
        if self.kind is ErrorKind.MISSING_FIELD:
            return f'Row {i} is missing value for "{self.field}".'
        if self.kind is ErrorKind.INVALID_PHONE:
            return f'Row {i} has an invalid phone number: "{self.value}".'
        if self.kind is ErrorKind.INVALID_DATE_FORMAT:
            return f'Row {i} has an invalid date format: "{self.value}".'
        if self.kind is ErrorKind.FUTURE_DATE:
            return f'Row {i} has a future date: "{self.value}".'
        if self.kind is ErrorKind.INVALID_WORKING_CONDITION:
            return f'Row {i} has an invalid working condition: "{self.value}".'
        # DUPLICATE
        device, lat, lon = self.context
        return (
            f'Row {i} is a duplicate entry: Device "{device}" at ({lat}, {lon}) already exists.'
        )

    def __str__(self) -> str:  # pragma: no cover (trivial)
        return self.message


@dataclass(frozen=True)
class LookupFailure:
    """Duplicate-check query that failed at the infrastructure level."""
    row_index: int
    reason: str


@dataclass(frozen=True)
class ValidationResult:
    """Aggregated outcome of validating a full row sequence."""
    errors: list[ValidationError] = field(default_factory=list)
    lookup_failures: list[LookupFailure] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        """True iff no validation error was emitted for any row."""
        return not self.errors

    def messages(self) -> list[str]:
        return [e.message for e in self.errors]
