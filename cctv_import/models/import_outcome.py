from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .validation import ValidationError

"""Import outcome models.

An import ends in exactly one of three outcomes:

- Imported: every row validated and was persisted
- ValidationFailed: at least one row failed validation, nothing persisted
- InfrastructureError: environment / IO failure (file, parser, remote store)

The outcomes are returned as data; the CLI maps them to exit codes.
"""

__all__ = [
    "OutcomeStatus",
    "ImportOutcome",
    "Imported",
    "ValidationFailed",
    "InfrastructureError",
]


class OutcomeStatus(Enum):
    """Terminal state of one import operation."""
    IMPORTED = "imported"
    VALIDATION_FAILED = "validation_failed"
    INFRASTRUCTURE_ERROR = "infrastructure_error"


@dataclass(frozen=True)
class ImportOutcome:
    """Common base for the three outcomes."""

    @property
    def status(self) -> OutcomeStatus:  # pragma: no cover (overridden)
        raise NotImplementedError

    @property
    def ok(self) -> bool:
        return self.status is OutcomeStatus.IMPORTED


@dataclass(frozen=True)
class Imported(ImportOutcome):
    count: int  # persisted row count

    @property
    def status(self) -> OutcomeStatus:
        return OutcomeStatus.IMPORTED


@dataclass(frozen=True)
class ValidationFailed(ImportOutcome):
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def status(self) -> OutcomeStatus:
        return OutcomeStatus.VALIDATION_FAILED

    def messages(self) -> list[str]:
        return [e.message for e in self.errors]


@dataclass(frozen=True)
class InfrastructureError(ImportOutcome):
    """Operation aborted by an environment failure.

    Attributes:
        reason: User-facing description
        row_index: 1-based row being processed when the failure happened (None if file-level)
        persisted: Rows already written before the failure (no rollback)
    """
    reason: str
    row_index: int | None = None
    persisted: int = 0

    @property
    def status(self) -> OutcomeStatus:
        return OutcomeStatus.INFRASTRUCTURE_ERROR
