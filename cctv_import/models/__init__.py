"""Domain models for the CCTV camera bulk import pipeline."""

from .camera_record import CAMERA_FIELDS, CameraRecord, Submitter, WorkingCondition
from .error_record import ErrorRecord
from .import_outcome import (
    ImportOutcome,
    Imported,
    InfrastructureError,
    OutcomeStatus,
    ValidationFailed,
)
from .validation import ErrorKind, LookupFailure, ValidationError, ValidationResult

__all__ = [
    # Camera data
    "CAMERA_FIELDS",
    "CameraRecord",
    "Submitter",
    "WorkingCondition",
    # Validation
    "ErrorKind",
    "LookupFailure",
    "ValidationError",
    "ValidationResult",
    # Outcomes
    "ImportOutcome",
    "Imported",
    "InfrastructureError",
    "OutcomeStatus",
    "ValidationFailed",
    # Logging
    "ErrorRecord",
]
