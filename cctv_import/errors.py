from __future__ import annotations

"""Infrastructure error hierarchy.

These exceptions describe environment / IO failures (unreadable or unsupported
files, remote store failures). They are raised by the parsing and store layers
and translated into an ``InfrastructureError`` outcome by the importer.
Row-level data problems are never raised; see ``models.validation``.
"""

__all__ = [
    "CameraImportError",
    "UnsupportedFileTypeError",
    "FileParseError",
    "EmptyFileError",
    "StoreError",
]


class CameraImportError(Exception):
    """Base class for infrastructure failures during an import."""


class UnsupportedFileTypeError(CameraImportError):
    """Raised when the file extension is not csv / xls / xlsx."""


class FileParseError(CameraImportError):
    """Raised when file bytes cannot be parsed into rows."""


class EmptyFileError(CameraImportError):
    """Raised when a file parses successfully but holds no data rows."""


class StoreError(CameraImportError):
    """Remote store call failed (query or insert).

    row_index is the 1-based data row being processed when the call failed,
    or None when the failure is not tied to a row.
    """

    def __init__(self, message: str, row_index: int | None = None) -> None:
        super().__init__(message)
        self.row_index = row_index
