"""CCTV camera bulk import: spreadsheet validation, duplicate reconciliation and persistence."""

__version__ = "0.1.0"
