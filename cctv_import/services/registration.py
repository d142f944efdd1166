from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from typing import Any

from ..config.loader import ImportConfig
from ..db.camera_store import CameraStore
from ..models.camera_record import Submitter
from ..models.import_outcome import ImportOutcome
from .importer import BulkImporter


def register_camera(
    store: CameraStore,
    fields: Mapping[str, Any],
    submitter: Submitter | None = None,
    config: ImportConfig | None = None,
    today: date | None = None,
) -> ImportOutcome:
    """Register a single camera entered by hand.

    Runs the same validation, duplicate check and normalization as a one-row
    spreadsheet; error messages therefore refer to "Row 1".
    """
    importer = BulkImporter(store, config=config, submitter=submitter, today=today)
    return importer.import_rows([dict(fields)], source="<manual>")
