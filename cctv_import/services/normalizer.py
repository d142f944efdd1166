from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from typing import Any

from ..config.loader import UNKNOWN_POLICE_ID
from ..models.camera_record import CAMERA_FIELDS, CameraRecord, Submitter
from ..validation.validator import is_blank

"""Row -> CameraRecord normalization.

Applied only to rows that passed validation. Defaults for blank values:

- policeId: submitter's police id, else the UNKNOWN_ID sentinel
- dateChecked: today's date (YYYY-MM-DD)
- username: blank; never filled from the submitter, so the record keeps its
  declared origin
"""


def normalize_row(
    row: Mapping[str, Any],
    submitter: Submitter | None = None,
    today: date | None = None,
    unknown_police_id: str = UNKNOWN_POLICE_ID,
) -> CameraRecord:
    values: dict[str, str] = {}
    for name in CAMERA_FIELDS:
        raw = row.get(name)
        values[name] = "" if is_blank(raw) else str(raw).strip()

    if not values["policeId"]:
        fallback = submitter.police_id.strip() if submitter and submitter.police_id else ""
        values["policeId"] = fallback or unknown_police_id

    if not values["dateChecked"]:
        values["dateChecked"] = (today or date.today()).isoformat()

    return CameraRecord(**values)
