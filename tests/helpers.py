from __future__ import annotations

import io
from datetime import date

import pandas as pd

from cctv_import.models.camera_record import CAMERA_FIELDS

"""Row / file builders shared by the test modules."""

FIXED_TODAY = date(2024, 6, 15)


def camera_row(**overrides: object) -> dict[str, object]:
    """A fully valid raw row; keyword overrides replace single fields."""
    row: dict[str, object] = {
        "ownerName": "Ramesh Kumar",
        "phoneNumber": "9876543210",
        "deviceName": "Cam1",
        "deviceType": "Dome",
        "latitude": "30.0",
        "longitude": "76.0",
        "address": "Sector 17 Plaza",
        "city": "Chandigarh",
        "organization": "Sector 17 Traders",
        "workingCondition": "Working",
        "policeId": "PB1234",
        "dateChecked": "2024-01-15",
        "username": "officer.ramesh",
    }
    row.update(overrides)
    return row


def csv_bytes(rows: list[dict[str, object]], columns: list[str] | None = None) -> bytes:
    df = pd.DataFrame(rows, columns=columns or list(CAMERA_FIELDS))
    return df.to_csv(index=False).encode("utf-8")


def xlsx_bytes(rows: list[list[object]]) -> bytes:
    """Workbook bytes; rows[0] is the header row."""
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        pd.DataFrame(rows).to_excel(writer, sheet_name="Cameras", header=False, index=False)
    return buf.getvalue()
