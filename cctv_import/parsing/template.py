from __future__ import annotations

from pathlib import Path

import pandas as pd

from ..models.camera_record import CAMERA_FIELDS
from .reader import FileFormat, detect_format

"""Upload template generation.

The template carries only the header row, in the documented column order.
Column order is not significant to the importer.
"""


def write_template(path: Path, example_row: bool = False) -> Path:
    """Write an empty CSV or XLSX template (format chosen by extension).

    Args:
        path: Output path ending in .csv or .xlsx
        example_row: Include one illustrative data row after the header

    Returns:
        The written path
    """
    fmt = detect_format(path.name)
    rows = [_EXAMPLE_ROW] if example_row else []
    df = pd.DataFrame(rows, columns=list(CAMERA_FIELDS))
    path.parent.mkdir(parents=True, exist_ok=True)
    if fmt is FileFormat.CSV:
        df.to_csv(path, index=False)
    elif fmt is FileFormat.XLSX:
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name="Cameras", index=False)
    else:
        # xls 書き出しエンジンは pandas から削除済み
        raise ValueError(f"template format not writable: {path.name} (use .csv or .xlsx)")
    return path


_EXAMPLE_ROW = {
    "ownerName": "Ramesh Kumar",
    "phoneNumber": "9876543210",
    "deviceName": "Gate Cam 1",
    "deviceType": "Dome",
    "latitude": "30.7333",
    "longitude": "76.7794",
    "address": "Sector 17 Plaza",
    "city": "Chandigarh",
    "organization": "Sector 17 Traders Association",
    "workingCondition": "Working",
    "policeId": "PB1234",
    "dateChecked": "2024-01-15",
    "username": "officer.ramesh",
}
