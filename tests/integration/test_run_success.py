from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from cctv_import.cli import main as cli_main
from cctv_import.db.camera_store import InMemoryCameraStore

"""End-to-end CLI run: xlsx and csv uploads against a dry-run store."""


def _make_excel_file(path: Path, rows: list[list[object]]) -> Path:
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(rows).to_excel(writer, sheet_name="Cameras", header=False, index=False)
    return path


@pytest.fixture
def captured_store():
    store = InMemoryCameraStore()
    return store


def test_xlsx_run_with_aliased_headers(temp_workdir: Path, write_config, captured_store, monkeypatch, capsys):
    monkeypatch.setattr("cctv_import.cli.app.InMemoryCameraStore", lambda: captured_store)
    header = [
        "Owner Name", "phoneNumber", "deviceName", "deviceType", "latitude", "longitude",
        "address", "city", "organization", "workingCondition", "policeID", "dateChecked", "username",
    ]
    xlsx = _make_excel_file(
        temp_workdir / "data" / "cameras.xlsx",
        [
            header,
            ["Ramesh", 9876543210, "Gate 1", "Dome", 30.7333, 76.7794, "Sector 17", "Chandigarh",
             "Traders", "Working", "PB1", "2024-01-15", "officer"],
            [None] * len(header),
            ["Suresh", 9123456780, "Gate 2", "Bullet", 30.7046, 76.7179, "Phase 7", "Mohali",
             "RWA", "Not Working", "PB2", "2024-02-01", "officer"],
        ],
    )

    code = cli_main(["import", str(xlsx)])
    out = capsys.readouterr().out

    assert code == 0
    assert "SUMMARY file=cameras.xlsx status=imported inserted=2 errors=0 failed_row=-" in out
    first, second = captured_store.inserted
    assert first.ownerName == "Ramesh"
    assert first.phoneNumber == "9876543210"
    assert first.latitude == "30.7333"
    assert first.policeId == "PB1"
    assert second.workingCondition == "Not Working"


def test_csv_run_then_reimport_reports_duplicates(temp_workdir: Path, write_config, captured_store, monkeypatch, capsys):
    monkeypatch.setattr("cctv_import.cli.app.InMemoryCameraStore", lambda: captured_store)
    csv_path = temp_workdir / "data" / "cameras.csv"
    csv_path.write_text(
        "ownerName,phoneNumber,deviceName,deviceType,latitude,longitude,address,city,"
        "organization,workingCondition,policeId,dateChecked,username\n"
        "Ramesh,9876543210,Gate 1,Dome,30.7333,76.7794,Sector 17,Chandigarh,Traders,Working,PB1,2024-01-15,officer\n",
        encoding="utf-8",
    )

    assert cli_main(["import", str(csv_path)]) == 0
    capsys.readouterr()

    assert cli_main(["import", str(csv_path)]) == 2
    out = capsys.readouterr().out
    assert 'Row 1 is a duplicate entry: Device "Gate 1" at (30.7333, 76.7794) already exists.' in out
    assert len(captured_store.inserted) == 1
