from __future__ import annotations

from pathlib import Path

import pytest
from openpyxl import load_workbook

from cctv_import.errors import UnsupportedFileTypeError
from cctv_import.models.camera_record import CAMERA_FIELDS
from cctv_import.models.import_outcome import Imported
from cctv_import.parsing.template import write_template
from cctv_import.services.importer import BulkImporter

from tests.helpers import FIXED_TODAY


def test_csv_template_header_only(tmp_path: Path):
    out = write_template(tmp_path / "tpl" / "cameras.csv")
    assert out.read_text(encoding="utf-8").strip() == ",".join(CAMERA_FIELDS)


def test_xlsx_template_header(tmp_path: Path):
    out = write_template(tmp_path / "cameras.xlsx")
    wb = load_workbook(out)
    ws = wb["Cameras"]
    assert [c.value for c in ws[1]] == list(CAMERA_FIELDS)
    assert ws.max_row == 1


def test_xls_template_not_writable(tmp_path: Path):
    with pytest.raises(ValueError):
        write_template(tmp_path / "cameras.xls")


def test_unknown_extension(tmp_path: Path):
    with pytest.raises(UnsupportedFileTypeError):
        write_template(tmp_path / "cameras.txt")


def test_example_template_imports_cleanly(tmp_path: Path, store):
    out = write_template(tmp_path / "cameras.xlsx", example_row=True)
    outcome = BulkImporter(store, today=FIXED_TODAY).import_path(out)
    assert outcome == Imported(count=1)
    assert store.inserted[0].deviceName == "Gate Cam 1"
