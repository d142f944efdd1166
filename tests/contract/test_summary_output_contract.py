from __future__ import annotations

import re
from pathlib import Path

from cctv_import.cli import main as cli_main

from tests.helpers import camera_row, csv_bytes

"""SUMMARY line contract: exactly one line, fixed key order."""

SUMMARY_RE = re.compile(
    r"^SUMMARY file=(?P<file>\S+) status=(?P<status>imported|validation_failed|infrastructure_error) "
    r"inserted=(?P<inserted>\d+) errors=(?P<errors>\d+) failed_row=(?P<failed_row>\d+|-) "
    r"elapsed_sec=(?P<elapsed>\d+(\.\d+)?)$"
)


def _summary_lines(out: str) -> list[str]:
    return [line for line in out.splitlines() if line.startswith("SUMMARY")]


def test_summary_line_format_on_success(temp_workdir: Path, write_config, capsys):
    path = temp_workdir / "data" / "cams.csv"
    path.write_bytes(csv_bytes([camera_row(), camera_row(deviceName="Cam2")]))
    cli_main(["import", str(path)])
    (line,) = _summary_lines(capsys.readouterr().out)
    m = SUMMARY_RE.match(line)
    assert m is not None
    assert m["status"] == "imported" and m["inserted"] == "2" and m["failed_row"] == "-"


def test_summary_line_format_on_validation_failure(temp_workdir: Path, write_config, capsys):
    path = temp_workdir / "data" / "cams.csv"
    path.write_bytes(csv_bytes([camera_row(phoneNumber="x"), camera_row(deviceName="Cam2", phoneNumber="y")]))
    cli_main(["import", str(path)])
    (line,) = _summary_lines(capsys.readouterr().out)
    m = SUMMARY_RE.match(line)
    assert m is not None
    assert m["status"] == "validation_failed" and m["errors"] == "2" and m["inserted"] == "0"
