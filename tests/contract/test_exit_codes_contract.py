from __future__ import annotations

from pathlib import Path

from cctv_import.cli import main as cli_main
from cctv_import.cli.app import EXIT_FATAL, EXIT_SUCCESS, EXIT_VALIDATION_FAILED

from tests.helpers import camera_row, csv_bytes

"""Exit code contract: 0 imported, 2 validation failed, 1 fatal."""


def test_exit_code_values():
    assert (EXIT_SUCCESS, EXIT_FATAL, EXIT_VALIDATION_FAILED) == (0, 1, 2)


def test_exit_code_success(temp_workdir: Path, write_config):
    path = temp_workdir / "data" / "ok.csv"
    path.write_bytes(csv_bytes([camera_row()]))
    assert cli_main(["import", str(path)]) == 0


def test_exit_code_validation_failed(temp_workdir: Path, write_config):
    path = temp_workdir / "data" / "bad.csv"
    path.write_bytes(csv_bytes([camera_row(workingCondition="")]))
    assert cli_main(["import", str(path)]) == 2


def test_exit_code_fatal_on_empty_file(temp_workdir: Path, write_config):
    path = temp_workdir / "data" / "empty.csv"
    path.write_bytes(b"")
    assert cli_main(["import", str(path)]) == 1


def test_exit_code_fatal_on_config_error(temp_workdir: Path, capsys):
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text("rules: [nope]\n", encoding="utf-8")
    path = temp_workdir / "data" / "ok.csv"
    path.write_bytes(csv_bytes([camera_row()]))
    assert cli_main(["import", str(path)]) == 1
    assert "ERROR config:" in capsys.readouterr().out
