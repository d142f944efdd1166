from __future__ import annotations
import json
import re
from pathlib import Path
from cctv_import.logging.error_log import ErrorLogBuffer, ErrorRecord


def test_error_log_buffer_flush(temp_workdir: Path):
    buf = ErrorLogBuffer()
    buf.append(ErrorRecord.create("f1.csv", 1, "INVALID_PHONE", "bad phone"))
    buf.append(ErrorRecord.create("f1.csv", 2, "MISSING_FIELD", "missing city"))
    assert len(buf) == 2
    path = buf.flush()
    assert path is not None and path.exists()
    assert path.parent == Path("logs")
    assert re.fullmatch(r"errors-\d{8}-\d{6}\.log", path.name)
    lines = path.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 2
    for raw in lines:
        obj = json.loads(raw)
        assert set(obj.keys()) == {"timestamp", "file", "row", "error_type", "message"}
    # flush 後バッファクリア
    assert len(buf) == 0


def test_flush_empty_buffer_writes_nothing(tmp_path: Path):
    buf = ErrorLogBuffer(logs_dir=tmp_path / "logs")
    assert buf.flush() is None
    assert not (tmp_path / "logs").exists()


def test_multiple_flushes_append_to_same_file(tmp_path: Path):
    buf = ErrorLogBuffer(logs_dir=tmp_path)
    buf.append(ErrorRecord.create("a.csv", 1, "DUPLICATE", "dup"))
    first = buf.flush()
    buf.append(ErrorRecord.create("b.csv", 1, "DUPLICATE", "dup"))
    second = buf.flush()
    assert first == second
    assert len(first.read_text(encoding="utf-8").splitlines()) == 2


def test_records_returns_copy(tmp_path: Path):
    buf = ErrorLogBuffer(logs_dir=tmp_path)
    buf.append(ErrorRecord.create("a.csv", 1, "DUPLICATE", "dup"))
    buf.records.clear()
    assert len(buf) == 1


def test_log_file_named_after_upload(tmp_path: Path):
    buf = ErrorLogBuffer(logs_dir=tmp_path, source="Ward 5/cams (v2).xlsx")
    buf.append(ErrorRecord.create("cams (v2).xlsx", 1, "DUPLICATE", "dup"))
    path = buf.flush()
    assert re.fullmatch(r"errors-cams_v2-\d{8}-\d{6}\.log", path.name)


def test_unusable_source_falls_back_to_plain_name(tmp_path: Path):
    buf = ErrorLogBuffer(logs_dir=tmp_path, source="...")
    assert re.fullmatch(r"errors-\d{8}-\d{6}\.log", buf.file_path.name)


def test_counts_by_type_most_frequent_first(tmp_path: Path):
    buf = ErrorLogBuffer(logs_dir=tmp_path)
    buf.append(ErrorRecord.create("a.csv", 1, "INVALID_PHONE", "p"))
    buf.append(ErrorRecord.create("a.csv", 2, "MISSING_FIELD", "m"))
    buf.append(ErrorRecord.create("a.csv", 2, "MISSING_FIELD", "m"))
    assert buf.counts_by_type() == {"MISSING_FIELD": 2, "INVALID_PHONE": 1}
