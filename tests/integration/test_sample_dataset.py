from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from cctv_import.db.camera_store import InMemoryCameraStore
from cctv_import.models.import_outcome import Imported, ValidationFailed
from cctv_import.services.importer import BulkImporter
from scripts.gen_sample_dataset import generate_cameras, write_dataset

"""Generated datasets go through the full pipeline."""


@pytest.mark.parametrize("suffix", [".csv", ".xlsx"])
def test_clean_dataset_imports(tmp_path: Path, suffix: str):
    path = tmp_path / f"cameras{suffix}"
    write_dataset(generate_cameras(50, seed=1), path)
    store = InMemoryCameraStore()
    outcome = BulkImporter(store, today=date.today()).import_path(path)
    assert outcome == Imported(count=50)
    assert len(store.exists_calls) == 50


def test_defective_dataset_is_rejected_whole(tmp_path: Path):
    path = tmp_path / "cameras.csv"
    write_dataset(generate_cameras(40, seed=3, invalid_ratio=0.25), path)
    store = InMemoryCameraStore()
    outcome = BulkImporter(store, today=date.today()).import_path(path)
    assert isinstance(outcome, ValidationFailed)
    assert 1 <= len({e.row_index for e in outcome.errors}) <= 10
    assert store.inserted == []


def test_write_dataset_rejects_unknown_suffix(tmp_path: Path):
    with pytest.raises(ValueError):
        write_dataset(generate_cameras(1), tmp_path / "cameras.json")
