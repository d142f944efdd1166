# Shared pytest fixtures
from __future__ import annotations

from pathlib import Path

import pytest

from cctv_import.db.camera_store import InMemoryCameraStore
from cctv_import.logging.init import reset_logging

from tests.helpers import camera_row


@pytest.fixture(autouse=True)
def _fresh_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch, tmp_path: Path) -> Path:
    (tmp_path / "config").mkdir()
    (tmp_path / "data").mkdir()
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DISABLE_DB_CONNECT", "1")
    return tmp_path


@pytest.fixture()
def sample_config_yaml() -> str:
    return """required_fields:
  - ownerName
  - phoneNumber
  - deviceName
  - deviceType
  - latitude
  - longitude
  - address
  - city
  - organization
  - workingCondition
  - policeId
  - username
  - dateChecked
rules: [required, phone, date, duplicate]
field_aliases:
  policeID: policeId
  Owner Name: ownerName
unknown_police_id: UNKNOWN_ID
timezone: UTC
cameras_table: cameras
users_table: users
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: cctv
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def store() -> InMemoryCameraStore:
    return InMemoryCameraStore()


@pytest.fixture()
def store_with_cam1() -> InMemoryCameraStore:
    return InMemoryCameraStore(
        documents=[
            {**camera_row(ownerName="Someone Else", phoneNumber="9000000000")},
        ]
    )
