from __future__ import annotations
import pytest
from pathlib import Path
from zoneinfo import ZoneInfo
from cctv_import.config.loader import (
    DEFAULT_REQUIRED_FIELDS,
    DEFAULT_RULES,
    ConfigError,
    default_config,
    load_config,
)


def test_load_config_success(write_config: Path):
    cfg = load_config(write_config)
    assert cfg.required_fields == DEFAULT_REQUIRED_FIELDS
    assert cfg.rules == DEFAULT_RULES
    assert cfg.timezone == "UTC"
    assert cfg.field_aliases["Owner Name"] == "ownerName"
    assert cfg.field_aliases["policeID"] == "policeId"
    assert cfg.database.host == "localhost"
    assert cfg.database.port == 5432
    assert cfg.database.dsn is None


def test_default_config_values():
    cfg = default_config()
    assert cfg.unknown_police_id == "UNKNOWN_ID"
    assert cfg.cameras_table == "cameras"
    assert cfg.tzinfo == ZoneInfo("UTC")
    assert cfg.rule_enabled("duplicate")
    assert not cfg.rule_enabled("working_condition")


def test_load_config_missing_file(temp_workdir: Path):
    missing = temp_workdir / "config" / "not_exists.yml"
    with pytest.raises(ConfigError):
        load_config(missing)


def test_load_config_empty_file_uses_defaults(temp_workdir: Path):
    cfg_path = temp_workdir / "config" / "import.yml"
    cfg_path.write_text("", encoding="utf-8")
    cfg = load_config(cfg_path)
    assert cfg == default_config()


def test_load_config_invalid_yaml(temp_workdir: Path):
    cfg_path = temp_workdir / "config" / "import.yml"
    cfg_path.write_text("rules: [required\n", encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_config(cfg_path)
    assert "invalid yaml" in str(e.value)


def test_load_config_root_must_be_mapping(temp_workdir: Path):
    cfg_path = temp_workdir / "config" / "import.yml"
    cfg_path.write_text("- required\n- phone\n", encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_config(cfg_path)
    assert "mapping" in str(e.value)


def test_load_config_unknown_rule(write_config: Path):
    text = write_config.read_text(encoding="utf-8").replace(
        "rules: [required, phone, date, duplicate]", "rules: [required, email]"
    )
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_config(write_config)
    assert "config validation failed" in str(e.value)


def test_load_config_opt_in_working_condition(write_config: Path):
    text = write_config.read_text(encoding="utf-8").replace(
        "rules: [required, phone, date, duplicate]",
        "rules: [required, phone, date, working_condition, duplicate]",
    )
    write_config.write_text(text, encoding="utf-8")
    assert load_config(write_config).rule_enabled("working_condition")


def test_load_config_extra_field(write_config: Path):
    # additionalProperties: false
    text = write_config.read_text(encoding="utf-8") + "\nextra_field: not_allowed\n"
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_config(write_config)
    assert "config validation failed" in str(e.value)


def test_load_config_rejects_bad_table_identifier(write_config: Path):
    text = write_config.read_text(encoding="utf-8").replace(
        "cameras_table: cameras", 'cameras_table: "cameras; drop table users"'
    )
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(write_config)


def test_load_config_unknown_timezone(write_config: Path):
    text = write_config.read_text(encoding="utf-8").replace("timezone: UTC", "timezone: Mars/Olympus")
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_config(write_config)
    assert "unknown timezone" in str(e.value)
