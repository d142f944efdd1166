from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

"""Config loader.

Responsibilities:
- Load YAML config (config/import.yml by default)
- Validate against the packaged JSON schema (config_schema.json)
- Apply defaults for every missing key

Field-name casing and the enforced rule set are configuration because the
source spreadsheets disagree on them (policeId vs policeID, rule sets that
differ between revisions).
"""

SCHEMA_PATH = Path(__file__).parent / "config_schema.json"

DEFAULT_REQUIRED_FIELDS: tuple[str, ...] = (
    "ownerName",
    "phoneNumber",
    "deviceName",
    "deviceType",
    "latitude",
    "longitude",
    "address",
    "city",
    "organization",
    "workingCondition",
    "policeId",
    "username",
    "dateChecked",
)
DEFAULT_RULES: frozenset[str] = frozenset({"required", "phone", "date", "duplicate"})
DEFAULT_FIELD_ALIASES: dict[str, str] = {"policeID": "policeId"}
UNKNOWN_POLICE_ID = "UNKNOWN_ID"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class DatabaseConfig:
    """Connection fallback; environment variables take precedence."""
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class ImportConfig:
    required_fields: tuple[str, ...] = DEFAULT_REQUIRED_FIELDS
    rules: frozenset[str] = DEFAULT_RULES
    field_aliases: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_FIELD_ALIASES))
    unknown_police_id: str = UNKNOWN_POLICE_ID
    timezone: str = "UTC"  # "today" の基準タイムゾーン
    cameras_table: str = "cameras"
    users_table: str = "users"
    database: DatabaseConfig = field(default_factory=DatabaseConfig)

    def rule_enabled(self, rule: str) -> bool:
        return rule in self.rules

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


def default_config() -> ImportConfig:
    """Configuration used when no config file is supplied."""
    return ImportConfig()


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing or not valid JSON, or the
            config data violates the schema (unknown keys, wrong types,
            unknown rule names, invalid table identifiers).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path) -> ImportConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)

    tz = data.get("timezone", "UTC")
    try:
        ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigError(f"unknown timezone: {tz}") from e

    db_raw = data.get("database") or {}
    db = DatabaseConfig(
        host=db_raw.get("host"),
        port=db_raw.get("port"),
        user=db_raw.get("user"),
        password=db_raw.get("password"),
        database=db_raw.get("database"),
        dsn=db_raw.get("dsn"),
    )
    aliases = dict(DEFAULT_FIELD_ALIASES)
    aliases.update(data.get("field_aliases") or {})
    return ImportConfig(
        required_fields=tuple(data.get("required_fields", DEFAULT_REQUIRED_FIELDS)),
        rules=frozenset(data.get("rules", DEFAULT_RULES)),
        field_aliases=aliases,
        unknown_police_id=data.get("unknown_police_id", UNKNOWN_POLICE_ID),
        timezone=tz,
        cameras_table=data.get("cameras_table", "cameras"),
        users_table=data.get("users_table", "users"),
        database=db,
    )
