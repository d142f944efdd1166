from __future__ import annotations

import json
import logging
from collections.abc import Iterable

from ..models.validation import ValidationError

"""Validation report handoff.

The report travels as a JSON array of message strings (row numbers are part
of each message, not separate fields). The receiving side deserializes it and
shows one table row per message; when the payload cannot be parsed the raw
string is shown as a single entry.
"""

__all__ = [
    "serialize_report",
    "parse_report",
    "render_report",
]

logger = logging.getLogger(__name__)

NO_ERRORS = "No validation errors found."


def serialize_report(errors: Iterable[ValidationError | str]) -> str:
    messages = [e if isinstance(e, str) else e.message for e in errors]
    return json.dumps(messages, ensure_ascii=False)


def parse_report(raw: str | None) -> list[str]:
    """Deserialize a report; falls back to ``[raw]`` on malformed input."""
    if not raw:
        return []
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.debug("report is not valid JSON: %s", e)
        return [raw]
    if not isinstance(data, list):
        return [raw]
    return [str(m) for m in data]


def render_report(messages: list[str], title: str = "Validation Report") -> str:
    """Render messages as a plain-text single-column table."""
    if not messages:
        return f"{title}\n{NO_ERRORS}"
    header = "Error Message"
    width = max(len(header), *(len(m) for m in messages))
    rule = "-" * width
    lines = [title, rule, header, rule]
    lines.extend(messages)
    lines.append(rule)
    return "\n".join(lines)
