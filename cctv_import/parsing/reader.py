from __future__ import annotations

import io
import math
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from pathlib import PurePath
from typing import Any

import pandas as pd

from ..errors import EmptyFileError, FileParseError, UnsupportedFileTypeError

"""Spreadsheet / CSV reader.

Converts raw file bytes into an ordered list of raw rows (column name -> string
or None). The first line of a CSV, or the first row of the first worksheet of
an XLS/XLSX workbook, is the header row.

- Header cells are trimmed and mapped through the configured field aliases
  (e.g. policeID -> policeId)
- Rows where every cell is blank are skipped
- Cell values are kept as strings; Excel numbers and dates are rendered the
  way they display (30 not 30.0, 2024-01-05 not a datetime)
"""

__all__ = [
    "FileFormat",
    "ParsedFile",
    "detect_format",
    "parse_file",
]


class FileFormat(Enum):
    CSV = "csv"
    XLS = "xls"
    XLSX = "xlsx"


@dataclass
class ParsedFile:
    file_name: str
    file_format: FileFormat
    columns: list[str]
    rows: list[dict[str, str | None]]  # 正規化済 (列名→値)


def detect_format(file_name: str) -> FileFormat:
    """Determine the file format from the extension (case-insensitive).

    Raises:
        UnsupportedFileTypeError: extension is not csv / xls / xlsx
    """
    suffix = PurePath(file_name).suffix.lower().lstrip(".")
    try:
        return FileFormat(suffix)
    except ValueError:
        raise UnsupportedFileTypeError(
            f"unsupported file type: '{file_name}' (expected .csv, .xls or .xlsx)"
        ) from None


def _cell_to_str(val: Any) -> str | None:
    """Render one cell as a string; blank cells become None."""
    if val is None:
        return None
    if isinstance(val, float):
        if math.isnan(val):
            return None
        if val.is_integer():
            return str(int(val))
        return repr(val)
    if isinstance(val, (datetime, pd.Timestamp)):
        if pd.isna(val):
            return None
        if (val.hour, val.minute, val.second, val.microsecond) == (0, 0, 0, 0):
            return val.strftime("%Y-%m-%d")
        return val.isoformat()
    if isinstance(val, date):
        return val.isoformat()
    if isinstance(val, bool):
        return str(val).upper()
    try:
        if pd.isna(val):
            return None
    except (TypeError, ValueError):
        pass
    return str(val)


def _read_frame(file_bytes: bytes, file_format: FileFormat) -> pd.DataFrame:
    buf = io.BytesIO(file_bytes)
    if file_format is FileFormat.CSV:
        # 全列を文字列として読み込み、"NA" 等の自動 NaN 変換は行わない
        # index_col=False: 行末カンマ付きの CSV でも先頭列をインデックスにしない
        return pd.read_csv(buf, dtype=str, keep_default_na=False, skip_blank_lines=True, index_col=False)
    engine = "openpyxl" if file_format is FileFormat.XLSX else "xlrd"
    # dtype=object: セルの型推論をせず、文字列セルは文字列のまま受け取る
    return pd.read_excel(buf, sheet_name=0, header=0, engine=engine, dtype=object)


def parse_file(
    file_bytes: bytes,
    file_name: str,
    field_aliases: Mapping[str, str] | None = None,
) -> ParsedFile:
    """Parse file bytes into raw rows in file order.

    Parameters
    ----------
    file_bytes: raw file content
    file_name: used for format detection and messages
    field_aliases: header name -> canonical field name

    Raises
    ------
    UnsupportedFileTypeError: unknown extension (nothing is parsed)
    FileParseError: bytes cannot be read as the detected format
    EmptyFileError: no data rows
    """
    file_format = detect_format(file_name)
    try:
        df = _read_frame(file_bytes, file_format)
    except pd.errors.EmptyDataError as e:
        raise EmptyFileError(f"no data found in '{file_name}'") from e
    except Exception as e:
        raise FileParseError(f"failed to parse '{file_name}' as {file_format.value}: {e}") from e

    aliases = dict(field_aliases or {})
    columns = []
    for c in df.columns.tolist():
        name = str(c).strip()
        columns.append(aliases.get(name, name))

    rows: list[dict[str, str | None]] = []
    for raw in df.itertuples(index=False, name=None):
        row: dict[str, str | None] = {}
        for col, val in zip(columns, raw, strict=False):
            cell = _cell_to_str(val)
            if cell is not None and cell.strip() == "":
                cell = "" if file_format is FileFormat.CSV else None
            row[col] = cell
        # Skip rows that are entirely blank
        if all(v is None or v == "" for v in row.values()):
            continue
        rows.append(row)

    if not rows:
        raise EmptyFileError(f"no data found in '{file_name}'")

    return ParsedFile(file_name=file_name, file_format=file_format, columns=columns, rows=rows)
