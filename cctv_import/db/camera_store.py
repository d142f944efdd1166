from __future__ import annotations

import itertools
import logging
import time
from collections.abc import Iterable
from typing import Any, Protocol

import psycopg2
from psycopg2 import sql

from ..errors import StoreError
from ..models.camera_record import CAMERA_FIELDS, CameraRecord

"""Remote camera store adapters.

The importer needs four things from the store: an equality existence check on
(deviceName, latitude, longitude), a single-record insert into the cameras
collection, equality queries for listing, and a lookup of a submitter's police
id in the users collection.

PostgresCameraStore implements them over a psycopg2 cursor (one statement per
call, no batching; the connection is expected to be in autocommit mode so each
insert stands alone). InMemoryCameraStore is used for dry runs and tests.

Every driver failure is wrapped in StoreError.
"""

__all__ = [
    "CameraStore",
    "PostgresCameraStore",
    "InMemoryCameraStore",
]

logger = logging.getLogger(__name__)

_FIELD_SET = frozenset(CAMERA_FIELDS)


class CameraStore(Protocol):
    def exists(self, device_name: str, latitude: str, longitude: str) -> bool: ...

    def insert(self, record: CameraRecord) -> str: ...

    def find(self, **equals: str) -> list[dict[str, Any]]: ...

    def all(self) -> list[dict[str, Any]]: ...

    def get_user_police_id(self, username: str) -> str | None: ...


def _check_filter_fields(fields: Iterable[str]) -> None:
    unknown = sorted(set(fields) - _FIELD_SET)
    if unknown:
        raise ValueError(f"unknown camera fields in filter: {unknown}")


class PostgresCameraStore:
    """Camera store over a psycopg2 cursor.

    Table layout (see ensure_schema): one text column per camera field, quoted
    camelCase identifiers, plus a bigserial ``id``.
    """

    def __init__(self, cursor: Any, cameras_table: str = "cameras", users_table: str = "users") -> None:
        self.cursor = cursor
        self.cameras_table = cameras_table
        self.users_table = users_table

    def _execute(self, query: sql.Composable, params: Iterable[Any] | None = None) -> None:
        start = time.time()
        try:
            self.cursor.execute(query, tuple(params) if params is not None else None)
        except psycopg2.Error as e:
            raise StoreError(str(e).strip() or type(e).__name__) from e
        finally:
            logger.debug("store query elapsed_sec=%.4f", time.time() - start)

    def _fetch_dicts(self) -> list[dict[str, Any]]:
        try:
            rows = self.cursor.fetchall()
        except psycopg2.Error as e:
            raise StoreError(f"failed fetching rows: {e}") from e
        names = [d[0] for d in self.cursor.description]
        return [dict(zip(names, r, strict=False)) for r in rows]

    def ensure_schema(self) -> None:
        """Create the cameras and users tables if they do not exist."""
        columns = sql.SQL(", ").join(
            sql.SQL("{} text NOT NULL").format(sql.Identifier(c)) for c in CAMERA_FIELDS
        )
        self._execute(
            sql.SQL("CREATE TABLE IF NOT EXISTS {} (id bigserial PRIMARY KEY, {})").format(
                sql.Identifier(self.cameras_table), columns
            )
        )
        self._execute(
            sql.SQL(
                "CREATE INDEX IF NOT EXISTS {} ON {} ({}, {}, {})"
            ).format(
                sql.Identifier(f"{self.cameras_table}_duplicate_key_idx"),
                sql.Identifier(self.cameras_table),
                sql.Identifier("deviceName"),
                sql.Identifier("latitude"),
                sql.Identifier("longitude"),
            )
        )
        self._execute(
            sql.SQL(
                "CREATE TABLE IF NOT EXISTS {} (username text PRIMARY KEY, {} text)"
            ).format(sql.Identifier(self.users_table), sql.Identifier("policeId"))
        )

    def exists(self, device_name: str, latitude: str, longitude: str) -> bool:
        query = sql.SQL("SELECT 1 FROM {} WHERE {} = %s AND {} = %s AND {} = %s LIMIT 1").format(
            sql.Identifier(self.cameras_table),
            sql.Identifier("deviceName"),
            sql.Identifier("latitude"),
            sql.Identifier("longitude"),
        )
        self._execute(query, (device_name, latitude, longitude))
        try:
            return self.cursor.fetchone() is not None
        except psycopg2.Error as e:
            raise StoreError(f"failed fetching duplicate check result: {e}") from e

    def insert(self, record: CameraRecord) -> str:
        doc = record.to_document()
        cols = list(doc.keys())
        query = sql.SQL("INSERT INTO {} ({}) VALUES ({}) RETURNING id").format(
            sql.Identifier(self.cameras_table),
            sql.SQL(",").join(sql.Identifier(c) for c in cols),
            sql.SQL(",").join(sql.Placeholder() for _ in cols),
        )
        self._execute(query, [doc[c] for c in cols])
        try:
            returned = self.cursor.fetchone()
        except psycopg2.Error as e:
            raise StoreError(f"failed fetching RETURNING id: {e}") from e
        return str(returned[0]) if returned else ""

    def find(self, **equals: str) -> list[dict[str, Any]]:
        _check_filter_fields(equals)
        query = sql.SQL("SELECT * FROM {}").format(sql.Identifier(self.cameras_table))
        if equals:
            query += sql.SQL(" WHERE ") + sql.SQL(" AND ").join(
                sql.SQL("{} = %s").format(sql.Identifier(k)) for k in equals
            )
        query += sql.SQL(" ORDER BY id")
        self._execute(query, list(equals.values()))
        return self._fetch_dicts()

    def all(self) -> list[dict[str, Any]]:
        return self.find()

    def get_user_police_id(self, username: str) -> str | None:
        query = sql.SQL("SELECT {} FROM {} WHERE username = %s").format(
            sql.Identifier("policeId"), sql.Identifier(self.users_table)
        )
        self._execute(query, (username,))
        try:
            row = self.cursor.fetchone()
        except psycopg2.Error as e:
            raise StoreError(f"failed fetching user: {e}") from e
        return row[0] if row else None


class InMemoryCameraStore:
    """List-backed store with the same equality semantics as the database.

    Failure injection (tests / rehearsal):
        fail_exists_for: deviceNames whose existence check raises StoreError
        fail_insert_at: 1-based insert call number that raises StoreError
    """

    def __init__(
        self,
        documents: Iterable[dict[str, Any]] | None = None,
        users: dict[str, str] | None = None,
        fail_exists_for: set[str] | None = None,
        fail_insert_at: int | None = None,
    ) -> None:
        self._ids = itertools.count(1)
        self.documents: list[dict[str, Any]] = []
        for doc in documents or []:
            self.documents.append({"id": str(next(self._ids)), **doc})
        self.users = dict(users or {})
        self.fail_exists_for = set(fail_exists_for or ())
        self.fail_insert_at = fail_insert_at
        self.exists_calls: list[tuple[str, str, str]] = []
        self.inserted: list[CameraRecord] = []
        self._insert_calls = 0

    def exists(self, device_name: str, latitude: str, longitude: str) -> bool:
        self.exists_calls.append((device_name, latitude, longitude))
        if device_name in self.fail_exists_for:
            raise StoreError(f"simulated query failure for device '{device_name}'")
        return any(
            d.get("deviceName") == device_name
            and d.get("latitude") == latitude
            and d.get("longitude") == longitude
            for d in self.documents
        )

    def insert(self, record: CameraRecord) -> str:
        self._insert_calls += 1
        if self.fail_insert_at is not None and self._insert_calls == self.fail_insert_at:
            raise StoreError(f"simulated insert failure on call {self._insert_calls}")
        doc_id = str(next(self._ids))
        self.documents.append({"id": doc_id, **record.to_document()})
        self.inserted.append(record)
        return doc_id

    def find(self, **equals: str) -> list[dict[str, Any]]:
        _check_filter_fields(equals)
        return [dict(d) for d in self.documents if all(d.get(k) == v for k, v in equals.items())]

    def all(self) -> list[dict[str, Any]]:
        return [dict(d) for d in self.documents]

    def get_user_police_id(self, username: str) -> str | None:
        return self.users.get(username)
