"""Persistent storage of download records in a SQLite key-value table."""

from __future__ import annotations

import json
import os
import sqlite3
import threading
from dataclasses import dataclass
from typing import Any, Protocol

_OPEN_TIMEOUT = 1.0
_COMPACT = (",", ":")


class RepositoryError(Exception):
    """Raised when the download store cannot be used."""


class DownloadNotFoundError(RepositoryError):
    """Raised when a download record does not exist."""

    def __init__(self, message: str = "download not found") -> None:
        super().__init__(message)


@dataclass(frozen=True)
class StoredObject:
    """A stored record: its type label and its JSON payload as compact text."""

    type: str
    data: str


class _Storable(Protocol):
    id: Any

    def download_type(self) -> str: ...

    def to_json(self) -> str: ...


class Repository:
    """Saves, lists and deletes download records keyed by their id."""

    def __init__(self, db_path: str | os.PathLike[str]) -> None:
        self._lock = threading.Lock()
        try:
            self._conn = sqlite3.connect(
                os.fspath(db_path), timeout=_OPEN_TIMEOUT, check_same_thread=False
            )
        except sqlite3.Error as exc:
            raise RepositoryError(f"failed to open database: {exc}") from exc
        try:
            with self._conn:
                self._conn.execute(
                    "CREATE TABLE IF NOT EXISTS downloads "
                    "(id TEXT PRIMARY KEY, record TEXT NOT NULL)"
                )
        except sqlite3.Error as exc:
            self._conn.close()
            raise RepositoryError(f"failed to create downloads table: {exc}") from exc

    def save(self, download: _Storable) -> None:
        """Store or replace a download record."""
        raw = download.to_json()
        payload = json.loads(raw)
        record = json.dumps(
            {"type": download.download_type(), "data": payload}, separators=_COMPACT
        )
        with self._lock, self._conn:
            self._conn.execute(
                "INSERT OR REPLACE INTO downloads (id, record) VALUES (?, ?)",
                (str(download.id), record),
            )

    def get_all(self) -> dict[str, StoredObject]:
        """Return every stored record keyed by download id."""
        with self._lock:
            rows = self._conn.execute("SELECT id, record FROM downloads").fetchall()
        result: dict[str, StoredObject] = {}
        for key, record in rows:
            obj = json.loads(record)
            result[key] = StoredObject(
                type=obj.get("type", ""),
                data=json.dumps(obj.get("data"), separators=_COMPACT),
            )
        return result

    def delete(self, download_id: Any) -> None:
        """Remove a record; raise DownloadNotFoundError when it is absent."""
        with self._lock, self._conn:
            cursor = self._conn.execute(
                "DELETE FROM downloads WHERE id = ?", (str(download_id),)
            )
            if cursor.rowcount == 0:
                raise DownloadNotFoundError()

    def close(self) -> None:
        """Close the underlying database."""
        with self._lock:
            self._conn.close()

    def __enter__(self) -> Repository:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()