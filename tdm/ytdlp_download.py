"""Persistent record of a download handled by yt-dlp."""

from __future__ import annotations

import json
import os
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from tdm.status import Status
from tdm.torrent_download import _format_time, _parse_time

_COMPACT = (",", ":")


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class YtdlpDownload:
    """What is stored about a yt-dlp download."""

    id: uuid.UUID = field(default_factory=uuid.uuid4)
    url: str = ""
    directory: str = ""
    path: str = ""
    status: Status = Status.PENDING
    priority: int = 0
    total_size: int = 0
    downloaded: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    @classmethod
    def create(cls, url: str, directory: str, priority: int) -> YtdlpDownload:
        """Build a new pending record with fresh timestamps."""
        now = _now()
        return cls(
            url=url,
            directory=directory,
            status=Status.PENDING,
            priority=priority,
            created_at=now,
            updated_at=now,
        )

    def download_type(self) -> str:
        """The label under which this record is stored."""
        return "ytdlp"

    @property
    def filename(self) -> str:
        """The base name of the output file, or an empty string when unknown."""
        path = self.path
        return os.path.basename(path) if path else ""

    def set_path(self, path: str) -> None:
        """Record the output file path in normalised form."""
        with self._lock:
            self.path = os.path.normpath(path)
            self.updated_at = _now()

    def set_status(self, status: Status) -> None:
        """Change the lifecycle state."""
        with self._lock:
            self.status = Status(status)
            self.updated_at = _now()

    def set_priority(self, priority: int) -> None:
        """Change the scheduling priority."""
        with self._lock:
            self.priority = priority
            self.updated_at = _now()

    def set_progress(self, downloaded: int, total: int) -> None:
        """Record how many bytes have arrived out of how many."""
        with self._lock:
            self.downloaded = downloaded
            self.total_size = total
            self.updated_at = _now()

    def to_json(self) -> str:
        """Serialise the record as compact JSON."""
        with self._lock:
            payload = {
                "id": str(self.id),
                "url": self.url,
                "dir": self.directory,
                "path": self.path,
                "status": int(self.status),
                "priority": self.priority,
                "totalSize": self.total_size,
                "downloaded": self.downloaded,
                "createdAt": _format_time(self.created_at),
                "updatedAt": _format_time(self.updated_at),
            }
        return json.dumps(payload, separators=_COMPACT)

    @classmethod
    def from_json(cls, data: str | bytes) -> YtdlpDownload:
        """Rebuild a record from its JSON form; raise ValueError when malformed."""
        try:
            obj = json.loads(data)
        except json.JSONDecodeError as exc:
            raise ValueError(f"invalid yt-dlp download JSON: {exc}") from exc
        if not isinstance(obj, dict):
            raise ValueError("yt-dlp download JSON must be an object")
        try:
            raw_id = obj.get("id")
            return cls(
                id=uuid.UUID(raw_id) if raw_id else uuid.UUID(int=0),
                url=str(obj.get("url", "")),
                directory=str(obj.get("dir", "")),
                path=str(obj.get("path", "")),
                status=Status(int(obj.get("status", Status.PENDING))),
                priority=int(obj.get("priority", 0)),
                total_size=int(obj.get("totalSize", 0)),
                downloaded=int(obj.get("downloaded", 0)),
                created_at=_parse_time(obj.get("createdAt")),
                updated_at=_parse_time(obj.get("updatedAt")),
            )
        except (TypeError, ValueError, AttributeError) as exc:
            raise ValueError(f"invalid yt-dlp download field: {exc}") from exc