"""Persistent record of a torrent download and the torrent client interface."""

from __future__ import annotations

import json
import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

from tdm.status import Status

_ZERO_TIME = "0001-01-01T00:00:00Z"
_FRACTION = re.compile(r"\.(\d+)")
_COMPACT = (",", ":")


class TorrentHandle(Protocol):
    """A torrent added to a client."""

    @property
    def name(self) -> str: ...

    @property
    def info_hash(self) -> str: ...

    @property
    def length(self) -> int: ...

    def has_info(self) -> bool: ...

    def bytes_completed(self) -> int: ...

    def is_complete(self) -> bool: ...

    def verify_data(self) -> None: ...

    def download_all(self) -> None: ...

    def drop(self) -> None: ...


class TorrentClient(Protocol):
    """Something that adds torrents and waits for their metadata."""

    def get_torrent_handler(self, url: str, is_magnet: bool) -> TorrentHandle: ...


def _format_time(value: datetime | None) -> str:
    if value is None:
        return _ZERO_TIME
    if value.tzinfo is None:
        value = value.astimezone()
    text = value.isoformat()
    if text.endswith("+00:00"):
        text = text[:-6] + "Z"
    return text


def _parse_time(value: Any) -> datetime | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"invalid time value {value!r}")
    if value.startswith("0001-01-01T00:00:00"):
        return None
    text = value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    return datetime.fromisoformat(text)


@dataclass
class TorrentDownload:
    """What is stored about a torrent download."""

    id: uuid.UUID = field(default_factory=uuid.uuid4)
    name: str = ""
    is_magnet: bool = False
    url: str = ""
    total_size: int = 0
    downloaded: int = 0
    uploaded: int = 0
    status: Status = Status.PENDING
    start_time: datetime | None = None
    end_time: datetime | None = None
    protocol: str = "torrent"
    directory: str = ""
    priority: int = 0
    info_hash: str = ""

    @classmethod
    def create(
        cls,
        client: TorrentClient,
        url: str,
        is_magnet: bool,
        directory: str,
        priority: int,
    ) -> TorrentDownload:
        """Fetch a torrent's metadata through the client and build a new record."""
        download = cls(
            url=url,
            is_magnet=is_magnet,
            directory=directory,
            priority=priority,
            status=Status.PENDING,
            protocol="torrent",
        )
        handle = client.get_torrent_handler(url, is_magnet)
        try:
            download.name = handle.name
            download.info_hash = handle.info_hash
            download.total_size = handle.length
        finally:
            handle.drop()
        return download

    def download_type(self) -> str:
        """The label under which this record is stored."""
        return "torrent"

    def to_json(self) -> str:
        """Serialise the record as compact JSON."""
        return json.dumps(
            {
                "id": str(self.id),
                "name": self.name,
                "isMagnet": self.is_magnet,
                "url": self.url,
                "totalSize": self.total_size,
                "downloaded": self.downloaded,
                "uploaded": self.uploaded,
                "status": int(self.status),
                "startTime": _format_time(self.start_time),
                "endTime": _format_time(self.end_time),
                "protocol": self.protocol,
                "dir": self.directory,
                "priority": self.priority,
                "infoHash": self.info_hash,
            },
            separators=_COMPACT,
        )

    @classmethod
    def from_json(cls, data: str | bytes) -> TorrentDownload:
        """Rebuild a record from its JSON form; raise ValueError when malformed."""
        try:
            obj = json.loads(data)
        except json.JSONDecodeError as exc:
            raise ValueError(f"invalid torrent download JSON: {exc}") from exc
        if not isinstance(obj, dict):
            raise ValueError("torrent download JSON must be an object")
        try:
            raw_id = obj.get("id")
            return cls(
                id=uuid.UUID(raw_id) if raw_id else uuid.UUID(int=0),
                name=str(obj.get("name", "")),
                is_magnet=bool(obj.get("isMagnet", False)),
                url=str(obj.get("url", "")),
                total_size=int(obj.get("totalSize", 0)),
                downloaded=int(obj.get("downloaded", 0)),
                uploaded=int(obj.get("uploaded", 0)),
                status=Status(int(obj.get("status", Status.PENDING))),
                start_time=_parse_time(obj.get("startTime")),
                end_time=_parse_time(obj.get("endTime")),
                protocol=str(obj.get("protocol", "")),
                directory=str(obj.get("dir", "")),
                priority=int(obj.get("priority", 0)),
                info_hash=str(obj.get("infoHash", "")),
            )
        except (TypeError, ValueError, AttributeError) as exc:
            raise ValueError(f"invalid torrent download field: {exc}") from exc