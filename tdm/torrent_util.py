"""Helpers for recognising torrent files and magnet links."""

from __future__ import annotations

import logging
import re
from urllib.parse import unquote_plus, urlsplit

import requests

log = logging.getLogger(__name__)

_TORRENT_CONTENT_TYPES = frozenset({"application/x-bittorrent", "application/torrent"})
_PROBE_TIMEOUT = 30.0
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def has_torrent_file(url: str) -> bool:
    """Whether a URL points at a .torrent file, by suffix or by its Content-Type."""
    if url.endswith(".torrent"):
        return True

    try:
        response = requests.head(url, allow_redirects=True, timeout=_PROBE_TIMEOUT)
    except (requests.RequestException, ValueError) as exc:
        log.debug("HEAD probe failed for %s: %s", url, exc)
        return False

    with response:
        return response.headers.get("Content-Type", "") in _TORRENT_CONTENT_TYPES


def _parse_query(raw_query: str) -> dict[str, list[str]]:
    """Parse a query string strictly, rejecting bad escapes and semicolons."""
    values: dict[str, list[str]] = {}
    for piece in raw_query.split("&"):
        if not piece:
            continue
        if ";" in piece:
            raise ValueError("invalid semicolon separator in query")
        key, _, value = piece.partition("=")
        if _BAD_ESCAPE.search(key) or _BAD_ESCAPE.search(value):
            raise ValueError(f"invalid URL escape in {piece!r}")
        values.setdefault(unquote_plus(key), []).append(unquote_plus(value))
    return values


def is_valid_magnet_link(url: str) -> bool:
    """Whether the text is a magnet link carrying a BitTorrent info hash."""
    if not url.startswith("magnet:?"):
        return False

    try:
        parts = urlsplit(url)
    except ValueError:
        return False

    if parts.scheme != "magnet":
        return False

    try:
        params = _parse_query(parts.query)
    except ValueError:
        return False

    topics = params.get("xt")
    if not topics or not topics[0]:
        return False
    return topics[0].startswith("urn:btih:")