"""HTTP client used for probing and fetching downloads."""

from __future__ import annotations

import logging
from datetime import datetime
from email.message import Message
from email.utils import parsedate_to_datetime
from http import HTTPStatus
from typing import Any
from urllib.parse import parse_qs, unquote, urlsplit

import requests
from requests.adapters import HTTPAdapter

from tdm.http_errors import (
    RangesNotSupportedError,
    RequestCreationError,
    classify_error,
    classify_http_error,
)

log = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "TDM/1.0"

_CONNECT_TIMEOUT = 30.0
_MAX_IDLE_CONNS = 100
_MAX_CONNS_PER_HOST = 16
_DEFAULT_DOWNLOAD_NAME = "download"
_CREATION_ERRORS = (
    requests.exceptions.MissingSchema,
    requests.exceptions.InvalidURL,
    requests.exceptions.InvalidHeader,
)


class Client:
    """A pooled HTTP session with classified errors and no compression."""

    def __init__(self) -> None:
        self._session = requests.Session()
        adapter = HTTPAdapter(
            pool_connections=_MAX_IDLE_CONNS, pool_maxsize=_MAX_CONNS_PER_HOST
        )
        self._session.mount("http://", adapter)
        self._session.mount("https://", adapter)
        self._session.headers["Accept-Encoding"] = "identity"

    def head(self, url: str, headers: dict[str, str] | None = None) -> requests.Response:
        """Send a HEAD request and return the response."""
        return self._send("HEAD", url, self._with_agent(headers))

    def range(
        self,
        url: str,
        start: int,
        end: int,
        headers: dict[str, str] | None = None,
    ) -> requests.Response:
        """Send a ranged GET; raise RangesNotSupportedError unless the reply is 206."""
        request_headers = self._with_agent(headers)
        request_headers["Range"] = f"bytes={start}-{end}"
        response = self._send("GET", url, request_headers)
        if response.status_code != HTTPStatus.PARTIAL_CONTENT:
            log.warning(
                "server doesn't support ranges for %s (status: %d)",
                url,
                response.status_code,
            )
            response.close()
            raise RangesNotSupportedError()
        return response

    def get(self, url: str) -> requests.Response:
        """Send a plain GET and return the streaming response."""
        return self._send("GET", url, {})

    def close(self) -> None:
        """Release pooled connections."""
        self._session.close()

    def __enter__(self) -> Client:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    @staticmethod
    def _with_agent(headers: dict[str, str] | None) -> dict[str, str]:
        merged = {"User-Agent": DEFAULT_USER_AGENT}
        merged.update(headers or {})
        return merged

    def _send(self, method: str, url: str, headers: dict[str, str]) -> requests.Response:
        log.debug("sending %s request to %s", method, url)
        try:
            response = self._session.request(
                method,
                url,
                headers=headers,
                timeout=_CONNECT_TIMEOUT,
                stream=True,
                allow_redirects=True,
            )
        except _CREATION_ERRORS as exc:
            raise RequestCreationError() from exc
        except requests.RequestException as exc:
            log.error("%s request failed for %s: %s", method, url, exc)
            raise classify_error(exc) from exc

        log.debug("%s response for %s: status=%d", method, url, response.status_code)
        if response.status_code >= HTTPStatus.BAD_REQUEST:
            response.close()
            raise classify_http_error(response.status_code)
        return response


def is_downloadable(url: str) -> bool:
    """Probe a URL and report whether it serves downloadable content."""
    try:
        urlsplit(url)
    except ValueError:
        return False

    response: requests.Response | None
    try:
        response = requests.head(url, allow_redirects=True, timeout=_CONNECT_TIMEOUT)
    except (requests.RequestException, ValueError):
        response = None

    if response is None or response.status_code >= HTTPStatus.BAD_REQUEST:
        if response is not None:
            response.close()
        try:
            response = requests.get(url, stream=True, timeout=_CONNECT_TIMEOUT)
        except (requests.RequestException, ValueError):
            return False

    with response:
        scheme = urlsplit(response.url).scheme
        return scheme in ("http", "https") and _is_downloadable_content(response)


def _is_downloadable_content(response: requests.Response) -> bool:
    if response.headers.get("Content-Disposition"):
        return True
    content_type = response.headers.get("Content-Type", "")
    return not content_type.startswith("text/html")


def get_filename(response: requests.Response) -> str:
    """Pick a file name from Content-Disposition, the URL query or the URL path."""
    name = _filename_from_disposition(response.headers.get("Content-Disposition", ""))
    if name:
        return name

    parts = urlsplit(response.url or "")
    query_names = parse_qs(parts.query).get("filename")
    if query_names and query_names[0]:
        return query_names[0]

    base = _path_base(unquote(parts.path))
    if base and base != "/":
        return base
    return _DEFAULT_DOWNLOAD_NAME


def _filename_from_disposition(header: str) -> str | None:
    if not header:
        return None
    message = Message()
    message["Content-Disposition"] = header
    return message.get_filename() or None


def _path_base(path: str) -> str:
    if not path:
        return "."
    stripped = path.rstrip("/")
    if not stripped:
        return "/"
    return stripped.rsplit("/", 1)[-1]


def parse_last_modified(header: str) -> datetime | None:
    """Parse a Last-Modified value; None when empty or malformed."""
    if not header:
        return None
    try:
        return parsedate_to_datetime(header)
    except (TypeError, ValueError, IndexError) as exc:
        log.debug("failed to parse Last-Modified header %r: %s", header, exc)
        return None