"""Error types for HTTP downloads and helpers that classify failures."""

from __future__ import annotations

import asyncio
import concurrent.futures
import http.client
import socket
from collections.abc import Iterator
from http import HTTPStatus

import requests


class DownloadError(Exception):
    """Base class of the classified download errors."""

    default_message = "download error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class HeadNotSupportedError(DownloadError):
    default_message = "HEAD method not supported by server"


class RangesNotSupportedError(DownloadError):
    default_message = "byte ranges not supported by server"


class InvalidContentRangeError(DownloadError):
    default_message = "invalid Content-Range header"


class TimeoutProblemError(DownloadError):
    default_message = "operation timed out"


class NetworkProblemError(DownloadError):
    default_message = "network-related error"


class IOProblemError(DownloadError):
    default_message = "I/O error"


class RequestCreationError(DownloadError):
    default_message = "failed to create request"


class ServerProblemError(DownloadError):
    default_message = "server error (5xx)"


class TooManyRequestsError(DownloadError):
    default_message = "too many requests (429)"


class ResourceNotFoundError(DownloadError):
    default_message = "resource not found (404)"


class AccessDeniedError(DownloadError):
    default_message = "access denied (403)"


class AuthenticationError(DownloadError):
    default_message = "authentication required (401)"


class GoneError(DownloadError):
    default_message = "resource gone (410)"


class ClientRequestError(DownloadError):
    default_message = "client error (4xx)"


class UnknownProblemError(DownloadError):
    default_message = "unknown error"


class UnexpectedEOFError(DownloadError):
    default_message = "unexpected EOF"


_STATUS_ERRORS: dict[int, type[DownloadError]] = {
    HTTPStatus.NOT_FOUND: ResourceNotFoundError,
    HTTPStatus.FORBIDDEN: AccessDeniedError,
    HTTPStatus.UNAUTHORIZED: AuthenticationError,
    HTTPStatus.GONE: GoneError,
    HTTPStatus.METHOD_NOT_ALLOWED: HeadNotSupportedError,
    HTTPStatus.REQUESTED_RANGE_NOT_SATISFIABLE: RangesNotSupportedError,
    HTTPStatus.TOO_MANY_REQUESTS: TooManyRequestsError,
}

_CANCELLED = (asyncio.CancelledError, concurrent.futures.CancelledError)
_TIMEOUTS = (TimeoutError, requests.Timeout)
_EOF = (EOFError, http.client.IncompleteRead, requests.exceptions.ChunkedEncodingError)
_NETWORK = (ConnectionError, socket.gaierror, socket.herror, requests.ConnectionError)
_FALLBACK = (HeadNotSupportedError, RangesNotSupportedError, UnexpectedEOFError)


def _causes(err: BaseException | None) -> Iterator[BaseException]:
    seen: set[int] = set()
    while err is not None and id(err) not in seen:
        seen.add(id(err))
        yield err
        err = err.__cause__


def _matches(err: BaseException, kinds: tuple[type[BaseException], ...]) -> bool:
    return any(isinstance(e, kinds) for e in _causes(err))


def classify_http_error(status_code: int) -> DownloadError | None:
    """Map an HTTP status code to an error, or None for non-error codes."""
    known = _STATUS_ERRORS.get(status_code)
    if known is not None:
        return known()
    if status_code >= HTTPStatus.INTERNAL_SERVER_ERROR:
        return ServerProblemError()
    if status_code >= HTTPStatus.BAD_REQUEST:
        return ClientRequestError()
    return None


def classify_error(err: BaseException | None) -> BaseException | None:
    """Map an arbitrary failure to one of the download error kinds.

    Cancellation is returned unchanged.
    """
    if err is None:
        return None
    if _matches(err, _CANCELLED):
        return err
    if _matches(err, _TIMEOUTS):
        return TimeoutProblemError()
    if _matches(err, _EOF):
        return UnexpectedEOFError()
    if _matches(err, _NETWORK):
        return NetworkProblemError()
    return UnknownProblemError()


def is_fallback_error(err: BaseException | None) -> bool:
    """Whether the error means a simpler download strategy should be tried."""
    return err is not None and _matches(err, _FALLBACK)