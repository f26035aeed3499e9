import asyncio
import http.client

import pytest
import requests

from tdm.http_errors import (
    AccessDeniedError,
    AuthenticationError,
    ClientRequestError,
    GoneError,
    HeadNotSupportedError,
    IOProblemError,
    NetworkProblemError,
    RangesNotSupportedError,
    ResourceNotFoundError,
    ServerProblemError,
    TimeoutProblemError,
    TooManyRequestsError,
    UnexpectedEOFError,
    UnknownProblemError,
    classify_error,
    classify_http_error,
    is_fallback_error,
)


@pytest.mark.parametrize(
    "status_code, expected",
    [
        (404, ResourceNotFoundError),
        (403, AccessDeniedError),
        (401, AuthenticationError),
        (410, GoneError),
        (405, HeadNotSupportedError),
        (416, RangesNotSupportedError),
        (429, TooManyRequestsError),
        (500, ServerProblemError),
        (503, ServerProblemError),
        (450, ClientRequestError),
        (400, ClientRequestError),
    ],
)
def test_classify_http_error(status_code, expected):
    assert type(classify_http_error(status_code)) is expected


@pytest.mark.parametrize("status_code", [200, 100])
def test_classify_http_error_success_codes(status_code):
    assert classify_http_error(status_code) is None


def test_classify_error_none():
    assert classify_error(None) is None


def test_classify_error_cancelled_is_returned_unchanged():
    err = asyncio.CancelledError()
    assert classify_error(err) is err


@pytest.mark.parametrize(
    "err, expected",
    [
        (TimeoutError(), TimeoutProblemError),
        (requests.ConnectTimeout(), TimeoutProblemError),
        (EOFError(), UnexpectedEOFError),
        (http.client.IncompleteRead(b""), UnexpectedEOFError),
        (ConnectionRefusedError("simulated network error"), NetworkProblemError),
        (requests.ConnectionError("simulated network error"), NetworkProblemError),
        (RuntimeError("some random error"), UnknownProblemError),
    ],
)
def test_classify_error(err, expected):
    assert type(classify_error(err)) is expected


def test_classify_error_follows_cause_chain():
    err = RuntimeError("wrapped")
    err.__cause__ = EOFError()
    result = classify_error(err)
    assert type(result) is UnexpectedEOFError
    assert str(result) == "unexpected EOF"


@pytest.mark.parametrize(
    "err, expected",
    [
        (HeadNotSupportedError(), True),
        (RangesNotSupportedError(), True),
        (UnexpectedEOFError(), True),
        (TimeoutProblemError(), False),
        (IOProblemError(), False),
        (None, False),
        (RuntimeError("random"), False),
    ],
)
def test_is_fallback_error(err, expected):
    assert is_fallback_error(err) is expected


def test_error_messages():
    assert str(ResourceNotFoundError()) == "resource not found (404)"
    assert str(UnexpectedEOFError()) == "unexpected EOF"