"""Tests for error classification."""

import httplib2
import pytest
from google.auth import exceptions as google_auth_exceptions

from sheetbridge.errors import (
    INTERNAL_ERROR_MESSAGE,
    UNEXPECTED_ERROR_MESSAGE,
    ConfigError,
    ConflictError,
    ErrorKind,
    InvalidArgumentError,
    NotFoundError,
    RemoteError,
    TransportError,
    classify,
    from_http_error,
    public_message,
    status_for,
)

from .conftest import make_http_error


class TestClassify:
    @pytest.mark.parametrize(
        "exc, kind",
        [
            (InvalidArgumentError("bad"), ErrorKind.INVALID_ARGUMENT),
            (NotFoundError("gone"), ErrorKind.NOT_FOUND),
            (ConflictError("dup"), ErrorKind.CONFLICT),
            (RemoteError("remote"), ErrorKind.REMOTE),
            (TransportError("down"), ErrorKind.TRANSPORT),
            (ConfigError("creds"), ErrorKind.CONFIG),
            (ValueError("bad int"), ErrorKind.INVALID_ARGUMENT),
            (google_auth_exceptions.TransportError("dns"), ErrorKind.TRANSPORT),
            (httplib2.HttpLib2Error("socket"), ErrorKind.TRANSPORT),
            (ConnectionError("reset"), ErrorKind.TRANSPORT),
            (RuntimeError("boom"), ErrorKind.UNEXPECTED),
            (KeyError("x"), ErrorKind.UNEXPECTED),
        ],
    )
    def test_kinds(self, exc, kind):
        assert classify(exc) == kind

    def test_raw_http_errors(self):
        assert classify(make_http_error(500, "Internal error")) == ErrorKind.REMOTE
        duplicate = make_http_error(400, 'A sheet with the name "A" already exists.')
        assert classify(duplicate) == ErrorKind.CONFLICT


class TestStatus:
    @pytest.mark.parametrize(
        "kind, status",
        [
            (ErrorKind.OK, 200),
            (ErrorKind.INVALID_ARGUMENT, 400),
            (ErrorKind.NOT_FOUND, 400),
            (ErrorKind.CONFLICT, 409),
            (ErrorKind.REMOTE, 500),
            (ErrorKind.TRANSPORT, 500),
            (ErrorKind.CONFIG, 500),
            (ErrorKind.UNEXPECTED, 500),
        ],
    )
    def test_status_for(self, kind, status):
        assert status_for(kind) == status


class TestPublicMessage:
    def test_client_errors_echo_message(self):
        assert public_message(InvalidArgumentError("startIndex 9 is out of bounds")) == (
            "startIndex 9 is out of bounds"
        )
        assert public_message(NotFoundError("Sheet with name 'X' not found")) == (
            "Sheet with name 'X' not found"
        )

    def test_remote_details_hidden(self):
        exc = RemoteError("Google Sheets API error", status=403, details="secret project id 1234")
        message = public_message(exc)
        assert message == INTERNAL_ERROR_MESSAGE
        assert "1234" not in message

    def test_unexpected_gets_generic_message(self):
        assert public_message(RuntimeError("stack detail")) == UNEXPECTED_ERROR_MESSAGE


class TestFromHttpError:
    def test_duplicate_title(self):
        error = from_http_error(make_http_error(400, 'A sheet with the name "A" already exists.'), "adding sheet")
        assert isinstance(error, ConflictError)

    def test_other_errors_keep_status_and_details(self):
        error = from_http_error(make_http_error(404, "Requested entity was not found."), "reading")
        assert isinstance(error, RemoteError)
        assert error.status == 404
        assert "not found" in str(error.details)
        assert "reading" in str(error)
