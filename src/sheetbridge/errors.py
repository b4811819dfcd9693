"""Error types and the classifier that maps them onto HTTP status classes."""

import logging
from enum import Enum
from typing import Any, Optional

import httplib2
from google.auth import exceptions as google_auth_exceptions
from googleapiclient.errors import HttpError

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "An internal server error occurred."
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred."


class ErrorKind(str, Enum):
    """Outcome classes for sheet operations."""

    OK = "ok"
    INVALID_ARGUMENT = "invalid_argument"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    REMOTE = "remote"
    TRANSPORT = "transport"
    CONFIG = "config"
    UNEXPECTED = "unexpected"


class SheetBridgeError(Exception):
    """Base class for all errors raised by SheetBridge."""

    kind: ErrorKind = ErrorKind.UNEXPECTED


class ConfigError(SheetBridgeError):
    """Credentials or settings are missing or malformed."""

    kind = ErrorKind.CONFIG


class InvalidArgumentError(SheetBridgeError):
    """A parameter is missing, malformed, or out of bounds."""

    kind = ErrorKind.INVALID_ARGUMENT


class NotFoundError(SheetBridgeError):
    """A named tab does not exist."""

    kind = ErrorKind.NOT_FOUND


class ConflictError(SheetBridgeError):
    """A tab with the requested title already exists."""

    kind = ErrorKind.CONFLICT


class RemoteError(SheetBridgeError):
    """The Google Sheets API rejected a request."""

    kind = ErrorKind.REMOTE

    def __init__(self, message: str, status: Optional[int] = None, details: Any = None):
        super().__init__(message)
        self.status = status
        self.details = details


class TransportError(SheetBridgeError):
    """The connection to Google could not be established."""

    kind = ErrorKind.TRANSPORT


TRANSPORT_EXCEPTIONS = (
    google_auth_exceptions.TransportError,
    httplib2.HttpLib2Error,
    ConnectionError,
    TimeoutError,
)

_STATUS_BY_KIND = {
    ErrorKind.OK: 200,
    ErrorKind.INVALID_ARGUMENT: 400,
    ErrorKind.NOT_FOUND: 400,
    ErrorKind.CONFLICT: 409,
}


def http_error_details(error: HttpError) -> Any:
    """Return the structured details of an HttpError, falling back to its reason."""
    details = getattr(error, "error_details", None)
    if details:
        return details
    return error.reason if hasattr(error, "reason") else str(error)


def _http_error_message(error: HttpError) -> str:
    return str(getattr(error, "reason", "") or error)


def is_duplicate_title_error(error: HttpError) -> bool:
    """Check if a Sheets API error reports an already existing tab title."""
    status = getattr(error.resp, "status", None)
    return int(status or 0) == 400 and "already exists" in _http_error_message(error)


def from_http_error(error: HttpError, action: str) -> SheetBridgeError:
    """Wrap a googleapiclient HttpError into a SheetBridge error."""
    if is_duplicate_title_error(error):
        return ConflictError(_http_error_message(error))
    status = getattr(error.resp, "status", None)
    return RemoteError(
        f"Google Sheets API error while {action}",
        status=int(status) if status is not None else None,
        details=http_error_details(error),
    )


def classify(exc: BaseException) -> ErrorKind:
    """Map an exception onto an ErrorKind."""
    if isinstance(exc, SheetBridgeError):
        return exc.kind
    if isinstance(exc, HttpError):
        return ErrorKind.CONFLICT if is_duplicate_title_error(exc) else ErrorKind.REMOTE
    if isinstance(exc, TRANSPORT_EXCEPTIONS):
        return ErrorKind.TRANSPORT
    if isinstance(exc, ValueError):
        return ErrorKind.INVALID_ARGUMENT
    return ErrorKind.UNEXPECTED


def status_for(kind: ErrorKind) -> int:
    """HTTP status code for an ErrorKind."""
    return _STATUS_BY_KIND.get(kind, 500)


def public_message(exc: BaseException, kind: Optional[ErrorKind] = None) -> str:
    """Message safe to return to the browser.

    Client errors echo the exception text; server errors get a generic message
    and the details stay in the log.
    """
    kind = kind or classify(exc)
    if status_for(kind) < 500:
        return str(exc)
    if kind == ErrorKind.UNEXPECTED:
        return UNEXPECTED_ERROR_MESSAGE
    return INTERNAL_ERROR_MESSAGE


def log_failure(exc: BaseException, action: str) -> ErrorKind:
    """Log a failed operation at a level matching its kind and return the kind."""
    kind = classify(exc)
    if kind == ErrorKind.REMOTE:
        details = exc.details if isinstance(exc, RemoteError) else exc
        logger.error(f"Google API error {action}: {details}")
    elif kind == ErrorKind.UNEXPECTED:
        logger.exception(f"Unexpected error {action}: {exc}")
    elif status_for(kind) >= 500:
        logger.error(f"Error {action}: {exc}")
    else:
        logger.warning(f"Rejected {action}: {exc}")
    return kind
