"""
Apify API error taxonomy and classifier.

Every failure that leaves this package is an ``ApifyError`` whose ``kind``
is one of a closed set of ``ErrorKind`` values. The classifier functions in
this module are the only place a kind is derived from raw transport data
(status code + body, or an httpx exception).
"""

from __future__ import annotations

import json
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

import httpx


class ErrorKind(str, Enum):
    """Closed set of error kinds."""

    CLIENT_ERROR = "client_error"
    SERVER_ERROR = "server_error"
    NETWORK_ERROR = "network_error"
    RATE_LIMIT_ERROR = "rate_limit_error"
    AUTHENTICATION_ERROR = "authentication_error"
    AUTHORIZATION_ERROR = "authorization_error"
    NOT_FOUND_ERROR = "not_found_error"
    VALIDATION_ERROR = "validation_error"
    CONFLICT_ERROR = "conflict_error"
    TIMEOUT_ERROR = "timeout_error"
    STREAM_ERROR = "stream_error"
    FILE_ERROR = "file_error"
    UNKNOWN_ERROR = "unknown_error"

    def __str__(self) -> str:
        return self.value


class ApifyError(Exception):
    """
    A classified Apify error.

    Errors are values: the client returns them inside a ``Result`` rather
    than raising them. They subclass ``Exception`` only so that
    ``Result.unwrap()`` and callers that prefer exceptions can raise them.

    Attributes:
        kind: Error kind from the closed ``ErrorKind`` set
        message: Human-readable message (from the API body when available)
        details: Read-only mapping; carries ``status_code`` for HTTP errors
    """

    def __init__(
        self,
        kind: ErrorKind | str,
        message: str,
        details: Mapping[str, Any] | None = None,
    ) -> None:
        kind = ErrorKind(kind)
        details = MappingProxyType(dict(details or {}))
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.details = details

    @property
    def status_code(self) -> int | None:
        """HTTP status code, if the error came from a response."""
        return self.details.get("status_code")

    def __str__(self) -> str:
        base = f"[{self.kind.value}] {self.message}"
        if self.status_code is not None:
            return f"{base} (HTTP {self.status_code})"
        return base

    def __repr__(self) -> str:
        return f"ApifyError(kind={self.kind.value!r}, message={self.message!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ApifyError):
            return NotImplemented
        return (
            self.kind == other.kind
            and self.message == other.message
            and dict(self.details) == dict(other.details)
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.message))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "details": dict(self.details),
        }


# Exact status matches, checked before the 4xx/5xx ranges.
_STATUS_KINDS: dict[int, tuple[ErrorKind, str]] = {
    400: (ErrorKind.VALIDATION_ERROR, "Bad request"),
    401: (ErrorKind.AUTHENTICATION_ERROR, "Authentication failed"),
    403: (ErrorKind.AUTHORIZATION_ERROR, "Access forbidden"),
    404: (ErrorKind.NOT_FOUND_ERROR, "Resource not found"),
    409: (ErrorKind.CONFLICT_ERROR, "Resource conflict"),
    422: (ErrorKind.VALIDATION_ERROR, "Validation failed"),
    429: (ErrorKind.RATE_LIMIT_ERROR, "Rate limit exceeded"),
    500: (ErrorKind.SERVER_ERROR, "Internal server error"),
    502: (ErrorKind.SERVER_ERROR, "Bad gateway"),
    503: (ErrorKind.SERVER_ERROR, "Service unavailable"),
    504: (ErrorKind.TIMEOUT_ERROR, "Gateway timeout"),
}


def kind_for_status(status_code: int | None) -> tuple[ErrorKind, str]:
    """
    Map a status code to its error kind and default message.

    Args:
        status_code: HTTP status code (None when no response was received)

    Returns:
        Tuple of (kind, default_message)
    """
    if status_code in _STATUS_KINDS:
        return _STATUS_KINDS[status_code]
    if status_code is not None and 400 <= status_code < 500:
        return ErrorKind.CLIENT_ERROR, "Client error"
    if status_code is not None and 500 <= status_code < 600:
        return ErrorKind.SERVER_ERROR, "Server error"
    return ErrorKind.UNKNOWN_ERROR, "Unknown error"


def extract_error_message(body: Any, default: str) -> str:
    """
    Pull the most specific message out of an error body.

    Preference order: ``error.message``, a string ``error``, ``message``,
    then ``default``. String bodies are decoded as JSON first; a string that
    is not JSON is used verbatim unless it is blank.
    """
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")

    if isinstance(body, str):
        if not body.strip():
            return default
        try:
            decoded = json.loads(body)
        except ValueError:
            return body
        if isinstance(decoded, dict):
            return extract_error_message(decoded, default)
        return default

    if isinstance(body, Mapping):
        error = body.get("error")
        if isinstance(error, Mapping):
            message = error.get("message")
            if isinstance(message, str) and message:
                return message
        elif isinstance(error, str) and error:
            return error
        message = body.get("message")
        if isinstance(message, str) and message:
            return message

    return default


def classify_response(status_code: int, body: Any = None) -> ApifyError:
    """
    Classify a completed HTTP response.

    Args:
        status_code: Response status code
        body: Decoded JSON body, raw text/bytes, or None

    Returns:
        Classified ApifyError with ``status_code`` and ``body`` in details
    """
    kind, default = kind_for_status(status_code)
    message = extract_error_message(body, default)
    return ApifyError(kind, message, {"status_code": status_code, "body": body})


def classify_transport_error(error: Exception) -> ApifyError:
    """
    Classify a failure where no response was received.

    httpx timeouts become ``timeout_error``; every other transport failure
    (DNS, connection refused/reset, protocol errors) is ``network_error``.
    """
    message = str(error) or type(error).__name__
    details = {"cause_type": type(error).__name__}
    if isinstance(error, httpx.TimeoutException):
        return ApifyError(ErrorKind.TIMEOUT_ERROR, message, details)
    return ApifyError(ErrorKind.NETWORK_ERROR, message, details)


def classify(outcome: httpx.Response | Exception) -> ApifyError:
    """
    Classify either an httpx response or a transport exception.

    Response bodies are decoded as JSON when possible, otherwise passed on
    as text.
    """
    if isinstance(outcome, Exception):
        return classify_transport_error(outcome)
    return classify_response(outcome.status_code, response_body(outcome))


def response_body(response: httpx.Response) -> Any:
    """Decode a response body: JSON when it parses, text otherwise, None if empty."""
    content = response.content
    if not content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
