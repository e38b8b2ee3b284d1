"""Error taxonomy for dashboard API calls."""

import json
from enum import Enum
from typing import Any, Optional

import requests


class ErrorKind(str, Enum):
    """How a failed call should be interpreted by the caller."""

    TRANSPORT = "transport"
    APPLICATION = "application"
    MALFORMED_RESPONSE = "malformed_response"


class RequestAborted(requests.RequestException):
    """Raised when a request's cancellation scope is aborted."""


class ApiError(Exception):
    """Non-success response with a JSON body from the dashboard API."""

    kind = ErrorKind.APPLICATION

    def __init__(self, message: Optional[str], payload: Any, status_code: Optional[int] = None):
        super().__init__(message if message is not None else "")
        self.message = message
        self.payload = payload
        self.status_code = status_code

    def __repr__(self) -> str:
        return f"ApiError(message={self.message!r}, status_code={self.status_code!r})"


def classify_error(exc: BaseException) -> Optional[ErrorKind]:
    """
    Map an exception raised by a client call to its ErrorKind.

    Returns None for exceptions that did not come from the request layer.
    """
    kind = getattr(exc, "kind", None)
    if isinstance(kind, ErrorKind):
        return kind
    # requests' JSONDecodeError is also a RequestException; check it first
    if isinstance(exc, (requests.exceptions.JSONDecodeError, json.JSONDecodeError)):
        return ErrorKind.MALFORMED_RESPONSE
    if isinstance(exc, requests.RequestException):
        return ErrorKind.TRANSPORT
    return None
