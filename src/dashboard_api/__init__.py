"""Client-side request layer for the analytics dashboard API."""

from .client import ClientContext, DashboardClient
from .errors import ApiError, ErrorKind, RequestAborted, classify_error
from .query import ComparisonMode, Period, Query, serialize_query
from .transport import AbortSignal, CancellationScope, RequestsTransport

__all__ = [
    "AbortSignal",
    "ApiError",
    "CancellationScope",
    "ClientContext",
    "ComparisonMode",
    "DashboardClient",
    "ErrorKind",
    "Period",
    "Query",
    "RequestAborted",
    "RequestsTransport",
    "classify_error",
    "serialize_query",
]
