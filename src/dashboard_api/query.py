"""Query string serialization for dashboard stats requests.

A ``Query`` is flattened into an ordered mapping by a fixed list of
extraction rules, merged with caller overrides, then percent-encoded.
Only truthy fields are emitted; see ``is_truthy`` for the exact rule.
"""

import json
import math
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union
from urllib.parse import quote

from dashboard_api.utils.time import DateLike, format_iso

# Literal emitted for keys present without a value (comparison block)
UNDEFINED = "undefined"

# encodeURIComponent leaves these unescaped in addition to quote()'s defaults
_URI_COMPONENT_SAFE = "!*'()"


class Period(str, Enum):
    """Time period tokens understood by the stats API."""

    REALTIME = "realtime"
    DAY = "day"
    SEVEN_DAYS = "7d"
    THIRTY_DAYS = "30d"
    MONTH = "month"
    SIX_MONTHS = "6mo"
    TWELVE_MONTHS = "12mo"
    YEAR = "year"
    ALL = "all"
    CUSTOM = "custom"


class ComparisonMode(str, Enum):
    """Comparison tokens understood by the stats API."""

    PREVIOUS_PERIOD = "previous_period"
    YEAR_OVER_YEAR = "year_over_year"
    CUSTOM = "custom"


@dataclass
class Query:
    """Dashboard query state: period, dates, filters and comparison."""

    period: Optional[Union[Period, str]] = None
    date: Optional[DateLike] = None
    from_date: Optional[DateLike] = None
    to_date: Optional[DateLike] = None
    filters: Optional[Mapping[str, Any]] = None
    experimental_session_count: Optional[bool] = None
    with_imported: Optional[bool] = None
    comparison: Optional[Union[ComparisonMode, str]] = None
    compare_from: Optional[DateLike] = None
    compare_to: Optional[DateLike] = None
    match_day_of_week: Optional[bool] = None


def is_truthy(value: Any) -> bool:
    """
    Presence test used for every query field and filter value.

    None, False, numeric zero, NaN and the empty string are absent.
    Everything else is present, including empty containers.
    """
    if value is None or value is False:
        return False
    if isinstance(value, (int, float)):
        return value != 0 and not (isinstance(value, float) and math.isnan(value))
    if isinstance(value, str):
        return value != ""
    return True


def _to_json(value: Any) -> str:
    """Compact JSON with whole-number floats written as integers."""
    return json.dumps(_integral_floats(value), separators=(",", ":"), ensure_ascii=False)


def _integral_floats(value: Any) -> Any:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, Mapping):
        return {key: _integral_floats(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_integral_floats(item) for item in value]
    return value


def serialize_filters(filters: Mapping[str, Any]) -> str:
    """JSON-encode a filter mapping with falsy values dropped."""
    cleaned = {key: value for key, value in filters.items() if is_truthy(value)}
    return _to_json(cleaned)


def _token(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _identity(value: Any) -> Any:
    return value


# (output key, Query attribute, transform) in emission order
_BASE_RULES: List[Tuple[str, str, Callable[[Any], Any]]] = [
    ("period", "period", _token),
    ("date", "date", format_iso),
    ("from", "from_date", format_iso),
    ("to", "to_date", format_iso),
    ("filters", "filters", serialize_filters),
    ("experimental_session_count", "experimental_session_count", _identity),
    ("with_imported", "with_imported", _identity),
]


def build_query_params(
    query: Optional[Query],
    extra_query: Iterable[Mapping[str, Any]] = (),
    auth: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Build the ordered key/value mapping for a query, before encoding.

    Args:
        query: Query state; None behaves like an empty Query
        extra_query: Override mappings merged on top, later ones winning
        auth: Shared-link auth token, emitted as ``auth`` when set

    Returns:
        Ordered dict; None values stand for keys without a value
    """
    query = query or Query()
    params: Dict[str, Any] = {}

    for key, attr, transform in _BASE_RULES:
        raw = getattr(query, attr)
        if is_truthy(raw):
            params[key] = transform(raw)

    if auth:
        params["auth"] = auth

    if is_truthy(query.comparison):
        # All four keys are emitted even when unset
        params["comparison"] = _token(query.comparison)
        params["compare_from"] = format_iso(query.compare_from) if is_truthy(query.compare_from) else None
        params["compare_to"] = format_iso(query.compare_to) if is_truthy(query.compare_to) else None
        params["match_day_of_week"] = query.match_day_of_week

    for overrides in extra_query:
        params.update(overrides)

    return params


def stringify_value(value: Any) -> str:
    """Render a parameter value the way the dashboard frontend does."""
    if value is None:
        return UNDEFINED
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, date):
        return format_iso(value)
    if isinstance(value, (dict, list, tuple)):
        return _to_json(value)
    return str(value)


def encode_component(text: str) -> str:
    return quote(text, safe=_URI_COMPONENT_SAFE)


def encode_params(params: Mapping[str, Any]) -> str:
    """Percent-encode an ordered mapping into ``?k=v&k=v``."""
    pairs = [
        f"{encode_component(str(key))}={encode_component(stringify_value(value))}"
        for key, value in params.items()
    ]
    return "?" + "&".join(pairs)


def serialize_query(
    query: Optional[Query],
    extra_query: Iterable[Mapping[str, Any]] = (),
    auth: Optional[str] = None,
) -> str:
    """Serialize a query and its overrides into a URL query string."""
    return encode_params(build_query_params(query, extra_query, auth))
