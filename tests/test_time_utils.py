"""Tests for time utilities."""

import pytest
from datetime import date, datetime, timezone, timedelta

from dashboard_api.utils.time import format_iso, parse_date_like


def test_format_iso_date_is_calendar_date():
    """Test that a plain date formats as YYYY-MM-DD."""
    assert format_iso(date(2025, 12, 23)) == '2025-12-23'


def test_format_iso_keeps_utc_offset():
    """Test that an aware UTC datetime keeps its +00:00 offset."""
    dt = datetime(2025, 12, 23, 12, 0, 0, tzinfo=timezone.utc)
    assert format_iso(dt) == '2025-12-23T12:00:00+00:00'


def test_format_iso_keeps_non_utc_offset():
    """Test that format_iso() does not convert to UTC."""
    est = timezone(timedelta(hours=-5))
    dt_est = datetime(2025, 12, 23, 12, 0, 0, tzinfo=est)

    assert format_iso(dt_est) == '2025-12-23T12:00:00-05:00'


def test_format_iso_preserves_microseconds():
    """Test that format_iso() preserves microseconds."""
    dt = datetime(2025, 12, 23, 12, 34, 56, 123456, tzinfo=timezone.utc)
    assert '.123456' in format_iso(dt)


def test_format_iso_raises_on_naive_datetime():
    """Test that format_iso() raises ValueError for naive datetime."""
    naive_dt = datetime.now()
    with pytest.raises(ValueError, match="Naive datetime not allowed"):
        format_iso(naive_dt)


def test_format_iso_rejects_strings():
    with pytest.raises(TypeError):
        format_iso("2025-12-23")


def test_parse_date_like_date():
    assert parse_date_like("2025-12-23") == date(2025, 12, 23)


def test_parse_date_like_z_suffix():
    parsed = parse_date_like("2025-12-23T10:00:00Z")
    assert parsed == datetime(2025, 12, 23, 10, 0, tzinfo=timezone.utc)


def test_parse_date_like_requires_offset():
    with pytest.raises(ValueError, match="UTC offset"):
        parse_date_like("2025-12-23T10:00:00")
