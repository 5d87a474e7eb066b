from __future__ import annotations

from datetime import date, datetime, timezone

from app.services.dashboard.dashboard_range_core import (
    normalize_range,
    normalize_trailing_range,
    parse_timestamp,
)

TODAY = date(2025, 2, 14)


def test_blank_range_is_current_month():
    r = normalize_range(None, "", today=TODAY)
    assert r.start_date == date(2025, 2, 1)
    assert r.end_date == date(2025, 2, 28)
    assert r.start.tzinfo is not None


def test_month_values_cover_whole_months():
    r = normalize_range("2024-01", "2024-02", today=TODAY)
    assert r.start_date == date(2024, 1, 1)
    assert r.end_date == date(2024, 2, 29)
    assert r.end.hour == 23


def test_day_values_are_inclusive():
    r = normalize_range("2025-01-10", "2025-01-10", today=TODAY)
    assert r.start_date == r.end_date == date(2025, 1, 10)
    assert r.start < r.end


def test_inverted_range_is_swapped():
    r = normalize_range("2025-03-01", "2025-01-01", today=TODAY)
    assert r.start_date == date(2025, 1, 1)
    assert r.end_date == date(2025, 3, 1)


def test_garbage_falls_back_to_month_bounds():
    r = normalize_range("yesterday", "2025-13", today=TODAY)
    assert r.start_date == date(2025, 2, 1)
    assert r.end_date == date(2025, 2, 28)


def test_trailing_range_defaults_to_sixty_days():
    r = normalize_trailing_range(None, None, today=TODAY)
    assert r.start_date == date(2024, 12, 16)
    assert r.end_date == TODAY


def test_trailing_range_swaps_inverted_input():
    r = normalize_trailing_range("2025-02", "2024-11-05", today=TODAY)
    assert r.start_date == date(2024, 11, 5)
    assert r.end_date == date(2025, 2, 1)


def test_parse_timestamp_is_lenient():
    assert parse_timestamp("2025-02-14T08:00:00Z") == datetime(2025, 2, 14, 8, tzinfo=timezone.utc)
    assert parse_timestamp("2025-02-14") == datetime(2025, 2, 14, tzinfo=timezone.utc)
    assert parse_timestamp(datetime(2025, 2, 14, 8)).tzinfo is not None
    assert parse_timestamp("next week") is None
    assert parse_timestamp(None) is None
