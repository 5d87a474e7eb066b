# app/services/dashboard/dashboard_range_core.py
"""
Reporting window parsing for the dashboard and reports.

``start`` and ``end`` accept ``YYYY-MM`` (whole month) or ``YYYY-MM-DD``.
Blank or unparseable input falls back to a default window (the current UTC
month for the dashboard, the trailing 60 days for reports), and an inverted
window is swapped rather than rejected.
"""

import calendar
import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Optional

from pydantic import BaseModel

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")

DEFAULT_REPORT_DAYS = 60


class DateRange(BaseModel):
    start: datetime
    end: datetime

    @property
    def start_date(self) -> date:
        return self.start.date()

    @property
    def end_date(self) -> date:
        return self.end.date()

    def contains(self, moment: datetime) -> bool:
        return self.start <= as_utc(moment) <= self.end


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Lenient ISO parsing for free-form payload dates; ``None`` when unusable."""
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip().replace("Z", "+00:00")
    try:
        return as_utc(datetime.fromisoformat(text))
    except ValueError:
        pass
    try:
        return datetime.combine(date.fromisoformat(text[:10]), time.min, tzinfo=timezone.utc)
    except ValueError:
        return None


def parse_day(value: Optional[str]) -> Optional[date]:
    text = (value or "").strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def start_of_day(d: date) -> datetime:
    return datetime.combine(d, time.min, tzinfo=timezone.utc)


def end_of_day(d: date) -> datetime:
    return datetime.combine(d, time.max, tzinfo=timezone.utc)


def _month_bounds(year: int, month: int) -> tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def parse_range_value(value: Optional[str], fallback: date, is_end: bool) -> datetime:
    text = (value or "").strip()
    if not text:
        return end_of_day(fallback) if is_end else start_of_day(fallback)

    match = _MONTH_RE.match(text)
    if match:
        year, month = int(match.group(1)), int(match.group(2))
        if 1 <= month <= 12:
            first, last = _month_bounds(year, month)
            return end_of_day(last) if is_end else start_of_day(first)
        return end_of_day(fallback) if is_end else start_of_day(fallback)

    parsed = parse_day(text)
    if parsed is None:
        return end_of_day(fallback) if is_end else start_of_day(fallback)

    return end_of_day(parsed) if is_end else start_of_day(parsed)


def _ordered(range_start: datetime, range_end: datetime) -> DateRange:
    if range_start > range_end:
        range_start, range_end = (
            start_of_day(range_end.date()),
            end_of_day(range_start.date()),
        )
    return DateRange(start=range_start, end=range_end)


def normalize_range(
    start: Optional[str],
    end: Optional[str],
    today: Optional[date] = None,
) -> DateRange:
    today = today or datetime.now(timezone.utc).date()
    month_start, month_end = _month_bounds(today.year, today.month)

    return _ordered(
        parse_range_value(start, month_start, is_end=False),
        parse_range_value(end, month_end, is_end=True),
    )


def normalize_trailing_range(
    start: Optional[str],
    end: Optional[str],
    days: int = DEFAULT_REPORT_DAYS,
    today: Optional[date] = None,
) -> DateRange:
    today = today or datetime.now(timezone.utc).date()

    return _ordered(
        parse_range_value(start, today - timedelta(days=days), is_end=False),
        parse_range_value(end, today, is_end=True),
    )
