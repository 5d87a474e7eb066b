# app/services/dashboard/dashboard_calendar_core.py
"""
Quotation calendar for the dashboard.

Each quotation shows up once, on the day that matters for its current
status: a confirmed shipment on its confirmation date, an ongoing one on its
departure date and so on. Dates come from the free-form ``payload`` with a
fallback to the row timestamps.
"""

from datetime import datetime
from typing import Any, Callable, Iterable, Optional

from pydantic import BaseModel

from app.models.enums.quotation_status import QuotationStatus
from app.services.dashboard.dashboard_range_core import DateRange, as_utc, parse_timestamp
from app.services.quotations.quotation_status_core import normalize_quotation_status

CALENDAR_STATUS_ORDER = {status: index for index, status in enumerate(QuotationStatus)}


def _first_date(payload: dict, *keys: str) -> Optional[datetime]:
    for key in keys:
        parsed = parse_timestamp(payload.get(key))
        if parsed is not None:
            return parsed
    return None


StatusDateResolver = Callable[[Any, dict], Optional[datetime]]

STATUS_DATE_RESOLVERS: dict[QuotationStatus, StatusDateResolver] = {
    QuotationStatus.CREATED: lambda q, p: q.created_at,
    QuotationStatus.QUOTATION: lambda q, p: _first_date(p, "quotation_date"),
    QuotationStatus.CONFIRMED: lambda q, p: _first_date(p, "confirmed_date", "confirmed_at") or q.updated_at,
    QuotationStatus.ONGOING: lambda q, p: _first_date(p, "est_departure_date", "act_departure_date"),
    QuotationStatus.ARRIVED: lambda q, p: _first_date(p, "est_arrival_date", "act_arrival_date"),
    QuotationStatus.RELEASED: lambda q, p: _first_date(p, "release_date", "validity_date", "act_arrival_date"),
    QuotationStatus.CLOSED: lambda q, p: _first_date(p, "validity_date", "closed_date") or q.updated_at,
    QuotationStatus.CANCELLED: lambda q, p: q.updated_at,
}


class CalendarEvent(BaseModel):
    id: int
    code: str
    status: QuotationStatus
    title: Optional[str] = None
    description: Optional[str] = None


class CalendarRange(BaseModel):
    start: str
    end: str
    today: Optional[str] = None


class CalendarSummary(BaseModel):
    total_days: int
    total_events: int
    range: CalendarRange
    status_counts: dict[QuotationStatus, int]


class QuotationCalendar(BaseModel):
    days: dict[str, list[CalendarEvent]]
    summary: CalendarSummary


def resolve_event_date(quotation: Any) -> Optional[datetime]:
    """Day a quotation belongs on, or ``None`` when nothing usable is recorded."""
    payload = quotation.payload if isinstance(quotation.payload, dict) else {}
    status = normalize_quotation_status(quotation.status)

    resolved = STATUS_DATE_RESOLVERS[status](quotation, payload)
    if resolved is None:
        resolved = quotation.created_at if status is QuotationStatus.CREATED else quotation.updated_at
    if resolved is None:
        return None
    return as_utc(resolved)


def _event_for(quotation: Any, status: QuotationStatus) -> CalendarEvent:
    payload = quotation.payload if isinstance(quotation.payload, dict) else {}

    origin = payload.get("origin") or quotation.origin or ""
    destination = payload.get("destination") or quotation.destination or ""
    route = " → ".join(part for part in (origin, destination) if part)

    return CalendarEvent(
        id=quotation.id,
        code=quotation.quotation_number,
        status=status,
        title=quotation.client or payload.get("client") or quotation.quotation_number,
        description=route or payload.get("cargo_type") or quotation.cargo_type,
    )


def build_quotation_calendar(
    quotations: Iterable[Any],
    window: DateRange,
    range_label: CalendarRange,
) -> QuotationCalendar:
    days: dict[str, list[CalendarEvent]] = {}
    status_counts = {status: 0 for status in QuotationStatus}

    for quotation in quotations:
        status = normalize_quotation_status(quotation.status)
        resolved = resolve_event_date(quotation)
        if resolved is None or not window.contains(resolved):
            continue

        days.setdefault(resolved.date().isoformat(), []).append(_event_for(quotation, status))
        status_counts[status] += 1

    ordered = {
        key: sorted(days[key], key=lambda e: (CALENDAR_STATUS_ORDER[e.status], e.code))
        for key in sorted(days)
    }

    return QuotationCalendar(
        days=ordered,
        summary=CalendarSummary(
            total_days=len(ordered),
            total_events=sum(len(events) for events in ordered.values()),
            range=range_label,
            status_counts=status_counts,
        ),
    )
