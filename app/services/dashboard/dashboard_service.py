# app/services/dashboard/dashboard_service.py

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.quotations.quotation_models import Quotation
from app.models.users.user_models import User
from app.constants.error_codes import ErrorCode
from app.core.exceptions import AppException
from app.core.permissions import has_permission
from app.schemas.dashboard.dashboard_schemas import DashboardMetrics, DashboardRange
from app.services.dashboard.dashboard_calendar_core import (
    CalendarRange,
    QuotationCalendar,
    build_quotation_calendar,
)
from app.services.dashboard.dashboard_range_core import (
    DateRange,
    end_of_day,
    normalize_range,
    parse_day,
    start_of_day,
)
from app.services.quotations.quotation_service import scope_clause
from app.services.quotations.quotation_status_core import summarize_status_counts
from app.utils.logger import get_logger

logger = get_logger(__name__)


async def get_dashboard_metrics(
    db: AsyncSession,
    user: User,
    start: str | None = None,
    end: str | None = None,
) -> DashboardMetrics:
    window = normalize_range(start, end)

    conditions = [
        Quotation.is_deleted.is_(False),
        Quotation.created_at >= window.start,
        Quotation.created_at <= window.end,
    ]
    if not has_permission(user.role, "view_all_quotations"):
        conditions.append(scope_clause(user))

    result = await db.execute(select(Quotation.status).where(*conditions))
    summary = summarize_status_counts(result.scalars().all())

    logger.info(
        "Dashboard metrics computed",
        extra={
            "user_id": user.id,
            "range_start": window.start_date.isoformat(),
            "range_end": window.end_date.isoformat(),
            "quotations": summary.total,
        },
    )

    return DashboardMetrics(
        range=DashboardRange(start=window.start_date, end=window.end_date),
        quotations=summary,
    )


async def get_dashboard_calendar(
    db: AsyncSession,
    user: User,
    start: str,
    end: str,
    today: str | None = None,
) -> QuotationCalendar:
    start_day, end_day = parse_day(start), parse_day(end)
    if start_day is None or end_day is None:
        raise AppException(400, "Invalid date range supplied", ErrorCode.DASHBOARD_RANGE_INVALID)
    if start_day > end_day:
        raise AppException(
            400,
            "start must be before or equal to end",
            ErrorCode.DASHBOARD_RANGE_INVALID,
            {"start": start, "end": end},
        )

    window = DateRange(start=start_of_day(start_day), end=end_of_day(end_day))

    conditions = [
        Quotation.is_deleted.is_(False),
        or_(
            Quotation.created_at.between(window.start, window.end),
            Quotation.updated_at.between(window.start, window.end),
        ),
    ]
    if not has_permission(user.role, "view_all_quotations"):
        conditions.append(scope_clause(user))

    result = await db.execute(
        select(Quotation).where(*conditions).order_by(Quotation.created_at.asc(), Quotation.id.asc())
    )
    calendar = build_quotation_calendar(
        result.scalars().all(),
        window,
        CalendarRange(start=start, end=end, today=today),
    )

    logger.info(
        "Dashboard calendar built",
        extra={
            "user_id": user.id,
            "range_start": start_day.isoformat(),
            "range_end": end_day.isoformat(),
            "events": calendar.summary.total_events,
        },
    )
    return calendar
