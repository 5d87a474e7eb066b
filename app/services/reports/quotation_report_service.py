# app/services/reports/quotation_report_service.py

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.permissions import has_permission
from app.models.quotations.quotation_models import Quotation
from app.models.users.user_models import User
from app.services.dashboard.dashboard_range_core import normalize_trailing_range
from app.services.quotations.quotation_service import scope_clause
from app.services.reports.quotation_report_core import QuotationReport, build_quotation_report
from app.utils.logger import get_logger

logger = get_logger(__name__)


async def get_quotation_report(
    db: AsyncSession,
    user: User,
    start: str | None = None,
    end: str | None = None,
    leaderboard_page: int = 1,
    leaderboard_page_size: int | None = None,
) -> QuotationReport:
    window = normalize_trailing_range(start, end)

    conditions = [
        Quotation.is_deleted.is_(False),
        Quotation.created_at >= window.start,
        Quotation.created_at <= window.end,
    ]
    if not has_permission(user.role, "view_all_quotations"):
        conditions.append(scope_clause(user))

    result = await db.execute(
        select(Quotation).where(*conditions).order_by(Quotation.created_at.asc(), Quotation.id.asc())
    )
    report = build_quotation_report(
        result.scalars().all(),
        window,
        leaderboard_page=leaderboard_page,
        leaderboard_page_size=leaderboard_page_size,
    )

    logger.info(
        "Quotation report computed",
        extra={
            "user_id": user.id,
            "range_start": report.range.start,
            "range_end": report.range.end,
            "quotations": report.summary.total_quotations,
        },
    )
    return report
