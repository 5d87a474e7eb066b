from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.services.reports.quotation_report_core import MAX_LEADERBOARD_PAGE_SIZE, QuotationReport
from app.services.reports.quotation_report_service import get_quotation_report
from app.utils.check_roles import require_permission
from app.utils.response import success_response, APIResponse

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/quotations", response_model=APIResponse[QuotationReport])
async def quotation_report_api(
    start: str | None = Query(None, description="YYYY-MM or YYYY-MM-DD, defaults to 60 days ago"),
    end: str | None = Query(None, description="YYYY-MM or YYYY-MM-DD, defaults to today"),
    leaderboard_page: int = Query(1, ge=1),
    leaderboard_page_size: int | None = Query(None, ge=1, le=MAX_LEADERBOARD_PAGE_SIZE),
    db: AsyncSession = Depends(get_db),
    user=Depends(require_permission("access_reports")),
):
    report = await get_quotation_report(db, user, start, end, leaderboard_page, leaderboard_page_size)
    return success_response("Quotation report fetched", report)
