from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.schemas.dashboard.dashboard_schemas import DashboardMetrics
from app.services.dashboard.dashboard_calendar_core import QuotationCalendar
from app.services.dashboard.dashboard_service import get_dashboard_calendar, get_dashboard_metrics
from app.utils.check_roles import require_permission
from app.utils.response import success_response, APIResponse

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/metrics", response_model=APIResponse[DashboardMetrics])
async def dashboard_metrics_api(
    start: str | None = Query(None, description="YYYY-MM or YYYY-MM-DD"),
    end: str | None = Query(None, description="YYYY-MM or YYYY-MM-DD"),
    db: AsyncSession = Depends(get_db),
    user=Depends(require_permission("access_dashboard")),
):
    metrics = await get_dashboard_metrics(db, user, start, end)
    return success_response("Dashboard metrics fetched", metrics)


@router.get("/calendar", response_model=APIResponse[QuotationCalendar])
async def dashboard_calendar_api(
    start: str = Query(..., min_length=1, description="YYYY-MM-DD"),
    end: str = Query(..., min_length=1, description="YYYY-MM-DD"),
    today: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
    user=Depends(require_permission("access_dashboard")),
):
    calendar = await get_dashboard_calendar(db, user, start, end, today)
    return success_response("Dashboard calendar fetched", calendar)
