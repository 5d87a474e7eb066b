from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.schemas.settings.company_schemas import CompanySettingsUpdate, CompanySettingsOut
from app.services.settings.company_service import get_company_settings, update_company_settings
from app.utils.check_roles import require_permission
from app.utils.response import success_response, APIResponse
from app.utils.logger import get_logger

router = APIRouter(prefix="/settings/company", tags=["Settings"])
logger = get_logger(__name__)


@router.get("", response_model=APIResponse[CompanySettingsOut])
async def get_company_settings_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(require_permission("access_dashboard")),
):
    settings = await get_company_settings(db)
    return success_response("Company settings fetched", settings)


@router.put("", response_model=APIResponse[CompanySettingsOut])
async def update_company_settings_api(
    payload: CompanySettingsUpdate,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_permission("manage_company_settings")),
):
    logger.info("Update company settings", extra={"user_id": user.id})
    settings = await update_company_settings(db, payload, user)
    return success_response("Company settings updated successfully", settings)
