from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.schemas.masters.master_option_schemas import (
    MasterOptionCreate,
    MasterOptionUpdate,
    MasterOptionOut,
    LookupData,
)
from app.services.masters.master_option_service import (
    lookup_options,
    list_master_options,
    create_master_option,
    update_master_option,
    deactivate_master_option,
)
from app.utils.check_roles import require_permission
from app.utils.get_user import get_current_user
from app.utils.response import success_response, APIResponse
from app.utils.logger import get_logger

logger = get_logger(__name__)

lookup_router = APIRouter(prefix="/lookup", tags=["Lookup"])
router = APIRouter(prefix="/master/options", tags=["Master Data"])


@lookup_router.get("/{slug}", response_model=APIResponse[LookupData])
async def lookup_api(
    slug: str,
    include_inactive: bool = Query(False),
    include: str | None = Query(None, description="Comma separated: code,meta"),
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    data = await lookup_options(db, slug, include_inactive=include_inactive, include=include)
    return success_response("Lookup data fetched", data)


@router.get("", response_model=APIResponse[list[MasterOptionOut]])
async def list_master_options_api(
    category: str | None = Query(None),
    search: str | None = Query(None),
    include_inactive: bool = Query(False),
    db: AsyncSession = Depends(get_db),
    user=Depends(require_permission("access_master_data")),
):
    options = await list_master_options(db, category, search, include_inactive)
    return success_response("Master options fetched", options)


@router.post("", response_model=APIResponse[MasterOptionOut])
async def create_master_option_api(
    payload: MasterOptionCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_permission("access_master_data")),
):
    logger.info("Create master option", extra={"category": payload.category})
    option = await create_master_option(db, payload, user)
    return success_response("Master option created successfully", option)


@router.patch("/{option_id}", response_model=APIResponse[MasterOptionOut])
async def update_master_option_api(
    option_id: int,
    payload: MasterOptionUpdate,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_permission("access_master_data")),
):
    logger.info("Update master option", extra={"option_id": option_id})
    option = await update_master_option(db, option_id, payload, user)
    return success_response("Master option updated successfully", option)


@router.delete("/{option_id}", response_model=APIResponse[MasterOptionOut])
async def delete_master_option_api(
    option_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_permission("access_master_data")),
):
    logger.info("Deactivate master option", extra={"option_id": option_id})
    option = await deactivate_master_option(db, option_id, user)
    return success_response("Master option deactivated successfully", option)
