from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.schemas.users.user_schemas import (
    UserCreateSchema,
    UserUpdateSchema,
    UserListFilters,
    VersionOnlySchema,
    ProfileUpdateSchema,
    UserListResponseSchema,
    UserDetailSchema,
    UserDashboardStatsSchema,
    SalesManagerOption,
)
from app.services.users.user_services import (
    create_user,
    list_users,
    get_user_by_id,
    update_user,
    get_user_dashboard_stats,
    deactivate_user,
    reactivate_user,
    reset_user_password,
    get_my_profile,
    update_my_profile,
    list_sales_managers,
)
from app.utils.check_roles import require_permission
from app.utils.get_user import get_current_user
from app.utils.response import success_response, APIResponse
from app.utils.logger import get_logger

router = APIRouter(prefix="/users", tags=["Users"])
logger = get_logger(__name__)


# -------------------------
# STATIC PATHS FIRST
# -------------------------
@router.get("/me", response_model=APIResponse[UserDetailSchema])
async def get_me_api(user=Depends(get_current_user)):
    return success_response("Profile fetched", await get_my_profile(user))


@router.put("/me", response_model=APIResponse[UserDetailSchema])
async def update_me_api(
    payload: ProfileUpdateSchema,
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    logger.info("Profile update", extra={"user_id": user.id})
    profile = await update_my_profile(db, user, payload)
    return success_response("Profile updated successfully", profile)


@router.get("/sales-managers", response_model=APIResponse[list[SalesManagerOption]])
async def sales_managers_api(
    db: AsyncSession = Depends(get_db),
    user=Depends(get_current_user),
):
    managers = await list_sales_managers(db)
    return success_response("Sales managers fetched", managers)


@router.get("/dashboard/stats", response_model=APIResponse[UserDashboardStatsSchema])
async def dashboard_stats_api(
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_permission("view_users")),
):
    logger.info("User dashboard stats requested")
    stats = await get_user_dashboard_stats(db)
    return success_response("Dashboard stats fetched", stats)


# -------------------------
# COLLECTION
# -------------------------
@router.post("", response_model=APIResponse[UserDetailSchema])
async def create_user_api(
    payload: UserCreateSchema,
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_permission("manage_users")),
):
    logger.info("Create user request", extra={"email": payload.email})
    user = await create_user(db, payload, admin)
    return success_response("User created successfully", user)


@router.get("", response_model=APIResponse[UserListResponseSchema])
async def list_users_api(
    filters: UserListFilters = Depends(),
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_permission("view_users")),
):
    logger.info("List users request", extra=filters.model_dump(exclude_none=True))
    users = await list_users(db, filters)
    return success_response("Users fetched", users)


# -------------------------
# ITEM
# -------------------------
@router.get("/{user_id}", response_model=APIResponse[UserDetailSchema])
async def get_user_api(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_permission("view_users")),
):
    logger.info("Get user by id", extra={"user_id": user_id})
    user = await get_user_by_id(db, user_id)
    return success_response("User fetched", user)


@router.patch("/{user_id}", response_model=APIResponse[UserDetailSchema])
async def update_user_api(
    user_id: int,
    payload: UserUpdateSchema,
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_permission("manage_users")),
):
    logger.info("Update user", extra={"user_id": user_id})
    user = await update_user(db, user_id, payload, admin)
    return success_response("User updated successfully", user)


@router.post("/{user_id}/deactivate", response_model=APIResponse[UserDetailSchema])
async def deactivate_user_api(
    user_id: int,
    payload: VersionOnlySchema,
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_permission("manage_users")),
):
    logger.info("Deactivate user", extra={"user_id": user_id})
    user = await deactivate_user(db, user_id, payload.version, admin)
    return success_response("User deactivated successfully", user)


@router.post("/{user_id}/activate", response_model=APIResponse[UserDetailSchema])
async def reactivate_user_api(
    user_id: int,
    payload: VersionOnlySchema,
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_permission("manage_users")),
):
    logger.info("Reactivate user", extra={"user_id": user_id})
    user = await reactivate_user(db, user_id, payload.version, admin)
    return success_response("User reactivated successfully", user)


@router.post("/{user_id}/reset-password", response_model=APIResponse)
async def reset_password_api(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    admin=Depends(require_permission("manage_users")),
):
    logger.info("Reset user password", extra={"user_id": user_id})
    result = await reset_user_password(db, user_id, admin)
    return success_response("Password reset to default", result)
