from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_

from app.models.users.user_models import User
from app.schemas.users.user_schemas import (
    UserCreateSchema,
    UserUpdateSchema,
    ProfileUpdateSchema,
    UserListFilters,
    UserListItemSchema,
    UserListResponseSchema,
    UserDetailSchema,
    UserDashboardStatsSchema,
    SalesManagerOption,
)
from app.core.config import DEFAULT_RESET_PASSWORD
from app.core.permissions import AppRole, ASSIGNABLE_ROLES, normalize_role
from app.core.security import hash_password
from app.utils.activity_helpers import emit_activity, actor_context
from app.constants.activity_codes import ActivityCode
from app.core.exceptions import AppException
from app.constants.error_codes import ErrorCode
from app.utils.logger import get_logger

logger = get_logger(__name__)

SALES_MANAGER_ROLES = (AppRole.SALES.value, AppRole.MANAGER.value)


def _validated_role(raw: str, admin: User) -> str:
    role = normalize_role(raw)
    if role.value not in ASSIGNABLE_ROLES:
        raise AppException(400, "Invalid role", ErrorCode.USER_ROLE_INVALID, {"allowed": sorted(ASSIGNABLE_ROLES)})

    if role is AppRole.SUPER_ADMIN and normalize_role(admin.role) is not AppRole.SUPER_ADMIN:
        raise AppException(403, "Only a super admin can grant super admin", ErrorCode.PERMISSION_DENIED)

    return role.value


async def _get_user_or_404(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if not user:
        raise AppException(404, "User not found", ErrorCode.USER_NOT_FOUND)
    return user


async def _ensure_email_free(db: AsyncSession, email: str, exclude_id: int | None = None):
    stmt = select(User.id).where(User.username == email)
    if exclude_id is not None:
        stmt = stmt.where(User.id != exclude_id)

    if await db.scalar(stmt):
        raise AppException(409, "Email already in use", ErrorCode.USER_EMAIL_EXISTS)


def _check_version(user: User, version: int):
    if user.version != version:
        raise AppException(
            409,
            "User was modified by another process",
            ErrorCode.USER_VERSION_CONFLICT,
        )


def _touch(user: User):
    user.version += 1
    user.updated_at = datetime.now(timezone.utc)


# =========================
# CREATE USER
# =========================
async def create_user(db: AsyncSession, payload: UserCreateSchema, admin: User):
    role = _validated_role(payload.role, admin)
    email = payload.email.lower()

    await _ensure_email_free(db, email)

    user = User(
        username=email,
        name=payload.name,
        password_hash=hash_password(payload.password),
        role=role,
        created_by_admin_id=admin.id,
    )

    db.add(user)
    await db.flush()

    await emit_activity(
        db=db,
        user_id=admin.id,
        username=admin.username,
        code=ActivityCode.CREATE_USER,
        resource="user",
        resource_id=user.id,
        target_email=user.username,
        target_role=user.role.capitalize(),
        **actor_context(admin),
    )

    await db.commit()
    await db.refresh(user)

    logger.info("User created", extra={"user_id": user.id})
    return UserDetailSchema.model_validate(user)


# =========================
# LIST USERS
# =========================
async def list_users(
    db: AsyncSession,
    filters: UserListFilters,
) -> UserListResponseSchema:
    base_stmt = select(User)

    # --------------------
    # Filters
    # --------------------
    if filters.search:
        pattern = f"%{filters.search.strip()}%"
        base_stmt = base_stmt.where(
            or_(User.username.ilike(pattern), User.name.ilike(pattern))
        )

    if filters.role:
        base_stmt = base_stmt.where(User.role == normalize_role(filters.role).value)

    if filters.is_active is not None:
        base_stmt = base_stmt.where(User.is_active == filters.is_active)

    if filters.is_online is not None:
        base_stmt = base_stmt.where(User.is_online == filters.is_online)

    if filters.created_today:
        base_stmt = base_stmt.where(
            func.date(User.created_at) == func.current_date()
        )

    if filters.created_by:
        base_stmt = base_stmt.where(
            User.created_by_admin_id == filters.created_by
        )

    # --------------------
    # Total count (before pagination)
    # --------------------
    total = await db.scalar(
        select(func.count()).select_from(base_stmt.subquery())
    )

    # --------------------
    # Sorting (safe)
    # --------------------
    sort_map = {
        "created_at": User.created_at,
        "username": User.username,
        "name": User.name,
        "last_login": User.last_login,
    }

    sort_col = sort_map.get(filters.sort_by)
    if sort_col is None:
        raise AppException(400, "Invalid sort field", ErrorCode.VALIDATION_ERROR)

    sort_col = (
        sort_col.desc()
        if filters.sort_order.lower() == "desc"
        else sort_col.asc()
    )

    # --------------------
    # Pagination
    # --------------------
    offset = (filters.page - 1) * filters.page_size

    result = await db.execute(
        base_stmt
        .order_by(sort_col, User.id)
        .limit(filters.page_size)
        .offset(offset)
    )
    users = result.scalars().all()

    return UserListResponseSchema(
        items=[UserListItemSchema.model_validate(u) for u in users],
        total=total or 0,
        page=filters.page,
        page_size=filters.page_size,
    )


# =========================
# GET USER BY ID
# =========================
async def get_user_by_id(db: AsyncSession, user_id: int):
    user = await _get_user_or_404(db, user_id)
    return UserDetailSchema.model_validate(user)


# =========================
# UPDATE USER
# =========================
async def update_user(
    db: AsyncSession,
    user_id: int,
    payload: UserUpdateSchema,
    admin: User,
):
    user = await _get_user_or_404(db, user_id)
    _check_version(user, payload.version)

    # -------------------------------------------------
    # CAPTURE PREVIOUS STATE (FOR AUDIT)
    # -------------------------------------------------
    prev_email = user.username
    prev_role = user.role
    activities: list[tuple[ActivityCode, dict]] = []

    if payload.email and payload.email.lower() != user.username:
        new_email = payload.email.lower()
        await _ensure_email_free(db, new_email, exclude_id=user.id)
        user.username = new_email
        # the access token subject is the email
        user.token_version += 1
        activities.append((ActivityCode.UPDATE_USER_EMAIL, {"target_email": prev_email, "new_email": new_email}))

    if payload.name is not None and payload.name != user.name:
        user.name = payload.name
        activities.append((ActivityCode.UPDATE_USER_NAME, {"target_email": user.username, "new_name": payload.name}))

    if payload.password:
        user.password_hash = hash_password(payload.password)
        user.token_version += 1
        activities.append((ActivityCode.UPDATE_USER_PASSWORD, {"target_email": user.username}))

    if payload.role:
        role = _validated_role(payload.role, admin)
        if role != user.role:
            user.role = role
            activities.append((
                ActivityCode.UPDATE_USER_ROLE,
                {"target_email": user.username, "old_role": prev_role, "new_role": role},
            ))

    if payload.is_active is not None and payload.is_active != user.is_active:
        user.is_active = payload.is_active
        code = ActivityCode.REACTIVATE_USER if payload.is_active else ActivityCode.DEACTIVATE_USER
        activities.append((code, {"target_email": user.username}))

    # -------------------------------------------------
    # NO-OP GUARD
    # -------------------------------------------------
    if not activities:
        raise AppException(400, "No changes provided", ErrorCode.VALIDATION_ERROR)

    _touch(user)

    for code, context in activities:
        await emit_activity(
            db=db,
            user_id=admin.id,
            username=admin.username,
            code=code,
            resource="user",
            resource_id=user.id,
            **context,
            **actor_context(admin),
        )

    await db.commit()

    logger.info("User updated", extra={"user_id": user.id, "new_version": user.version})
    return UserDetailSchema.model_validate(user)


# =========================
# DEACTIVATE / REACTIVATE
# =========================
async def _set_active(
    db: AsyncSession,
    user_id: int,
    version: int,
    admin: User,
    active: bool,
):
    logger.info(
        "Changing user active flag",
        extra={
            "target_user_id": user_id,
            "requested_version": version,
            "actor_id": admin.id,
            "active": active,
        },
    )

    user = await _get_user_or_404(db, user_id)
    _check_version(user, version)

    if user.is_active == active:
        raise AppException(
            409,
            "User already active" if active else "User already inactive",
            ErrorCode.CONFLICT,
        )

    if not active and user.id == admin.id:
        raise AppException(409, "You cannot deactivate your own account", ErrorCode.CONFLICT)

    user.is_active = active
    if not active:
        user.is_online = False
        user.token_version += 1
    _touch(user)

    await emit_activity(
        db,
        user_id=admin.id,
        username=admin.username,
        code=ActivityCode.REACTIVATE_USER if active else ActivityCode.DEACTIVATE_USER,
        resource="user",
        resource_id=user.id,
        target_email=user.username,
        **actor_context(admin),
    )

    await db.commit()

    logger.info(
        "User active flag changed",
        extra={"target_user_id": user.id, "new_version": user.version},
    )

    return UserDetailSchema.model_validate(user)


async def deactivate_user(db: AsyncSession, user_id: int, version: int, admin: User):
    return await _set_active(db, user_id, version, admin, active=False)


async def reactivate_user(db: AsyncSession, user_id: int, version: int, admin: User):
    return await _set_active(db, user_id, version, admin, active=True)


# =========================
# RESET PASSWORD
# =========================
async def reset_user_password(db: AsyncSession, user_id: int, admin: User):
    user = await _get_user_or_404(db, user_id)

    user.password_hash = hash_password(DEFAULT_RESET_PASSWORD)
    user.is_active = True
    user.token_version += 1
    _touch(user)

    await emit_activity(
        db,
        user_id=admin.id,
        username=admin.username,
        code=ActivityCode.RESET_USER_PASSWORD,
        resource="user",
        resource_id=user.id,
        target_email=user.username,
        **actor_context(admin),
    )

    await db.commit()

    logger.info("User password reset to default", extra={"target_user_id": user.id})

    return {
        "user": UserDetailSchema.model_validate(user),
        "default_password": DEFAULT_RESET_PASSWORD,
    }


# =========================
# OWN PROFILE
# =========================
async def get_my_profile(user: User):
    return UserDetailSchema.model_validate(user)


async def update_my_profile(db: AsyncSession, user: User, payload: ProfileUpdateSchema):
    changes: list[str] = []

    if payload.email and payload.email.lower() != user.username:
        new_email = payload.email.lower()
        await _ensure_email_free(db, new_email, exclude_id=user.id)
        user.username = new_email
        changes.append("email")

    if payload.name is not None and payload.name != user.name:
        user.name = payload.name
        changes.append("name")

    if payload.password:
        user.password_hash = hash_password(payload.password)
        changes.append("password")

    if not changes:
        raise AppException(400, "Nothing to update", ErrorCode.VALIDATION_ERROR)

    if "email" in changes or "password" in changes:
        # existing sessions must log in again
        user.token_version += 1

    _touch(user)

    await emit_activity(
        db,
        user_id=user.id,
        username=user.username,
        code=ActivityCode.UPDATE_PROFILE,
        resource="user",
        resource_id=user.id,
        changes=", ".join(changes),
        **actor_context(user),
    )

    await db.commit()

    logger.info("Profile updated", extra={"user_id": user.id, "changes": changes})
    return UserDetailSchema.model_validate(user)


# =========================
# SALES MANAGERS
# =========================
async def list_sales_managers(db: AsyncSession) -> list[SalesManagerOption]:
    result = await db.execute(
        select(User)
        .where(
            User.role.in_(SALES_MANAGER_ROLES),
            User.is_active.is_(True),
        )
        .order_by(User.role, User.name, User.username)
    )

    return [
        SalesManagerOption(
            id=u.id,
            name=u.display_name,
            email=u.username,
            role=u.role,
        )
        for u in result.scalars().all()
    ]


# =========================
# DASHBOARD
# =========================
async def get_user_dashboard_stats(db: AsyncSession):
    result = await db.execute(
        select(
            func.count(User.id).label("total_users"),
            func.count(User.id)
            .filter(User.is_active.is_(True))
            .label("active_users"),
            func.count(User.id)
            .filter(User.role.in_([AppRole.ADMIN.value, AppRole.SUPER_ADMIN.value]))
            .label("admin_users"),
            func.count(User.id)
            .filter(User.is_online.is_(True))
            .label("online_users"),
        )
    )
    row = result.one()

    role_rows = await db.execute(
        select(User.role, func.count(User.id)).group_by(User.role)
    )

    return UserDashboardStatsSchema(
        total_users=row.total_users,
        active_users=row.active_users,
        admin_users=row.admin_users,
        online_users=row.online_users,
        by_role={role: count for role, count in role_rows.all()},
    )


# =========================
# BOOTSTRAP
# =========================
async def ensure_admin(
    db: AsyncSession,
    email: str,
    password: str,
    name: str | None = None,
) -> tuple[User, bool]:
    """Create the super admin if missing. Returns (user, created)."""
    email = email.lower()

    existing = await db.scalar(select(User).where(User.username == email))
    if existing:
        logger.info("Admin already exists", extra={"user_id": existing.id})
        return existing, False

    user = User(
        username=email,
        name=name,
        password_hash=hash_password(password),
        role=AppRole.SUPER_ADMIN.value,
        is_active=True,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info("Admin created", extra={"user_id": user.id})
    return user, True
