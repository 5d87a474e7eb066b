from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.masters.master_option_models import MasterOption
from app.models.enums.master_category import MasterCategory, MasterOptionSource
from app.schemas.masters.master_option_schemas import (
    MasterOptionCreate,
    MasterOptionUpdate,
    MasterOptionOut,
    LookupItem,
    LookupData,
)
from app.core.exceptions import AppException
from app.constants.error_codes import ErrorCode
from app.constants.activity_codes import ActivityCode
from app.utils.activity_helpers import emit_activity, actor_context
from app.utils.logger import get_logger

logger = get_logger(__name__)

# mirrored from the user directory; never edited by hand
LOCKED_CATEGORIES = frozenset({MasterCategory.SALES, MasterCategory.MANAGER})

LOOKUP_FIELDS = {"code", "meta"}


def parse_category(raw: str) -> MasterCategory:
    try:
        return MasterCategory((raw or "").strip().upper())
    except ValueError:
        raise AppException(
            400,
            f"Invalid category: {raw}",
            ErrorCode.MASTER_CATEGORY_INVALID,
            {"allowed": [c.value.lower() for c in MasterCategory]},
        )


def _ensure_editable(option: MasterOption):
    if option.category in LOCKED_CATEGORIES:
        raise AppException(
            409,
            "This category is managed externally and cannot be modified",
            ErrorCode.MASTER_OPTION_LOCKED,
        )
    if option.source == MasterOptionSource.EXTERNAL:
        raise AppException(
            409,
            "Externally synced options are read-only",
            ErrorCode.MASTER_OPTION_LOCKED,
        )


def _map_option(o: MasterOption) -> MasterOptionOut:
    return MasterOptionOut(
        id=o.id,
        category=o.category,
        name=o.name,
        code=o.code,
        meta=o.meta,
        source=o.source,
        is_active=o.is_active,
        version=o.version,
        created_by=o.created_by_username,
        updated_by=o.updated_by_username,
        created_at=o.created_at,
        updated_at=o.updated_at,
    )


async def _get_option(db: AsyncSession, option_id: int) -> MasterOption:
    option = await db.get(MasterOption, option_id)
    if not option:
        raise AppException(404, "Master option not found", ErrorCode.MASTER_OPTION_NOT_FOUND)
    return option


async def _ensure_name_free(db: AsyncSession, category: MasterCategory, name: str, exclude_id: int | None = None):
    stmt = select(MasterOption.id).where(
        MasterOption.category == category,
        MasterOption.name == name,
    )
    if exclude_id is not None:
        stmt = stmt.where(MasterOption.id != exclude_id)

    if await db.scalar(stmt):
        raise AppException(409, f"'{name}' already exists in {category.value}", ErrorCode.CONFLICT)


# =========================
# LOOKUP
# =========================
async def lookup_options(
    db: AsyncSession,
    slug: str,
    include_inactive: bool = False,
    include: str | None = None,
) -> LookupData:
    category = parse_category(slug)
    fields = {
        token.strip().lower()
        for token in (include or "").split(",")
        if token.strip()
    } & LOOKUP_FIELDS

    stmt = select(MasterOption).where(MasterOption.category == category)
    if not include_inactive:
        stmt = stmt.where(MasterOption.is_active.is_(True))

    result = await db.execute(stmt.order_by(MasterOption.name))

    items = [
        LookupItem(
            id=o.id,
            name=o.name,
            code=o.code if "code" in fields else None,
            meta=o.meta if "meta" in fields else None,
        )
        for o in result.scalars().all()
    ]
    return LookupData(category=category, items=items)


# =========================
# LIST
# =========================
async def list_master_options(
    db: AsyncSession,
    category: str | None = None,
    search: str | None = None,
    include_inactive: bool = False,
) -> list[MasterOptionOut]:
    stmt = select(MasterOption)

    if category:
        stmt = stmt.where(MasterOption.category == parse_category(category))
    if not include_inactive:
        stmt = stmt.where(MasterOption.is_active.is_(True))
    if search:
        stmt = stmt.where(MasterOption.name.ilike(f"%{search.strip()}%"))

    result = await db.execute(stmt.order_by(MasterOption.category, MasterOption.name))
    return [_map_option(o) for o in result.scalars().all()]


# =========================
# CREATE
# =========================
async def create_master_option(
    db: AsyncSession,
    payload: MasterOptionCreate,
    user,
) -> MasterOptionOut:
    category = parse_category(payload.category)
    if category in LOCKED_CATEGORIES:
        raise AppException(
            409,
            "This category is managed externally and cannot be modified",
            ErrorCode.MASTER_OPTION_LOCKED,
        )

    name = payload.name.strip()
    await _ensure_name_free(db, category, name)

    option = MasterOption(
        category=category,
        name=name,
        code=payload.code or None,
        meta=payload.meta,
        is_active=payload.is_active,
        source=MasterOptionSource.INTERNAL,
        created_by_id=user.id,
        updated_by_id=user.id,
    )
    db.add(option)
    await db.flush()

    await emit_activity(
        db=db,
        user_id=user.id,
        username=user.username,
        code=ActivityCode.CREATE_MASTER_OPTION,
        resource="master_option",
        resource_id=option.id,
        category=category.value,
        target_name=name,
        **actor_context(user),
    )

    await db.commit()
    await db.refresh(option)

    logger.info("Master option created", extra={"option_id": option.id, "category": category.value})
    return _map_option(option)


# =========================
# UPDATE
# =========================
async def update_master_option(
    db: AsyncSession,
    option_id: int,
    payload: MasterOptionUpdate,
    user,
) -> MasterOptionOut:
    option = await _get_option(db, option_id)
    _ensure_editable(option)

    if option.version != payload.version:
        raise AppException(409, "Master option was modified by another process", ErrorCode.CONFLICT)

    changes: list[str] = []

    if payload.name is not None and payload.name.strip() != option.name:
        name = payload.name.strip()
        await _ensure_name_free(db, option.category, name, exclude_id=option.id)
        option.name = name
        changes.append("name")

    if payload.code is not None and payload.code != option.code:
        option.code = payload.code or None
        changes.append("code")

    if payload.meta is not None and payload.meta != option.meta:
        option.meta = payload.meta
        changes.append("meta")

    if payload.is_active is not None and payload.is_active != option.is_active:
        option.is_active = payload.is_active
        changes.append("is_active")

    if not changes:
        return _map_option(option)

    option.version += 1
    option.updated_by_id = user.id
    option.updated_at = datetime.now(timezone.utc)

    await emit_activity(
        db=db,
        user_id=user.id,
        username=user.username,
        code=ActivityCode.UPDATE_MASTER_OPTION,
        resource="master_option",
        resource_id=option.id,
        category=option.category.value,
        target_name=option.name,
        changes=", ".join(changes),
        **actor_context(user),
    )

    await db.commit()
    await db.refresh(option)

    logger.info("Master option updated", extra={"option_id": option.id, "changes": changes})
    return _map_option(option)


# =========================
# DELETE (deactivate)
# =========================
async def deactivate_master_option(
    db: AsyncSession,
    option_id: int,
    user,
) -> MasterOptionOut:
    option = await _get_option(db, option_id)
    _ensure_editable(option)

    if not option.is_active:
        return _map_option(option)

    option.is_active = False
    option.version += 1
    option.updated_by_id = user.id
    option.updated_at = datetime.now(timezone.utc)

    await emit_activity(
        db=db,
        user_id=user.id,
        username=user.username,
        code=ActivityCode.DEACTIVATE_MASTER_OPTION,
        resource="master_option",
        resource_id=option.id,
        category=option.category.value,
        target_name=option.name,
        **actor_context(user),
    )

    await db.commit()
    await db.refresh(option)

    logger.info("Master option deactivated", extra={"option_id": option.id})
    return _map_option(option)
