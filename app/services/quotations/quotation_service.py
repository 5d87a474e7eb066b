from datetime import datetime, timezone
from decimal import Decimal
import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_, asc, desc

from app.models.quotations.quotation_models import Quotation
from app.models.users.user_models import User
from app.models.enums.quotation_status import QuotationStatus

from app.schemas.quotations.quotation_schemas import (
    QuotationCreate,
    QuotationUpdate,
    QuotationStatusUpdate,
    QuotationOut,
    QuotationListData,
    QuotationListItem,
    QuotationClassificationOut,
)
from app.services.quotations.quotation_status_core import (
    classify_quotation_status,
    normalize_quotation_status,
)

from app.core.permissions import has_permission
from app.core.exceptions import AppException
from app.constants.error_codes import ErrorCode
from app.constants.activity_codes import ActivityCode
from app.utils.activity_helpers import emit_activity, actor_context

logger = logging.getLogger(__name__)

NUMBER_ATTEMPTS = 5


# =====================================================
# HELPERS
# =====================================================
def _classification(status) -> QuotationClassificationOut:
    c = classify_quotation_status(status)
    return QuotationClassificationOut(
        is_active=c.is_active,
        is_offer_sent=c.is_offer_sent,
        is_approved=c.is_approved,
    )


def scope_clause(user: User):
    """Rows a user may see without the view-all permission."""
    return or_(
        Quotation.created_by_email == user.username,
        Quotation.created_by_id == user.id,
        Quotation.sales_manager_id == user.id,
    )


def _ensure_access(q: Quotation, user: User):
    if has_permission(user.role, "view_all_quotations"):
        return
    if user.username == q.created_by_email or user.id in (q.created_by_id, q.sales_manager_id):
        return
    raise AppException(403, "You do not have access to this quotation", ErrorCode.PERMISSION_DENIED)


async def _get_quotation(
    db: AsyncSession,
    quotation_id: int,
    for_update: bool = False,
) -> Quotation:
    stmt = select(Quotation).where(
        Quotation.id == quotation_id,
        Quotation.is_deleted.is_(False),
    )
    if for_update:
        stmt = stmt.with_for_update()

    result = await db.execute(stmt)
    q = result.scalar_one_or_none()
    if not q:
        raise AppException(404, "Quotation not found", ErrorCode.QUOTATION_NOT_FOUND)
    return q


async def _resolve_sales_manager(db: AsyncSession, user_id: int | None) -> int | None:
    if not user_id:
        return None
    manager = await db.get(User, user_id)
    if not manager:
        raise AppException(404, "Sales manager not found", ErrorCode.USER_NOT_FOUND)
    return manager.id


async def generate_quotation_number(db: AsyncSession, year: int | None = None) -> str:
    year = year or datetime.now(timezone.utc).year
    prefix = f"QUO-{year}-"

    count = await db.scalar(
        select(func.count(Quotation.id)).where(Quotation.quotation_number.like(f"{prefix}%"))
    )

    for offset in range(1, NUMBER_ATTEMPTS + 1):
        candidate = f"{prefix}{(count or 0) + offset:03d}"
        taken = await db.scalar(
            select(Quotation.id).where(Quotation.quotation_number == candidate)
        )
        if not taken:
            return candidate

    raise AppException(
        409,
        "Could not allocate a quotation number",
        ErrorCode.QUOTATION_NUMBER_CONFLICT,
    )


def _map_quotation(q: Quotation) -> QuotationOut:
    manager = q.sales_manager
    return QuotationOut(
        id=q.id,
        quotation_number=q.quotation_number,
        client=q.client,
        origin=q.origin,
        destination=q.destination,
        cargo_type=q.cargo_type,
        weight=q.weight,
        volume=q.volume,
        estimated_cost=q.estimated_cost,
        status=normalize_quotation_status(q.status),
        classification=_classification(q.status),
        created_by=q.created_by_email,
        created_by_id=q.created_by_id,
        sales_manager_id=q.sales_manager_id,
        sales_manager_name=manager.display_name if manager else None,
        payload=q.payload or {},
        version=q.version,
        created_at=q.created_at,
        updated_at=q.updated_at,
    )


# =====================================================
# CREATE
# =====================================================
async def create_quotation(
    db: AsyncSession,
    payload: QuotationCreate,
    user: User,
) -> QuotationOut:
    sales_manager_id = await _resolve_sales_manager(db, payload.sales_manager_id)
    status = normalize_quotation_status(payload.status)

    q = Quotation(
        quotation_number=await generate_quotation_number(db),
        client=payload.client.strip(),
        origin=payload.origin.strip(),
        destination=payload.destination.strip(),
        cargo_type=payload.cargo_type.strip(),
        weight=payload.weight,
        volume=payload.volume,
        estimated_cost=payload.estimated_cost,
        status=status,
        created_by_email=user.username,
        created_by_id=user.id,
        sales_manager_id=sales_manager_id,
        updated_by_id=user.id,
        payload=payload.payload or {},
    )
    db.add(q)
    await db.flush()

    await emit_activity(
        db=db,
        user_id=user.id,
        username=user.username,
        code=ActivityCode.CREATE_QUOTATION,
        resource="quotation",
        resource_id=q.id,
        target_name=q.quotation_number,
        client=q.client,
        **actor_context(user),
    )

    await db.commit()
    await db.refresh(q)

    logger.info("Quotation created", extra={"quotation_id": q.id, "number": q.quotation_number})
    return _map_quotation(q)


# =====================================================
# READ
# =====================================================
async def get_quotation(
    db: AsyncSession,
    quotation_id: int,
    user: User,
) -> QuotationOut:
    q = await _get_quotation(db, quotation_id)
    _ensure_access(q, user)
    return _map_quotation(q)


async def get_quotation_model(
    db: AsyncSession,
    quotation_id: int,
    user: User,
) -> Quotation:
    q = await _get_quotation(db, quotation_id)
    _ensure_access(q, user)
    return q


async def list_quotations(
    db: AsyncSession,
    user: User,
    search: str | None = None,
    status: str | None = None,
    page: int = 1,
    page_size: int = 15,
    sort_by: str = "created_at",
    order: str = "desc",
) -> QuotationListData:
    conditions = [Quotation.is_deleted.is_(False)]

    if status:
        conditions.append(Quotation.status == normalize_quotation_status(status))

    if search:
        pattern = f"%{search.strip()}%"
        conditions.append(
            or_(
                Quotation.quotation_number.ilike(pattern),
                Quotation.client.ilike(pattern),
                Quotation.origin.ilike(pattern),
                Quotation.destination.ilike(pattern),
            )
        )

    if not has_permission(user.role, "view_all_quotations"):
        conditions.append(scope_clause(user))

    total = await db.scalar(select(func.count(Quotation.id)).where(*conditions))

    sort_map = {
        "created_at": Quotation.created_at,
        "quotation_number": Quotation.quotation_number,
        "client": Quotation.client,
        "estimated_cost": Quotation.estimated_cost,
    }
    sort_col = sort_map.get(sort_by, Quotation.created_at)
    direction = asc if order == "asc" else desc

    result = await db.execute(
        select(Quotation)
        .where(*conditions)
        .order_by(direction(sort_col), direction(Quotation.id))
        .offset((page - 1) * page_size)
        .limit(page_size)
    )

    items = [
        QuotationListItem(
            id=q.id,
            quotation_number=q.quotation_number,
            client=q.client,
            origin=q.origin,
            destination=q.destination,
            cargo_type=q.cargo_type,
            estimated_cost=q.estimated_cost,
            status=normalize_quotation_status(q.status),
            classification=_classification(q.status),
            created_by=q.created_by_email,
            created_at=q.created_at,
        )
        for q in result.scalars().all()
    ]

    return QuotationListData(
        total=total or 0,
        page=page,
        page_size=page_size,
        items=items,
    )


# =====================================================
# UPDATE
# =====================================================
async def update_quotation(
    db: AsyncSession,
    quotation_id: int,
    payload: QuotationUpdate,
    user: User,
) -> QuotationOut:
    q = await _get_quotation(db, quotation_id, for_update=True)
    _ensure_access(q, user)

    if q.version != payload.version:
        raise AppException(409, "Version conflict", ErrorCode.QUOTATION_VERSION_CONFLICT)

    changes: list[str] = []

    for field in ("client", "origin", "destination", "cargo_type"):
        value = getattr(payload, field)
        if value is not None and value.strip() != getattr(q, field):
            setattr(q, field, value.strip())
            changes.append(field)

    for field in ("weight", "volume", "estimated_cost"):
        value = getattr(payload, field)
        if value is not None and Decimal(value) != getattr(q, field):
            setattr(q, field, value)
            changes.append(field)

    if payload.sales_manager_id is not None and payload.sales_manager_id != q.sales_manager_id:
        q.sales_manager_id = await _resolve_sales_manager(db, payload.sales_manager_id)
        changes.append("sales_manager_id")

    if payload.payload is not None:
        # shallow merge keeps unrelated form fields
        merged = {**(q.payload or {}), **payload.payload}
        if merged != (q.payload or {}):
            q.payload = merged
            changes.append("payload")

    if not changes:
        return _map_quotation(q)

    q.version += 1
    q.updated_by_id = user.id
    q.updated_at = datetime.now(timezone.utc)

    await emit_activity(
        db=db,
        user_id=user.id,
        username=user.username,
        code=ActivityCode.UPDATE_QUOTATION,
        resource="quotation",
        resource_id=q.id,
        target_name=q.quotation_number,
        changes=", ".join(changes),
        **actor_context(user),
    )

    await db.commit()
    await db.refresh(q)

    logger.info("Quotation updated", extra={"quotation_id": q.id, "changes": changes})
    return _map_quotation(q)


async def update_quotation_status(
    db: AsyncSession,
    quotation_id: int,
    payload: QuotationStatusUpdate,
    user: User,
) -> QuotationOut:
    q = await _get_quotation(db, quotation_id, for_update=True)
    _ensure_access(q, user)

    if payload.version is not None and q.version != payload.version:
        raise AppException(409, "Version conflict", ErrorCode.QUOTATION_VERSION_CONFLICT)

    old_status = normalize_quotation_status(q.status)
    new_status = normalize_quotation_status(payload.status)

    if new_status == old_status:
        return _map_quotation(q)

    q.status = new_status
    q.version += 1
    q.updated_by_id = user.id
    q.updated_at = datetime.now(timezone.utc)

    await emit_activity(
        db=db,
        user_id=user.id,
        username=user.username,
        code=ActivityCode.UPDATE_QUOTATION_STATUS,
        resource="quotation",
        resource_id=q.id,
        target_name=q.quotation_number,
        old_status=old_status.value,
        new_status=new_status.value,
        **actor_context(user),
    )

    await db.commit()

    logger.info(
        "Quotation status changed",
        extra={"quotation_id": q.id, "old_status": old_status.value, "new_status": new_status.value},
    )
    return _map_quotation(q)


# =====================================================
# DELETE
# =====================================================
async def delete_quotation(
    db: AsyncSession,
    quotation_id: int,
    version: int | None,
    user: User,
) -> QuotationOut:
    q = await _get_quotation(db, quotation_id, for_update=True)
    _ensure_access(q, user)

    if version is not None and q.version != version:
        raise AppException(409, "Version conflict", ErrorCode.QUOTATION_VERSION_CONFLICT)

    q.is_deleted = True
    q.version += 1
    q.updated_by_id = user.id
    q.updated_at = datetime.now(timezone.utc)

    await emit_activity(
        db=db,
        user_id=user.id,
        username=user.username,
        code=ActivityCode.DELETE_QUOTATION,
        resource="quotation",
        resource_id=q.id,
        target_name=q.quotation_number,
        **actor_context(user),
    )

    await db.commit()

    logger.info("Quotation deleted", extra={"quotation_id": q.id})
    return _map_quotation(q)
