# app/services/sales/sales_task_service.py

from datetime import datetime, time, timezone

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.sales.sales_task_models import SalesTask, SalesTaskStatusLog
from app.models.users.user_models import User
from app.models.enums.sales_task_stage import SalesTaskStage
from app.schemas.sales.sales_task_schemas import (
    SalesTaskCreate,
    SalesTaskStatusUpdate,
    SalesTaskFilters,
    SalesTaskOut,
    SalesTaskDetailOut,
    SalesTaskListData,
    SalesTaskStatusLogOut,
    SalesTaskStatusResult,
    StageProgressOut,
)
from app.services.sales.sales_task_progress_core import (
    StageActor,
    StatusLogEntry,
    ensure_progress,
    parse_stage,
    progress_to_json,
    project_progress,
    record_stage_event,
    resolve_overall_status,
    SALES_TASK_STAGE_ORDER,
)
from app.core.permissions import has_permission
from app.core.exceptions import AppException
from app.constants.error_codes import ErrorCode
from app.constants.activity_codes import ActivityCode
from app.utils.activity_helpers import emit_activity, actor_context
from app.utils.logger import get_logger

logger = get_logger(__name__)


# =====================================================
# HELPERS
# =====================================================
def _actor(user: User) -> StageActor:
    return StageActor(user_id=user.id, name=user.display_name, email=user.username)


def _owner_clause(user: User):
    return or_(
        SalesTask.created_by_id == user.id,
        SalesTask.sales_manager_id == user.id,
        SalesTask.created_by_email == user.username,
    )


def _owns(task: SalesTask, user: User) -> bool:
    return (
        task.created_by_id == user.id
        or task.sales_manager_id == user.id
        or task.created_by_email == user.username
    )


def _ensure_access(task: SalesTask, user: User):
    if has_permission(user.role, "view_all_sales_tasks"):
        return
    if not _owns(task, user):
        logger.warning(
            "Sales task access denied",
            extra={"task_id": task.id, "user_id": user.id},
        )
        raise AppException(403, "You do not have access to this task", ErrorCode.PERMISSION_DENIED)


async def _get_task(
    db: AsyncSession,
    task_id: int,
    for_update: bool = False,
) -> SalesTask:
    stmt = select(SalesTask).where(
        SalesTask.id == task_id,
        SalesTask.is_deleted.is_(False),
    )
    if for_update:
        # serializes stage events per task on Postgres; SQLite already has a single writer
        stmt = stmt.with_for_update()

    result = await db.execute(stmt)
    task = result.scalar_one_or_none()
    if not task:
        raise AppException(404, "Sales task not found", ErrorCode.SALES_TASK_NOT_FOUND)
    return task


async def _load_logs(
    db: AsyncSession,
    task_id: int,
    newest_first: bool = False,
) -> list[SalesTaskStatusLog]:
    order = (
        (SalesTaskStatusLog.created_at.desc(), SalesTaskStatusLog.id.desc())
        if newest_first
        else (SalesTaskStatusLog.created_at.asc(), SalesTaskStatusLog.id.asc())
    )
    result = await db.execute(
        select(SalesTaskStatusLog)
        .where(SalesTaskStatusLog.task_id == task_id)
        .order_by(*order)
    )
    return list(result.scalars().all())


def _log_row(task_id: int, entry: StatusLogEntry) -> SalesTaskStatusLog:
    return SalesTaskStatusLog(
        task_id=task_id,
        status=entry.status,
        completed=entry.completed,
        comment=entry.comment,
        created_by_id=entry.created_by_id,
        created_by_name=entry.created_by_name,
        created_by_email=entry.created_by_email,
        created_at=entry.created_at,
    )


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _to_entry(row: SalesTaskStatusLog) -> StatusLogEntry:
    return StatusLogEntry(
        id=row.id,
        status=row.status,
        completed=row.completed,
        comment=row.comment,
        created_by_id=row.created_by_id,
        created_by_name=row.created_by_name,
        created_by_email=row.created_by_email,
        created_at=_as_utc(row.created_at),
    )


def _map_task(task: SalesTask) -> SalesTaskOut:
    progress = ensure_progress(task.progress)
    return SalesTaskOut(
        id=task.id,
        title=task.title,
        meeting_date=task.meeting_date,
        client_name=task.client_name,
        sales_manager_id=task.sales_manager_id,
        sales_manager_name=task.sales_manager_name,
        origin_country=task.origin_country,
        destination_country=task.destination_country,
        commodity=task.commodity,
        main_comment=task.main_comment,
        status=task.status,
        progress={
            stage: StageProgressOut(**progress[stage].model_dump())
            for stage in SALES_TASK_STAGE_ORDER
        },
        created_by_id=task.created_by_id,
        created_by_name=task.created_by_name,
        created_by_email=task.created_by_email,
        version=task.version,
        created_at=task.created_at,
        updated_at=task.updated_at,
    )


def _map_log(row: SalesTaskStatusLog) -> SalesTaskStatusLogOut:
    return SalesTaskStatusLogOut.model_validate(row)


# =====================================================
# CREATE
# =====================================================
async def create_sales_task(
    db: AsyncSession,
    payload: SalesTaskCreate,
    user: User,
) -> SalesTaskDetailOut:
    initial_stage = parse_stage(payload.status) if payload.status else SalesTaskStage.MEET

    sales_manager_id = None
    sales_manager_name = payload.sales_manager_name or None

    if payload.sales_manager_id:
        manager = await db.get(User, payload.sales_manager_id)
        if manager:
            sales_manager_id = manager.id
            sales_manager_name = sales_manager_name or manager.display_name
        else:
            logger.warning(
                "Sales manager id not found, storing name only",
                extra={"sales_manager_id": payload.sales_manager_id},
            )

    progress, entry = record_stage_event(
        ensure_progress(None),
        initial_stage,
        completed=True,
        actor=_actor(user),
        comment=payload.main_comment or "Task created",
    )

    task = SalesTask(
        title=payload.title or None,
        meeting_date=payload.meeting_date,
        client_name=payload.client_name.strip(),
        sales_manager_id=sales_manager_id,
        sales_manager_name=sales_manager_name,
        origin_country=payload.origin_country or None,
        destination_country=payload.destination_country or None,
        commodity=payload.commodity or None,
        main_comment=payload.main_comment or None,
        status=resolve_overall_status(progress),
        progress=progress_to_json(progress),
        created_by_id=user.id,
        created_by_name=user.display_name,
        created_by_email=user.username,
    )
    db.add(task)
    await db.flush()

    log = _log_row(task.id, entry)
    db.add(log)

    await emit_activity(
        db=db,
        user_id=user.id,
        username=user.username,
        code=ActivityCode.CREATE_SALES_TASK,
        resource="sales_task",
        resource_id=task.id,
        client=task.client_name,
        stage=initial_stage.value,
        **actor_context(user),
    )

    await db.commit()
    await db.refresh(task)
    await db.refresh(log)

    logger.info("Sales task created", extra={"task_id": task.id, "stage": initial_stage.value})

    return SalesTaskDetailOut(**_map_task(task).model_dump(), logs=[_map_log(log)])


# =====================================================
# READ
# =====================================================
async def list_sales_tasks(
    db: AsyncSession,
    filters: SalesTaskFilters,
    user: User,
) -> SalesTaskListData:
    conditions = [SalesTask.is_deleted.is_(False)]

    if filters.status:
        # unknown stage filters are ignored rather than rejected
        stage = filters.status.strip().upper()
        if stage in SalesTaskStage.__members__:
            conditions.append(SalesTask.status == SalesTaskStage(stage))

    if filters.sales_manager_id:
        conditions.append(SalesTask.sales_manager_id == filters.sales_manager_id)

    if filters.meeting_date_from:
        conditions.append(SalesTask.meeting_date >= filters.meeting_date_from)

    if filters.meeting_date_to:
        end = filters.meeting_date_to
        if end.time() == time.min:
            end = datetime.combine(end.date(), time.max, tzinfo=end.tzinfo)
        conditions.append(SalesTask.meeting_date <= end)

    if filters.search:
        pattern = f"%{filters.search.strip()}%"
        conditions.append(
            or_(
                SalesTask.client_name.ilike(pattern),
                SalesTask.sales_manager_name.ilike(pattern),
                SalesTask.commodity.ilike(pattern),
                SalesTask.main_comment.ilike(pattern),
            )
        )

    if not has_permission(user.role, "view_all_sales_tasks"):
        conditions.append(_owner_clause(user))

    total = await db.scalar(select(func.count(SalesTask.id)).where(*conditions))

    result = await db.execute(
        select(SalesTask)
        .where(*conditions)
        .order_by(SalesTask.updated_at.desc(), SalesTask.id.desc())
        .offset((filters.page - 1) * filters.page_size)
        .limit(filters.page_size)
    )

    return SalesTaskListData(
        total=total or 0,
        page=filters.page,
        page_size=filters.page_size,
        items=[_map_task(t) for t in result.scalars().all()],
    )


async def get_sales_task(
    db: AsyncSession,
    task_id: int,
    user: User,
) -> SalesTaskDetailOut:
    task = await _get_task(db, task_id)
    _ensure_access(task, user)

    logs = await _load_logs(db, task.id)
    return SalesTaskDetailOut(
        **_map_task(task).model_dump(),
        logs=[_map_log(row) for row in logs],
    )


async def list_status_logs(
    db: AsyncSession,
    task_id: int,
    user: User,
) -> list[SalesTaskStatusLogOut]:
    task = await _get_task(db, task_id)
    _ensure_access(task, user)

    return [_map_log(row) for row in await _load_logs(db, task.id, newest_first=True)]


# =====================================================
# STAGE EVENTS
# =====================================================
async def update_sales_task_status(
    db: AsyncSession,
    task_id: int,
    payload: SalesTaskStatusUpdate,
    user: User,
) -> SalesTaskStatusResult:
    task = await _get_task(db, task_id, for_update=True)
    _ensure_access(task, user)

    if payload.version is not None and payload.version != task.version:
        raise AppException(
            409,
            "Sales task was modified by another process",
            ErrorCode.SALES_TASK_VERSION_CONFLICT,
        )

    progress, entry = record_stage_event(
        ensure_progress(task.progress),
        payload.status,
        completed=payload.completed,
        actor=_actor(user),
        comment=payload.comment,
    )

    log = _log_row(task.id, entry)
    db.add(log)

    task.progress = progress_to_json(progress)
    task.status = resolve_overall_status(progress)
    task.version += 1
    task.updated_at = datetime.now(timezone.utc)

    await emit_activity(
        db=db,
        user_id=user.id,
        username=user.username,
        code=ActivityCode.UPDATE_SALES_TASK_STATUS,
        resource="sales_task",
        resource_id=task.id,
        task_id=task.id,
        stage=entry.status.value,
        state="completed" if entry.completed else "not completed",
        **actor_context(user),
    )

    await db.commit()
    await db.refresh(log)

    logger.info(
        "Sales task stage recorded",
        extra={
            "task_id": task.id,
            "stage": entry.status.value,
            "completed": entry.completed,
            "overall_status": task.status.value,
        },
    )

    return SalesTaskStatusResult(task=_map_task(task), log=_map_log(log))


async def rebuild_sales_task_progress(
    db: AsyncSession,
    task_id: int,
    user: User,
) -> SalesTaskOut:
    """Recompute the stored projection from the status log."""
    task = await _get_task(db, task_id, for_update=True)

    logs = await _load_logs(db, task.id)
    progress = project_progress(_to_entry(row) for row in logs)

    task.progress = progress_to_json(progress)
    task.status = resolve_overall_status(progress)
    task.version += 1
    task.updated_at = datetime.now(timezone.utc)

    await emit_activity(
        db=db,
        user_id=user.id,
        username=user.username,
        code=ActivityCode.REBUILD_SALES_TASK_PROGRESS,
        resource="sales_task",
        resource_id=task.id,
        task_id=task.id,
        log_count=len(logs),
        **actor_context(user),
    )

    await db.commit()

    logger.info("Sales task progress rebuilt", extra={"task_id": task.id, "log_count": len(logs)})
    return _map_task(task)


# =====================================================
# DELETE
# =====================================================
async def delete_sales_task(
    db: AsyncSession,
    task_id: int,
    user: User,
) -> SalesTaskOut:
    task = await _get_task(db, task_id, for_update=True)
    _ensure_access(task, user)

    task.is_deleted = True
    task.version += 1
    task.updated_at = datetime.now(timezone.utc)

    await emit_activity(
        db=db,
        user_id=user.id,
        username=user.username,
        code=ActivityCode.DELETE_SALES_TASK,
        resource="sales_task",
        resource_id=task.id,
        task_id=task.id,
        client=task.client_name,
        **actor_context(user),
    )

    await db.commit()

    logger.info("Sales task deleted", extra={"task_id": task.id})
    return _map_task(task)
