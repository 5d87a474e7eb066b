from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.utils.check_roles import require_permission
from app.utils.response import success_response, APIResponse
from app.utils.logger import get_logger

from app.schemas.sales.sales_task_schemas import (
    SalesTaskCreate,
    SalesTaskStatusUpdate,
    SalesTaskFilters,
    SalesTaskOut,
    SalesTaskDetailOut,
    SalesTaskListData,
    SalesTaskStatusLogOut,
    SalesTaskStatusResult,
)
from app.services.sales.sales_task_service import (
    create_sales_task,
    list_sales_tasks,
    get_sales_task,
    list_status_logs,
    update_sales_task_status,
    rebuild_sales_task_progress,
    delete_sales_task,
)

router = APIRouter(
    prefix="/sales-tasks",
    tags=["Sales Tasks"],
)
logger = get_logger(__name__)


@router.post(
    "",
    response_model=APIResponse[SalesTaskDetailOut],
)
async def create_sales_task_api(
    payload: SalesTaskCreate,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_permission("manage_sales_tasks")),
):
    logger.info("Create sales task", extra={"client": payload.client_name, "user_id": user.id})
    task = await create_sales_task(db, payload, user)
    return success_response("Sales task created successfully", task)


@router.get(
    "",
    response_model=APIResponse[SalesTaskListData],
)
async def list_sales_tasks_api(
    filters: SalesTaskFilters = Depends(),
    db: AsyncSession = Depends(get_db),
    user=Depends(require_permission("access_sales_tasks")),
):
    data = await list_sales_tasks(db, filters, user)
    return success_response("Sales tasks retrieved successfully", data)


@router.get(
    "/{task_id}",
    response_model=APIResponse[SalesTaskDetailOut],
)
async def get_sales_task_api(
    task_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_permission("access_sales_tasks")),
):
    task = await get_sales_task(db, task_id, user)
    return success_response("Sales task retrieved successfully", task)


@router.get(
    "/{task_id}/status",
    response_model=APIResponse[list[SalesTaskStatusLogOut]],
)
async def list_status_logs_api(
    task_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_permission("access_sales_tasks")),
):
    logs = await list_status_logs(db, task_id, user)
    return success_response("Status log retrieved successfully", logs)


@router.patch(
    "/{task_id}/status",
    response_model=APIResponse[SalesTaskStatusResult],
)
async def update_sales_task_status_api(
    task_id: int,
    payload: SalesTaskStatusUpdate,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_permission("manage_sales_tasks")),
):
    logger.info(
        "Sales task stage event",
        extra={"task_id": task_id, "stage": payload.status, "completed": payload.completed},
    )
    result = await update_sales_task_status(db, task_id, payload, user)
    return success_response("Sales task status updated successfully", result)


@router.post(
    "/{task_id}/progress/rebuild",
    response_model=APIResponse[SalesTaskOut],
)
async def rebuild_progress_api(
    task_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_permission("view_all_sales_tasks")),
):
    task = await rebuild_sales_task_progress(db, task_id, user)
    return success_response("Sales task progress rebuilt", task)


@router.delete(
    "/{task_id}",
    response_model=APIResponse[SalesTaskOut],
)
async def delete_sales_task_api(
    task_id: int,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_permission("manage_sales_tasks")),
):
    task = await delete_sales_task(db, task_id, user)
    return success_response("Sales task deleted successfully", task)
