# app/schemas/sales/sales_task_schemas.py

from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums.sales_task_stage import SalesTaskStage


# =====================================================
# REQUESTS
# =====================================================
class SalesTaskCreate(BaseModel):
    client_name: str = Field(..., min_length=1, max_length=200)
    title: Optional[str] = Field(None, max_length=120)
    meeting_date: Optional[datetime] = None
    sales_manager_id: Optional[int] = None
    sales_manager_name: Optional[str] = Field(None, max_length=150)
    origin_country: Optional[str] = Field(None, max_length=100)
    destination_country: Optional[str] = Field(None, max_length=100)
    commodity: Optional[str] = Field(None, max_length=200)
    main_comment: Optional[str] = None
    status: Optional[str] = None


class SalesTaskStatusUpdate(BaseModel):
    # validated by the progress engine so bad stages surface as SALES_TASK_INVALID_STAGE
    status: str
    completed: bool = True
    comment: Optional[str] = Field(None, max_length=2000)
    version: Optional[int] = None


class SalesTaskFilters(BaseModel):
    search: Optional[str] = None
    status: Optional[str] = None
    sales_manager_id: Optional[int] = None
    meeting_date_from: Optional[datetime] = None
    meeting_date_to: Optional[datetime] = None
    page: int = Field(1, ge=1)
    page_size: int = Field(25, ge=1, le=100)


# =====================================================
# RESPONSES
# =====================================================
class StageProgressOut(BaseModel):
    completed: bool
    completed_at: Optional[datetime]
    completed_by_name: Optional[str]
    completed_by_email: Optional[str]


class SalesTaskStatusLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    status: SalesTaskStage
    completed: bool
    comment: Optional[str]
    created_by_name: Optional[str]
    created_by_email: Optional[str]
    created_at: datetime


class SalesTaskOut(BaseModel):
    id: int
    title: Optional[str]
    meeting_date: Optional[datetime]
    client_name: str
    sales_manager_id: Optional[int]
    sales_manager_name: Optional[str]
    origin_country: Optional[str]
    destination_country: Optional[str]
    commodity: Optional[str]
    main_comment: Optional[str]
    status: SalesTaskStage
    progress: dict[SalesTaskStage, StageProgressOut]
    created_by_id: Optional[int]
    created_by_name: Optional[str]
    created_by_email: Optional[str]
    version: int
    created_at: datetime
    updated_at: Optional[datetime]


class SalesTaskDetailOut(SalesTaskOut):
    logs: List[SalesTaskStatusLogOut]


class SalesTaskListData(BaseModel):
    total: int
    page: int
    page_size: int
    items: List[SalesTaskOut]


class SalesTaskStatusResult(BaseModel):
    task: SalesTaskOut
    log: SalesTaskStatusLogOut
