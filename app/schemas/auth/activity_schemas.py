# app/schemas/auth/activity_schemas.py

from datetime import datetime
from typing import Optional, List

from fastapi import Query
from pydantic import BaseModel, ConfigDict


class UserActivityFilters(BaseModel):
    user_id: Optional[int] = Query(None)
    username: Optional[str] = Query(None)
    action: Optional[str] = Query(None)
    resource: Optional[str] = Query(None)
    resource_id: Optional[str] = Query(None)

    page: int = Query(1, ge=1)
    page_size: int = Query(20, ge=1, le=100)

    sort_by: str = Query("created_at")
    sort_order: str = Query("desc")


class UserActivityOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: Optional[int]
    username_snapshot: str
    action: str
    resource: Optional[str]
    resource_id: Optional[str]
    message: str
    created_at: datetime


class UserActivityListData(BaseModel):
    total: int
    items: List[UserActivityOut]
