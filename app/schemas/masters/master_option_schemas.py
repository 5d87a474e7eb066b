# app/schemas/masters/master_option_schemas.py

from datetime import datetime
from typing import Any, Optional, List

from pydantic import BaseModel, Field

from app.models.enums.master_category import MasterCategory, MasterOptionSource


class MasterOptionCreate(BaseModel):
    category: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=255)
    code: Optional[str] = Field(None, max_length=50)
    meta: Optional[dict[str, Any]] = None
    is_active: bool = True


class MasterOptionUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    code: Optional[str] = Field(None, max_length=50)
    meta: Optional[dict[str, Any]] = None
    is_active: Optional[bool] = None
    version: int


class MasterOptionOut(BaseModel):
    id: int
    category: MasterCategory
    name: str
    code: Optional[str]
    meta: Optional[dict[str, Any]]
    source: MasterOptionSource
    is_active: bool
    version: int
    created_by: Optional[str]
    updated_by: Optional[str]
    created_at: datetime
    updated_at: Optional[datetime]


class LookupItem(BaseModel):
    id: int
    name: str
    code: Optional[str] = None
    meta: Optional[dict[str, Any]] = None


class LookupData(BaseModel):
    category: MasterCategory
    items: List[LookupItem]
