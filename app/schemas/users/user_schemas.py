from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional, List
from datetime import datetime


# =========================
# CREATE / UPDATE
# =========================
class UserCreateSchema(BaseModel):
    email: EmailStr
    name: Optional[str] = Field(None, max_length=150)
    password: str = Field(min_length=6)
    role: str = "user"


class UserUpdateSchema(BaseModel):
    email: Optional[EmailStr] = None
    name: Optional[str] = Field(None, max_length=150)
    password: Optional[str] = Field(None, min_length=6)
    role: Optional[str] = None
    is_active: Optional[bool] = None
    version: int


class VersionOnlySchema(BaseModel):
    version: int


class ProfileUpdateSchema(BaseModel):
    email: Optional[EmailStr] = None
    name: Optional[str] = Field(None, max_length=150)
    password: Optional[str] = Field(None, min_length=8, max_length=100)


# =========================
# LIST FILTERS
# =========================
class UserListFilters(BaseModel):
    search: Optional[str] = None
    role: Optional[str] = None
    is_active: Optional[bool] = None
    is_online: Optional[bool] = None
    created_today: Optional[bool] = None
    created_by: Optional[int] = None
    sort_by: str = "created_at"
    sort_order: str = "desc"
    page: int = Field(1, ge=1)
    page_size: int = Field(20, ge=1, le=100)


# =========================
# RESPONSE SCHEMAS
# =========================
class UserListItemSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    name: Optional[str]
    role: str
    is_active: bool
    is_online: bool
    last_login: Optional[datetime]
    version: int


class UserListResponseSchema(BaseModel):
    items: List[UserListItemSchema]
    total: int
    page: int
    page_size: int


class UserDetailSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    name: Optional[str]
    role: str
    is_active: bool
    is_online: bool
    last_login: Optional[datetime]
    created_at: datetime
    updated_at: Optional[datetime]
    created_by_admin_id: Optional[int]
    version: int


class SalesManagerOption(BaseModel):
    id: int
    name: str
    email: str
    role: str


# =========================
# DASHBOARD
# =========================
class UserDashboardStatsSchema(BaseModel):
    total_users: int
    active_users: int
    admin_users: int
    online_users: int
    by_role: dict[str, int]
