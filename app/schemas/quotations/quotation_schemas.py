# app/schemas/quotations/quotation_schemas.py

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional, List

from pydantic import BaseModel, Field

from app.models.enums.quotation_status import QuotationStatus


# =====================================================
# REQUESTS
# =====================================================
class QuotationCreate(BaseModel):
    client: str = Field(..., min_length=1, max_length=255)
    cargo_type: str = Field(..., min_length=1, max_length=50)
    origin: str = Field(..., min_length=1, max_length=255)
    destination: str = Field(..., min_length=1, max_length=255)
    weight: Optional[Decimal] = Field(None, gt=0)
    volume: Optional[Decimal] = Field(None, gt=0)
    estimated_cost: Decimal = Field(..., gt=0)
    status: Optional[str] = None
    sales_manager_id: Optional[int] = None
    payload: Optional[dict[str, Any]] = None


class QuotationUpdate(BaseModel):
    client: Optional[str] = Field(None, min_length=1, max_length=255)
    cargo_type: Optional[str] = Field(None, min_length=1, max_length=50)
    origin: Optional[str] = Field(None, min_length=1, max_length=255)
    destination: Optional[str] = Field(None, min_length=1, max_length=255)
    weight: Optional[Decimal] = Field(None, gt=0)
    volume: Optional[Decimal] = Field(None, gt=0)
    estimated_cost: Optional[Decimal] = Field(None, gt=0)
    sales_manager_id: Optional[int] = None
    payload: Optional[dict[str, Any]] = None
    version: int


class QuotationStatusUpdate(BaseModel):
    # any text is accepted; unknown values fall back to CREATED
    status: Optional[str] = None
    version: Optional[int] = None


# =====================================================
# RESPONSES
# =====================================================
class QuotationClassificationOut(BaseModel):
    is_active: bool
    is_offer_sent: bool
    is_approved: bool


class QuotationOut(BaseModel):
    id: int
    quotation_number: str
    client: str
    origin: str
    destination: str
    cargo_type: str
    weight: Optional[Decimal]
    volume: Optional[Decimal]
    estimated_cost: Decimal
    status: QuotationStatus
    classification: QuotationClassificationOut
    created_by: str
    created_by_id: Optional[int]
    sales_manager_id: Optional[int]
    sales_manager_name: Optional[str]
    payload: dict[str, Any]
    version: int
    created_at: datetime
    updated_at: Optional[datetime]


class QuotationListItem(BaseModel):
    id: int
    quotation_number: str
    client: str
    origin: str
    destination: str
    cargo_type: str
    estimated_cost: Decimal
    status: QuotationStatus
    classification: QuotationClassificationOut
    created_by: str
    created_at: datetime


class QuotationListData(BaseModel):
    total: int
    page: int
    page_size: int
    items: List[QuotationListItem]
