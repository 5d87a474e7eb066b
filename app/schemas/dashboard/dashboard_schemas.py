# app/schemas/dashboard/dashboard_schemas.py

from datetime import date

from pydantic import BaseModel

from app.services.quotations.quotation_status_core import QuotationStatusSummary


class DashboardRange(BaseModel):
    start: date
    end: date


class DashboardMetrics(BaseModel):
    range: DashboardRange
    quotations: QuotationStatusSummary
