# app/models/enums/quotation_status.py
import enum


class QuotationStatus(str, enum.Enum):
    CREATED = "CREATED"
    QUOTATION = "QUOTATION"
    CONFIRMED = "CONFIRMED"
    ONGOING = "ONGOING"
    ARRIVED = "ARRIVED"
    RELEASED = "RELEASED"
    CLOSED = "CLOSED"
    CANCELLED = "CANCELLED"
