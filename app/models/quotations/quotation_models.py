from decimal import Decimal

from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, Enum, JSON, Index, CheckConstraint
from sqlalchemy.orm import relationship
from app.core.db import Base
from app.models.base.mixins import TimestampMixin, SoftDeleteMixin, VersionMixin
from app.models.enums.quotation_status import QuotationStatus


class Quotation(Base, TimestampMixin, SoftDeleteMixin, VersionMixin):
    __tablename__ = "quotations"

    id = Column(Integer, primary_key=True)
    quotation_number = Column(String(50), nullable=False, unique=True, index=True)

    client = Column(String(255), nullable=False, index=True)
    origin = Column(String(255), nullable=False)
    destination = Column(String(255), nullable=False)
    cargo_type = Column(String(50), nullable=False)

    weight = Column(Numeric(14, 3), nullable=True)
    volume = Column(Numeric(14, 3), nullable=True)
    estimated_cost = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))

    status = Column(Enum(QuotationStatus), nullable=False, default=QuotationStatus.CREATED, index=True)

    created_by_email = Column(String(190), nullable=False, index=True)
    created_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    sales_manager_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    updated_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # free-form form fields (incoterm, commodity, rates, include/exclude ...)
    payload = Column(JSON, nullable=True)

    sales_manager = relationship("User", foreign_keys=[sales_manager_id], lazy="selectin")

    __table_args__ = (
        Index("ix_quotation_status_created", "status", "created_at"),
        CheckConstraint("estimated_cost > 0", name="ck_quotation_estimated_cost_positive"),
        CheckConstraint("weight IS NULL OR weight > 0", name="ck_quotation_weight_positive"),
        CheckConstraint("volume IS NULL OR volume > 0", name="ck_quotation_volume_positive"),
    )

    def __repr__(self):
        return f"<Quotation {self.quotation_number} status={self.status}>"
