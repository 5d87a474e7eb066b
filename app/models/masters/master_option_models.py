from sqlalchemy import Column, Integer, String, Boolean, JSON, Index, UniqueConstraint, Enum as SAEnum
from app.core.db import Base
from app.models.base.mixins import TimestampMixin, AuditMixin, VersionMixin
from app.models.enums.master_category import MasterCategory, MasterOptionSource


class MasterOption(Base, TimestampMixin, AuditMixin, VersionMixin):
    __tablename__ = "master_options"

    id = Column(Integer, primary_key=True)
    category = Column(SAEnum(MasterCategory), nullable=False, index=True)
    name = Column(String(255), nullable=False, index=True)
    code = Column(String(50), nullable=True)
    meta = Column(JSON, nullable=True)
    source = Column(SAEnum(MasterOptionSource), nullable=False, default=MasterOptionSource.INTERNAL)
    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (
        UniqueConstraint("category", "name", name="uq_master_option_category_name"),
        Index("ix_master_option_category_active", "category", "is_active"),
    )

    def __repr__(self):
        return f"<MasterOption id={self.id} category={self.category} name={self.name}>"
