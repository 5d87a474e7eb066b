from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, JSON, Index, Enum as SAEnum
from app.core.db import Base
from app.models.base.mixins import TimestampMixin, SoftDeleteMixin, VersionMixin
from app.models.enums.sales_task_stage import SalesTaskStage


class SalesTask(Base, TimestampMixin, SoftDeleteMixin, VersionMixin):
    __tablename__ = "sales_tasks"

    id = Column(Integer, primary_key=True)
    title = Column(String(120), nullable=True)
    meeting_date = Column(DateTime(timezone=True), nullable=True, index=True)
    client_name = Column(String(255), nullable=False, index=True)

    sales_manager_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    sales_manager_name = Column(String(150), nullable=True)

    origin_country = Column(String(100), nullable=True)
    destination_country = Column(String(100), nullable=True)
    commodity = Column(String(255), nullable=True)
    main_comment = Column(String, nullable=True)

    # derived from the status log; rewritten on every stage event
    status = Column(SAEnum(SalesTaskStage), nullable=False, default=SalesTaskStage.MEET, index=True)
    progress = Column(JSON, nullable=False, default=dict)

    created_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    created_by_name = Column(String(150), nullable=True)
    created_by_email = Column(String(190), nullable=True, index=True)

    __table_args__ = (Index("ix_sales_task_status_updated", "status", "updated_at"),)

    def __repr__(self):
        return f"<SalesTask id={self.id} client={self.client_name} status={self.status}>"


class SalesTaskStatusLog(Base):
    """Append-only stage event log. Source of truth for SalesTask.progress."""

    __tablename__ = "sales_task_status_logs"

    id = Column(Integer, primary_key=True)
    task_id = Column(Integer, ForeignKey("sales_tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(SAEnum(SalesTaskStage), nullable=False)
    completed = Column(Boolean, nullable=False, default=True)
    comment = Column(String(2000), nullable=True)

    created_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_by_name = Column(String(150), nullable=True)
    created_by_email = Column(String(190), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (Index("ix_sales_task_log_task_created", "task_id", "created_at", "id"),)

    def __repr__(self):
        return f"<SalesTaskStatusLog id={self.id} task_id={self.task_id} status={self.status} completed={self.completed}>"
