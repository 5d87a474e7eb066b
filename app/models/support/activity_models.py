from sqlalchemy import Column, Integer, String, ForeignKey, Index
from sqlalchemy.orm import relationship
from app.core.db import Base
from app.models.base.mixins import TimestampMixin


class UserActivity(Base, TimestampMixin):
    """Immutable audit log. APPEND-ONLY. Never updated, never deleted."""

    __tablename__ = "user_activity"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    username_snapshot = Column(String(190), nullable=False, index=True)
    action = Column(String(80), nullable=False, index=True)
    resource = Column(String(80), nullable=True, index=True)
    resource_id = Column(String(64), nullable=True)
    message = Column(String, nullable=False)

    user = relationship("User", lazy="noload")

    __table_args__ = (
        Index("ix_user_activity_user_created", "user_id", "created_at"),
        Index("ix_user_activity_resource_ref", "resource", "resource_id"),
    )

    def __repr__(self):
        return f"<UserActivity id={self.id} action={self.action} user={self.username_snapshot}>"
