from sqlalchemy import Column, Integer, String, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from app.core.db import Base
from app.models.base.mixins import TimestampMixin, AuditMixin


class CompanyProfile(Base, TimestampMixin, AuditMixin):
    """Single-row table holding the forwarder's own letterhead data."""

    __tablename__ = "company_profiles"

    id = Column(Integer, primary_key=True)
    legal_name = Column(String(255), nullable=True)
    registration_number = Column(String(100), nullable=True)
    vat_number = Column(String(100), nullable=True)
    phone = Column(String(50), nullable=True)
    email = Column(String(190), nullable=True)
    website = Column(String(255), nullable=True)
    logo_url = Column(String, nullable=True)
    primary_color = Column(String(20), nullable=True)
    secondary_color = Column(String(20), nullable=True)
    default_locale = Column(String(10), nullable=False, default="en")

    translations = relationship(
        "CompanyProfileTranslation",
        back_populates="profile",
        cascade="all, delete-orphan",
        order_by="CompanyProfileTranslation.locale",
        lazy="selectin",
    )

    def __repr__(self):
        return f"<CompanyProfile id={self.id} legal_name={self.legal_name}>"


class CompanyProfileTranslation(Base, TimestampMixin):
    __tablename__ = "company_profile_translations"

    id = Column(Integer, primary_key=True)
    profile_id = Column(Integer, ForeignKey("company_profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    locale = Column(String(10), nullable=False)
    display_name = Column(String(255), nullable=False)
    address = Column(String, nullable=True)
    tagline = Column(String, nullable=True)
    description = Column(String, nullable=True)
    mission = Column(String, nullable=True)
    vision = Column(String, nullable=True)
    additional_info = Column(JSON, nullable=True)

    profile = relationship("CompanyProfile", back_populates="translations", lazy="noload")

    __table_args__ = (UniqueConstraint("profile_id", "locale", name="uq_company_translation_locale"),)

    def __repr__(self):
        return f"<CompanyProfileTranslation profile_id={self.profile_id} locale={self.locale}>"
