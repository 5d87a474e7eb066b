# app/schemas/settings/company_schemas.py

from typing import Any, Optional, List

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class CompanyTranslationIn(BaseModel):
    locale: str = Field(..., min_length=2, max_length=10)
    display_name: str = Field(..., min_length=1, max_length=255)
    address: Optional[str] = None
    tagline: Optional[str] = None
    description: Optional[str] = None
    mission: Optional[str] = None
    vision: Optional[str] = None
    additional_info: Optional[dict[str, Any]] = None


class CompanySettingsUpdate(BaseModel):
    legal_name: Optional[str] = Field(None, max_length=255)
    registration_number: Optional[str] = Field(None, max_length=100)
    vat_number: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None
    website: Optional[str] = Field(None, max_length=255)
    logo_url: Optional[str] = None
    primary_color: Optional[str] = Field(None, max_length=20)
    secondary_color: Optional[str] = Field(None, max_length=20)
    default_locale: str = Field("en", min_length=2, max_length=10)
    translations: List[CompanyTranslationIn]


class CompanyProfileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    legal_name: Optional[str]
    registration_number: Optional[str]
    vat_number: Optional[str]
    phone: Optional[str]
    email: Optional[str]
    website: Optional[str]
    logo_url: Optional[str]
    primary_color: Optional[str]
    secondary_color: Optional[str]
    default_locale: str


class CompanyTranslationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    locale: str
    display_name: str
    address: Optional[str]
    tagline: Optional[str]
    description: Optional[str]
    mission: Optional[str]
    vision: Optional[str]
    additional_info: Optional[dict[str, Any]]


class CompanySettingsOut(BaseModel):
    profile: Optional[CompanyProfileOut] = None
    translations: List[CompanyTranslationOut] = []
