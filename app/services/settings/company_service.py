from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.settings.company_models import CompanyProfile, CompanyProfileTranslation
from app.schemas.settings.company_schemas import (
    CompanySettingsUpdate,
    CompanySettingsOut,
    CompanyProfileOut,
    CompanyTranslationOut,
)
from app.core.exceptions import AppException
from app.constants.error_codes import ErrorCode
from app.constants.activity_codes import ActivityCode
from app.utils.activity_helpers import emit_activity, actor_context
from app.utils.logger import get_logger

logger = get_logger(__name__)

PROFILE_FIELDS = (
    "legal_name",
    "registration_number",
    "vat_number",
    "phone",
    "email",
    "website",
    "logo_url",
    "primary_color",
    "secondary_color",
)

TRANSLATION_FIELDS = (
    "display_name",
    "address",
    "tagline",
    "description",
    "mission",
    "vision",
    "additional_info",
)


async def get_company_profile(db: AsyncSession) -> CompanyProfile | None:
    result = await db.execute(select(CompanyProfile).order_by(CompanyProfile.id).limit(1))
    return result.scalar_one_or_none()


def _map_settings(profile: CompanyProfile | None) -> CompanySettingsOut:
    if profile is None:
        return CompanySettingsOut(profile=None, translations=[])

    return CompanySettingsOut(
        profile=CompanyProfileOut.model_validate(profile),
        translations=[
            CompanyTranslationOut.model_validate(t)
            for t in sorted(profile.translations, key=lambda t: t.locale)
        ],
    )


async def get_company_settings(db: AsyncSession) -> CompanySettingsOut:
    return _map_settings(await get_company_profile(db))


async def update_company_settings(
    db: AsyncSession,
    payload: CompanySettingsUpdate,
    user,
) -> CompanySettingsOut:
    if not payload.translations:
        raise AppException(
            400,
            "At least one translation is required",
            ErrorCode.COMPANY_TRANSLATION_REQUIRED,
        )

    locales: list[str] = []
    for translation in payload.translations:
        if translation.locale in locales:
            raise AppException(
                400,
                f"Locale '{translation.locale}' is duplicated",
                ErrorCode.VALIDATION_ERROR,
            )
        locales.append(translation.locale)

    default_locale = payload.default_locale if payload.default_locale in locales else locales[0]

    profile = await get_company_profile(db)
    if profile is None:
        profile = CompanyProfile(created_by_id=user.id, translations=[])
        db.add(profile)

    for field in PROFILE_FIELDS:
        setattr(profile, field, getattr(payload, field))
    profile.default_locale = default_locale
    profile.updated_by_id = user.id

    existing = {t.locale: t for t in profile.translations}
    kept: list[CompanyProfileTranslation] = []

    for incoming in payload.translations:
        row = existing.get(incoming.locale) or CompanyProfileTranslation(locale=incoming.locale)
        for field in TRANSLATION_FIELDS:
            setattr(row, field, getattr(incoming, field))
        kept.append(row)

    # delete-orphan drops locales missing from the payload
    profile.translations = kept

    await emit_activity(
        db=db,
        user_id=user.id,
        username=user.username,
        code=ActivityCode.UPDATE_COMPANY_SETTINGS,
        resource="company_settings",
        locales=", ".join(locales),
        **actor_context(user),
    )

    await db.commit()
    await db.refresh(profile)

    logger.info("Company settings updated", extra={"profile_id": profile.id, "locales": locales})
    return _map_settings(profile)
