import logging

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from billboard.api.schemas import AdvertiserProfileUpdate, BusinessProfileUpdate
from billboard.models.user_profile import UserProfile, UserType

logger = logging.getLogger(__name__)


async def get_profile_by_subject(db: AsyncSession, auth_subject: str) -> UserProfile | None:
    result = await db.execute(
        select(UserProfile).where(UserProfile.auth_subject == auth_subject)
    )
    return result.scalar_one_or_none()


async def get_profile_by_id(db: AsyncSession, profile_id: int) -> UserProfile | None:
    result = await db.execute(select(UserProfile).where(UserProfile.id == profile_id))
    return result.scalar_one_or_none()


async def get_public_profile(db: AsyncSession, profile_id: int, user_type: UserType) -> UserProfile:
    profile = await get_profile_by_id(db, profile_id)
    if profile is None or profile.user_type != user_type:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found",
        )
    return profile


async def create_profile(
    db: AsyncSession,
    *,
    auth_subject: str,
    email: str,
    full_name: str,
    user_type: str,
    company_name: str | None = None,
) -> tuple[UserProfile, bool]:
    """Create the profile chosen at onboarding.

    Returns ``(profile, created)``. A profile that already exists for the
    subject is returned as-is with ``created=False``.
    """
    profile = UserProfile(
        auth_subject=auth_subject,
        email=email,
        full_name=full_name or None,
        user_type=user_type,
        company_name=company_name if user_type == UserType.BUSINESS else None,
    )
    db.add(profile)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        existing = await get_profile_by_subject(db, auth_subject)
        if existing is None:
            raise
        logger.info("Onboarding skipped, profile already exists for %s", auth_subject)
        return existing, False

    await db.refresh(profile)
    return profile, True


async def update_profile(
    db: AsyncSession,
    profile: UserProfile,
    data: AdvertiserProfileUpdate | BusinessProfileUpdate,
) -> UserProfile:
    for field, value in data.model_dump().items():
        setattr(profile, field, value)
    await db.commit()
    await db.refresh(profile)
    return profile
