import logging

from fastapi import HTTPException, status
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from billboard.models.application import Application
from billboard.models.campaign import Campaign, CampaignStatus
from billboard.models.user_profile import UserProfile
from billboard.services.application_state_machine import (
    Actor,
    ApplicationStatus,
    InvalidTransitionError,
    validate_transition,
)
from billboard.services.audit import AuditAction, log_audit
from billboard.services.notification import notify_application_received, notify_application_status

logger = logging.getLogger(__name__)


async def create_application(
    db: AsyncSession,
    advertiser: UserProfile,
    campaign_id: int,
    message: str | None = None,
) -> Application:
    """Apply to an active campaign. One application per advertiser per campaign."""
    result = await db.execute(
        select(Campaign).where(
            Campaign.id == campaign_id,
            Campaign.status == CampaignStatus.ACTIVE,
        )
    )
    campaign = result.scalar_one_or_none()
    if not campaign:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Campaign not found or not active",
        )

    application = Application(
        campaign_id=campaign.id,
        advertiser_id=advertiser.id,
        status=ApplicationStatus.PENDING,
        message=message,
    )
    db.add(application)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="You have already applied to this campaign",
        )
    await db.refresh(application)

    logger.info("Application %s created: advertiser %s -> campaign %s",
                application.id, advertiser.id, campaign.id)
    await notify_application_received(db, application)
    return application


async def get_application_for_business(
    db: AsyncSession, application_id: int, business_id: int,
) -> Application:
    """Return the application if it targets a campaign ``business_id`` owns; 404 otherwise."""
    result = await db.execute(
        select(Application)
        .join(Campaign, Campaign.id == Application.campaign_id)
        .where(
            Application.id == application_id,
            Campaign.business_id == business_id,
        )
    )
    application = result.scalar_one_or_none()
    if not application:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Application not found",
        )
    return application


async def transition_application(
    db: AsyncSession,
    application_id: int,
    action: str,
    business: UserProfile,
    ip_address: str | None = None,
) -> Application:
    """Accept or reject a pending application.

    The status write is conditional on the row still being ``pending``; a
    concurrent decision that landed first makes this one fail with
    InvalidTransitionError instead of overwriting it.
    """
    application = await get_application_for_business(db, application_id, business.id)
    new_status = validate_transition(application.status, action, Actor.BUSINESS)

    result = await db.execute(
        update(Application)
        .where(
            Application.id == application.id,
            Application.status == ApplicationStatus.PENDING,
        )
        .values(status=new_status.value)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.rollback()
        logger.warning("Application %s changed concurrently, %s rejected", application.id, action)
        raise InvalidTransitionError(application.status, action, Actor.BUSINESS)

    await db.commit()
    await db.refresh(application)

    await log_audit(
        db,
        action=AuditAction.APPROVE if new_status == ApplicationStatus.ACCEPTED else AuditAction.REJECT,
        entity_type="application",
        entity_id=application.id,
        user_id=business.id,
        details={"from_status": ApplicationStatus.PENDING.value, "to_status": new_status.value},
        ip_address=ip_address,
    )
    await notify_application_status(db, application)
    return application


async def get_applications_for_campaign(db: AsyncSession, campaign_id: int) -> list[Application]:
    result = await db.execute(
        select(Application)
        .where(Application.campaign_id == campaign_id)
        .order_by(Application.created_at.desc(), Application.id.desc())
    )
    return list(result.scalars().all())


async def get_applications_for_business(db: AsyncSession, business_id: int) -> list[Application]:
    """Every application across all of the business's campaigns."""
    result = await db.execute(
        select(Application)
        .join(Campaign, Campaign.id == Application.campaign_id)
        .where(Campaign.business_id == business_id)
        .order_by(Application.created_at.desc(), Application.id.desc())
    )
    return list(result.scalars().all())


async def get_applications_by_advertiser(db: AsyncSession, advertiser_id: int) -> list[Application]:
    result = await db.execute(
        select(Application)
        .where(Application.advertiser_id == advertiser_id)
        .order_by(Application.created_at.desc(), Application.id.desc())
    )
    return list(result.scalars().all())
