import logging

from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from billboard.api.schemas import CampaignCreate, CampaignUpdate
from billboard.models.campaign import Campaign, CampaignStatus
from billboard.models.user_profile import UserProfile
from billboard.services.visibility import BROWSE_ROW_CAP, VisibilityFilter, filter_visible

logger = logging.getLogger(__name__)


async def create_campaign(db: AsyncSession, business: UserProfile, data: CampaignCreate) -> Campaign:
    campaign = Campaign(
        business_id=business.id,
        title=data.title,
        description=data.description,
        compensation_amount=data.compensation_amount,
        compensation_type=data.compensation_type,
        location=data.location,
        duration_hours=data.duration_hours,
        requirements=data.requirements,
        merchandise_type=data.merchandise_type,
        target_demographics=data.target_demographics,
        status=data.status or CampaignStatus.ACTIVE,
    )
    db.add(campaign)
    await db.commit()
    await db.refresh(campaign)
    return campaign


async def get_campaigns_by_business(
    db: AsyncSession, business_id: int, offset: int = 0, limit: int = 100,
) -> list[Campaign]:
    result = await db.execute(
        select(Campaign)
        .where(Campaign.business_id == business_id)
        .order_by(Campaign.created_at.desc(), Campaign.id.desc())
        .offset(offset)
        .limit(limit)
    )
    return list(result.scalars().all())


async def get_campaign_for_business(db: AsyncSession, campaign_id: int, business_id: int) -> Campaign:
    """Return the campaign only if ``business_id`` owns it; 404 otherwise."""
    result = await db.execute(select(Campaign).where(Campaign.id == campaign_id))
    campaign = result.scalar_one_or_none()
    if campaign is not None and campaign.business_id != business_id:
        logger.warning(
            "Unauthorized: business %s attempted to access campaign %s owned by %s",
            business_id, campaign_id, campaign.business_id,
        )
        campaign = None
    if campaign is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Campaign not found",
        )
    return campaign


async def update_campaign(db: AsyncSession, campaign: Campaign, data: CampaignUpdate) -> Campaign:
    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(campaign, field, value)
    await db.commit()
    await db.refresh(campaign)
    return campaign


async def get_campaign_public(db: AsyncSession, campaign_id: int, *, active_only: bool = False) -> Campaign:
    query = select(Campaign).where(Campaign.id == campaign_id)
    if active_only:
        query = query.where(Campaign.status == CampaignStatus.ACTIVE)
    campaign = (await db.execute(query)).scalar_one_or_none()
    if not campaign:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Campaign not found" if not active_only else "Campaign not found or not active",
        )
    return campaign


async def browse_campaigns(
    db: AsyncSession, requester_id: int, filters: VisibilityFilter | None = None,
) -> list[Campaign]:
    """Newest active campaigns, capped, then narrowed by the visibility filter."""
    result = await db.execute(
        select(Campaign)
        .where(Campaign.status == CampaignStatus.ACTIVE)
        .order_by(Campaign.created_at.desc(), Campaign.id.desc())
        .limit(BROWSE_ROW_CAP)
    )
    return filter_visible(result.scalars().all(), requester_id, filters)


async def suggest_campaigns(db: AsyncSession, requester_id: int, limit: int = 4) -> list[Campaign]:
    """A handful of recent campaigns for the dashboard, minus the requester's own."""
    result = await db.execute(
        select(Campaign)
        .where(Campaign.status == CampaignStatus.ACTIVE)
        .order_by(Campaign.created_at.desc(), Campaign.id.desc())
        .limit(limit)
    )
    return filter_visible(result.scalars().all(), requester_id)


async def count_campaigns(db: AsyncSession, business_id: int, *, active_only: bool) -> int:
    query = select(func.count()).select_from(Campaign).where(Campaign.business_id == business_id)
    if active_only:
        query = query.where(Campaign.status == CampaignStatus.ACTIVE)
    return (await db.execute(query)).scalar() or 0
