"""Per-business campaign quotas.

The active-campaign guard fails open: if the count cannot be read, the
business is allowed to create the campaign. Counts run inside a savepoint
so a failed read leaves the request's session and its loaded objects usable.
"""

import logging
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from billboard.api.schemas import CampaignLimitStatus
from billboard.core.config import settings
from billboard.services.campaign import count_campaigns

logger = logging.getLogger(__name__)


async def can_create_campaign(db: AsyncSession, business_id: int) -> bool:
    try:
        async with db.begin_nested():
            active = await count_campaigns(db, business_id, active_only=True)
    except Exception:
        logger.exception("Error checking campaign count for business %s, allowing creation", business_id)
        return True
    return active < settings.max_active_campaigns


async def get_campaign_limit_status(db: AsyncSession, business_id: int) -> CampaignLimitStatus:
    try:
        async with db.begin_nested():
            active = await count_campaigns(db, business_id, active_only=True)
            total = await count_campaigns(db, business_id, active_only=False)
    except Exception:
        logger.exception("Error fetching campaign counts for business %s", business_id)
        return CampaignLimitStatus(
            active_campaigns=0,
            total_campaigns=0,
            max_active=settings.max_active_campaigns,
            max_total=settings.max_total_campaigns,
            can_create=False,
            remaining_active=settings.max_active_campaigns,
            error="Unable to fetch campaign limit status",
        )

    return CampaignLimitStatus(
        active_campaigns=active,
        total_campaigns=total,
        max_active=settings.max_active_campaigns,
        max_total=settings.max_total_campaigns,
        can_create=active < settings.max_active_campaigns,
        remaining_active=max(0, settings.max_active_campaigns - active),
    )


def validate_campaign_constraints(
    compensation_amount: Decimal | float | None = None,
    duration_hours: int | None = None,
) -> list[str]:
    """Business-rule violations for a campaign payload; empty when valid."""
    errors: list[str] = []
    if compensation_amount and compensation_amount > settings.max_compensation_amount:
        errors.append(
            f"Compensation amount exceeds maximum allowed (${settings.max_compensation_amount:,})"
        )
    if duration_hours and duration_hours > settings.max_campaign_duration_hours:
        errors.append(f"Duration cannot exceed {settings.max_campaign_duration_hours} hours")
    return errors
