"""Aggregates shown on the business and advertiser dashboards."""

from collections.abc import Iterable, Sequence
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from billboard.api.schemas import (
    AdvertiserDashboardResponse,
    ApplicationWithCampaignResponse,
    BusinessDashboardResponse,
    BusinessStats,
    CampaignApplicationCounts,
    CampaignResponse,
    ProfileResponse,
)
from billboard.models.application import Application
from billboard.models.campaign import Campaign, CampaignStatus
from billboard.models.user_profile import UserProfile
from billboard.services.application import (
    get_applications_by_advertiser,
    get_applications_for_business,
)
from billboard.services.campaign import get_campaigns_by_business, suggest_campaigns
from billboard.services.campaign_limits import get_campaign_limit_status


def _round_half_up(value: float | Decimal, places: int = 0) -> Decimal:
    exp = Decimal(1).scaleb(-places)
    return Decimal(str(value)).quantize(exp, rounding=ROUND_HALF_UP)


def count_applications(
    campaigns: Sequence[Campaign], applications: Iterable[Application],
) -> list[CampaignApplicationCounts]:
    """Per-campaign application tallies, in campaign order."""
    counts = {
        c.id: {"total": 0, "pending": 0, "accepted": 0, "rejected": 0} for c in campaigns
    }
    for app in applications:
        bucket = counts.get(app.campaign_id)
        if bucket is None:
            continue
        bucket["total"] += 1
        if app.status in bucket:
            bucket[app.status] += 1
    return [CampaignApplicationCounts(campaign_id=cid, **c) for cid, c in counts.items()]


def summarize_business(
    campaigns: Sequence[Campaign], counts: Sequence[CampaignApplicationCounts],
) -> BusinessStats:
    total_campaigns = len(campaigns)
    total = sum(c.total for c in counts)
    accepted = sum(c.accepted for c in counts)
    pending = sum(c.pending for c in counts)
    rejected = sum(c.rejected for c in counts)

    acceptance_rate = _round_half_up(accepted / total * 100) if total else Decimal(0)
    avg_comp = (
        _round_half_up(sum(Decimal(str(c.compensation_amount)) for c in campaigns) / total_campaigns)
        if total_campaigns else Decimal(0)
    )
    avg_apps = _round_half_up(total / total_campaigns, 1) if total_campaigns else Decimal(0)

    return BusinessStats(
        total_campaigns=total_campaigns,
        active_campaigns=sum(1 for c in campaigns if c.status == CampaignStatus.ACTIVE),
        total_applications=total,
        accepted_applications=accepted,
        pending_applications=pending,
        rejected_applications=rejected,
        acceptance_rate=int(acceptance_rate),
        avg_compensation_offered=int(avg_comp),
        avg_applications_per_campaign=float(avg_apps),
    )


async def build_business_dashboard(db: AsyncSession, business: UserProfile) -> BusinessDashboardResponse:
    campaigns = await get_campaigns_by_business(db, business.id)
    applications = await get_applications_for_business(db, business.id)
    counts = count_applications(campaigns, applications)
    return BusinessDashboardResponse(
        profile=ProfileResponse.model_validate(business),
        campaigns=[CampaignResponse.model_validate(c) for c in campaigns],
        application_counts=counts,
        stats=summarize_business(campaigns, counts),
        limit=await get_campaign_limit_status(db, business.id),
    )


async def build_advertiser_dashboard(db: AsyncSession, advertiser: UserProfile) -> AdvertiserDashboardResponse:
    applications = await get_applications_by_advertiser(db, advertiser.id)
    suggested = await suggest_campaigns(db, advertiser.id)
    return AdvertiserDashboardResponse(
        profile=ProfileResponse.model_validate(advertiser),
        applications=[ApplicationWithCampaignResponse.model_validate(a) for a in applications],
        suggested_campaigns=[CampaignResponse.model_validate(c) for c in suggested],
    )
