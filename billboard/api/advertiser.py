from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from billboard.api.schemas import (
    AdvertiserDashboardResponse,
    AdvertiserProfileUpdate,
    ApplicationCreate,
    ApplicationResponse,
    ApplicationWithCampaignResponse,
    CampaignDetailResponse,
    CampaignResponse,
    ProfileResponse,
    PublicProfileResponse,
)
from billboard.core.config import settings
from billboard.core.deps import get_db
from billboard.core.rate_limit import get_client_ip, limiter, session_or_ip_key
from billboard.core.rbac import require_advertiser
from billboard.core.security import get_current_profile
from billboard.models.user_profile import UserProfile, UserType
from billboard.services import application as application_svc
from billboard.services import campaign as campaign_svc
from billboard.services import dashboard as dashboard_svc
from billboard.services import user as user_svc
from billboard.services.audit import AuditAction, log_audit
from billboard.services.visibility import VisibilityFilter

router = APIRouter(prefix="/advertiser", tags=["advertiser"])


@router.get("/dashboard", response_model=AdvertiserDashboardResponse)
async def advertiser_dashboard(
    user: UserProfile = Depends(require_advertiser),
    db: AsyncSession = Depends(get_db),
):
    return await dashboard_svc.build_advertiser_dashboard(db, user)


# ---------------------------------------------------------------------------
# Campaigns
# ---------------------------------------------------------------------------


@router.get("/campaigns", response_model=list[CampaignResponse])
async def browse_campaigns(
    location: str = Query(""),
    merchandise: str = Query(""),
    gender: str = Query(""),
    age_range: str = Query(""),
    min_comp: str = Query(""),
    max_comp: str = Query(""),
    user: UserProfile = Depends(require_advertiser),
    db: AsyncSession = Depends(get_db),
):
    """Active campaigns, minus the viewer's own, narrowed by the query filters.

    Bounds are passed through as raw strings; malformed values are ignored.
    """
    filters = VisibilityFilter(
        location=location,
        merchandise=merchandise,
        gender=gender,
        age_range=age_range,
        min_comp=min_comp,
        max_comp=max_comp,
    )
    return await campaign_svc.browse_campaigns(db, user.id, filters)


@router.get("/campaigns/{campaign_id}", response_model=CampaignDetailResponse)
async def get_campaign(
    campaign_id: int,
    user: UserProfile = Depends(require_advertiser),
    db: AsyncSession = Depends(get_db),
):
    return await campaign_svc.get_campaign_public(db, campaign_id)


@router.post("/campaigns/{campaign_id}/apply", response_model=ApplicationResponse, status_code=201)
@limiter.limit(settings.rate_limit_application, key_func=session_or_ip_key)
async def apply_to_campaign(
    request: Request,
    campaign_id: int,
    body: ApplicationCreate,
    user: UserProfile = Depends(require_advertiser),
    db: AsyncSession = Depends(get_db),
):
    application = await application_svc.create_application(db, user, campaign_id, body.message)
    await log_audit(
        db,
        action=AuditAction.CREATE,
        entity_type="application",
        entity_id=application.id,
        user_id=user.id,
        details={"campaign_id": campaign_id},
        ip_address=get_client_ip(request),
    )
    return application


@router.get("/applications", response_model=list[ApplicationWithCampaignResponse])
async def list_my_applications(
    user: UserProfile = Depends(require_advertiser),
    db: AsyncSession = Depends(get_db),
):
    return await application_svc.get_applications_by_advertiser(db, user.id)


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------


@router.get("/profile", response_model=ProfileResponse)
async def get_my_profile(user: UserProfile = Depends(require_advertiser)):
    return user


@router.put("/profile", response_model=ProfileResponse)
async def update_my_profile(
    body: AdvertiserProfileUpdate,
    user: UserProfile = Depends(require_advertiser),
    db: AsyncSession = Depends(get_db),
):
    return await user_svc.update_profile(db, user, body)


@router.get("/profile/{profile_id}", response_model=PublicProfileResponse)
async def get_advertiser_profile(
    profile_id: int,
    _viewer: UserProfile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
):
    """Public view of an advertiser, e.g. for a business reviewing applicants."""
    return await user_svc.get_public_profile(db, profile_id, UserType.ADVERTISER)
