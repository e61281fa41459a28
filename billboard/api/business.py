from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from billboard.api.schemas import (
    ApplicationTransitionRequest,
    ApplicationWithApplicantResponse,
    BusinessDashboardResponse,
    BusinessProfileUpdate,
    CampaignApplicationsResponse,
    CampaignCreate,
    CampaignLimitStatus,
    CampaignResponse,
    CampaignUpdate,
    ProfileResponse,
    PublicProfileResponse,
)
from billboard.core.config import settings
from billboard.core.deps import get_db
from billboard.core.rate_limit import get_client_ip, limiter, session_or_ip_key
from billboard.core.rbac import require_business
from billboard.core.security import get_current_profile
from billboard.models.user_profile import UserProfile, UserType
from billboard.services import application as application_svc
from billboard.services import campaign as campaign_svc
from billboard.services import dashboard as dashboard_svc
from billboard.services import user as user_svc
from billboard.services.application_state_machine import Actor, get_available_actions
from billboard.services.audit import AuditAction, log_audit
from billboard.services.campaign_limits import (
    can_create_campaign,
    get_campaign_limit_status,
    validate_campaign_constraints,
)

router = APIRouter(prefix="/business", tags=["business"])


def _check_constraints(compensation_amount, duration_hours) -> None:
    errors = validate_campaign_constraints(compensation_amount, duration_hours)
    if errors:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=errors[0],
        )


@router.get("/dashboard", response_model=BusinessDashboardResponse)
async def business_dashboard(
    user: UserProfile = Depends(require_business),
    db: AsyncSession = Depends(get_db),
):
    return await dashboard_svc.build_business_dashboard(db, user)


# ---------------------------------------------------------------------------
# Campaigns
# ---------------------------------------------------------------------------


@router.get("/campaigns", response_model=list[CampaignResponse])
async def list_my_campaigns(
    user: UserProfile = Depends(require_business),
    db: AsyncSession = Depends(get_db),
):
    return await campaign_svc.get_campaigns_by_business(db, user.id)


@router.post("/campaigns", response_model=CampaignResponse, status_code=201)
@limiter.limit(settings.rate_limit_campaign_create, key_func=session_or_ip_key)
async def create_campaign(
    request: Request,
    body: CampaignCreate,
    user: UserProfile = Depends(require_business),
    db: AsyncSession = Depends(get_db),
):
    if not await can_create_campaign(db, user.id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"You have reached the maximum of {settings.max_active_campaigns} active campaigns",
        )
    _check_constraints(body.compensation_amount, body.duration_hours)

    campaign = await campaign_svc.create_campaign(db, user, body)
    await log_audit(
        db,
        action=AuditAction.CREATE,
        entity_type="campaign",
        entity_id=campaign.id,
        user_id=user.id,
        details={"title": campaign.title},
        ip_address=get_client_ip(request),
    )
    return campaign


@router.get("/campaigns/limit", response_model=CampaignLimitStatus)
async def campaign_limit(
    user: UserProfile = Depends(require_business),
    db: AsyncSession = Depends(get_db),
):
    return await get_campaign_limit_status(db, user.id)


@router.get("/campaigns/{campaign_id}", response_model=CampaignResponse)
async def get_my_campaign(
    campaign_id: int,
    user: UserProfile = Depends(require_business),
    db: AsyncSession = Depends(get_db),
):
    return await campaign_svc.get_campaign_for_business(db, campaign_id, user.id)


@router.put("/campaigns/{campaign_id}", response_model=CampaignResponse)
@limiter.limit(settings.rate_limit_campaign_update, key_func=session_or_ip_key)
async def update_campaign(
    request: Request,
    campaign_id: int,
    body: CampaignUpdate,
    user: UserProfile = Depends(require_business),
    db: AsyncSession = Depends(get_db),
):
    campaign = await campaign_svc.get_campaign_for_business(db, campaign_id, user.id)
    _check_constraints(body.compensation_amount, body.duration_hours)

    campaign = await campaign_svc.update_campaign(db, campaign, body)
    await log_audit(
        db,
        action=AuditAction.UPDATE,
        entity_type="campaign",
        entity_id=campaign.id,
        user_id=user.id,
        details=body.model_dump(exclude_unset=True, mode="json"),
        ip_address=get_client_ip(request),
    )
    return campaign


# ---------------------------------------------------------------------------
# Applications
# ---------------------------------------------------------------------------


@router.get("/campaigns/{campaign_id}/applications", response_model=CampaignApplicationsResponse)
async def list_campaign_applications(
    campaign_id: int,
    user: UserProfile = Depends(require_business),
    db: AsyncSession = Depends(get_db),
):
    campaign = await campaign_svc.get_campaign_for_business(db, campaign_id, user.id)
    applications = await application_svc.get_applications_for_campaign(db, campaign.id)

    items = []
    for app in applications:
        item = ApplicationWithApplicantResponse.model_validate(app)
        item.available_actions = get_available_actions(app.status, Actor.BUSINESS)
        items.append(item)
    return CampaignApplicationsResponse(
        campaign=CampaignResponse.model_validate(campaign),
        applications=items,
    )


@router.post("/applications/{application_id}/transition", response_model=ApplicationWithApplicantResponse)
async def transition_application(
    request: Request,
    application_id: int,
    body: ApplicationTransitionRequest,
    user: UserProfile = Depends(require_business),
    db: AsyncSession = Depends(get_db),
):
    application = await application_svc.transition_application(
        db, application_id, body.action, user, ip_address=get_client_ip(request),
    )
    return ApplicationWithApplicantResponse.model_validate(application)


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------


@router.get("/profile", response_model=ProfileResponse)
async def get_my_profile(user: UserProfile = Depends(require_business)):
    return user


@router.put("/profile", response_model=ProfileResponse)
async def update_my_profile(
    body: BusinessProfileUpdate,
    user: UserProfile = Depends(require_business),
    db: AsyncSession = Depends(get_db),
):
    return await user_svc.update_profile(db, user, body)


@router.get("/profile/{profile_id}", response_model=PublicProfileResponse)
async def get_business_profile(
    profile_id: int,
    _viewer: UserProfile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
):
    """Public view of a business, e.g. for advertisers reviewing a campaign."""
    return await user_svc.get_public_profile(db, profile_id, UserType.BUSINESS)
