from fastapi import APIRouter

from billboard.core.config import settings

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


@router.get("/config/public")
async def public_config() -> dict:
    """Public platform configuration (limits, site URL)."""
    return {
        "site_url": settings.site_url,
        "max_active_campaigns": settings.max_active_campaigns,
        "max_total_campaigns": settings.max_total_campaigns,
        "max_campaign_duration_hours": settings.max_campaign_duration_hours,
        "max_compensation_amount": settings.max_compensation_amount,
        "max_profile_picture_bytes": settings.max_profile_picture_bytes,
    }
