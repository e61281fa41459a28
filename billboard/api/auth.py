import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from billboard.api.schemas import (
    LoginRequest,
    LoginResponse,
    OnboardingRequest,
    OnboardingResponse,
    ProfileResponse,
)
from billboard.core.config import settings
from billboard.core.deps import get_db
from billboard.core.rate_limit import get_client_ip, limiter
from billboard.core.rbac import dashboard_path
from billboard.core.security import (
    LOGIN_PATH,
    ONBOARDING_PATH,
    SessionIdentity,
    create_session_token,
    decode_session_token,
    get_current_identity,
    verify_identity_token,
)
from billboard.core.sessions import create_session, revoke_session
from billboard.services.audit import AuditAction, log_audit
from billboard.services.user import create_profile, get_profile_by_subject

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

# Cookies the identity provider may leave behind alongside ours.
_PROVIDER_COOKIES = ("__client_uat", "__refresh")


@router.get("/login")
async def login_page(request: Request):
    """Sign-in page. A visitor with a live session cookie is sent on."""
    token = request.cookies.get(settings.session_cookie_name)
    if token and decode_session_token(token):
        return RedirectResponse("/auth/redirect", status_code=303)
    return {"login_url": LOGIN_PATH, "method": "POST", "fields": ["identity_token"]}


@router.post("/login", response_model=LoginResponse)
@limiter.limit(settings.rate_limit_login)
async def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    """Exchange an identity-provider token for a server-side session.

    1. Verify the identity token.
    2. Store a session in Redis.
    3. Set the signed session cookie.
    4. Tell the client where to go next.
    """
    try:
        claims = verify_identity_token(body.identity_token)
    except HTTPException:
        await log_audit(
            db,
            action=AuditAction.FAILED_AUTH,
            entity_type="session",
            success=False,
            ip_address=get_client_ip(request),
        )
        raise

    subject = claims["sub"]
    session_id = await create_session(subject)
    token = create_session_token(
        subject,
        session_id,
        email=claims.get("email") or "",
        full_name=claims.get("name") or "",
    )
    response.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=settings.session_ttl_minutes * 60,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        path="/",
    )

    profile = await get_profile_by_subject(db, subject)
    await log_audit(
        db,
        action=AuditAction.LOGIN,
        entity_type="session",
        user_id=profile.id if profile else None,
        ip_address=get_client_ip(request),
    )
    logger.info("Session started for %s", subject)

    redirect_to = dashboard_path(profile.user_type) if profile else ONBOARDING_PATH
    return LoginResponse(redirect_to=redirect_to)


@router.get("/redirect")
async def post_login_redirect(
    identity: SessionIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> RedirectResponse:
    profile = await get_profile_by_subject(db, identity.subject)
    location = dashboard_path(profile.user_type) if profile else ONBOARDING_PATH
    return RedirectResponse(location, status_code=303)


@router.get("/onboarding")
async def onboarding_page(
    identity: SessionIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
):
    """Onboarding form data; already onboarded users go to their dashboard."""
    profile = await get_profile_by_subject(db, identity.subject)
    if profile:
        return RedirectResponse(dashboard_path(profile.user_type), status_code=303)
    return {
        "email": identity.email,
        "full_name": identity.full_name,
        "user_types": ["business", "advertiser"],
    }


@router.post("/onboarding", response_model=OnboardingResponse)
async def onboard(
    request: Request,
    body: OnboardingRequest,
    identity: SessionIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> OnboardingResponse:
    profile, created = await create_profile(
        db,
        auth_subject=identity.subject,
        email=identity.email,
        full_name=identity.full_name,
        user_type=body.user_type,
        company_name=body.company_name,
    )
    if created:
        await log_audit(
            db,
            action=AuditAction.CREATE,
            entity_type="user_profile",
            entity_id=profile.id,
            user_id=profile.id,
            details={"user_type": profile.user_type},
            ip_address=get_client_ip(request),
        )
    return OnboardingResponse(
        profile=ProfileResponse.model_validate(profile),
        redirect_to=dashboard_path(profile.user_type),
    )


@router.post("/logout")
async def logout(request: Request, db: AsyncSession = Depends(get_db)) -> RedirectResponse:
    """End the session. Cookies are cleared and the user redirected even if the store fails."""
    token = request.cookies.get(settings.session_cookie_name)
    payload = decode_session_token(token) if token else None
    if payload:
        try:
            await revoke_session(payload["sid"])
            logger.info("Session ended for %s", payload["sub"])
        except Exception:
            logger.exception("Failed to revoke session %s", payload["sid"])
        await log_audit(
            db,
            action=AuditAction.LOGOUT,
            entity_type="session",
            details={"subject": payload["sub"]},
            ip_address=get_client_ip(request),
        )

    response = RedirectResponse(LOGIN_PATH, status_code=303)
    for name in (settings.session_cookie_name, *_PROVIDER_COOKIES):
        response.delete_cookie(name, path="/")
    return response
