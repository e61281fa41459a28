from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import Depends, HTTPException, Request, status
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from billboard.core.config import settings
from billboard.core.deps import get_db
from billboard.core.sessions import session_is_active
from billboard.models.user_profile import UserProfile
from billboard.services.user import get_profile_by_subject

LOGIN_PATH = "/auth/login"
ONBOARDING_PATH = "/auth/onboarding"


class RedirectRequired(Exception):
    """Raised by page dependencies that must send the browser elsewhere."""

    def __init__(self, location: str):
        self.location = location
        super().__init__(f"Redirect to {location}")


@dataclass(frozen=True)
class SessionIdentity:
    subject: str
    session_id: str
    email: str
    full_name: str


def verify_identity_token(token: str) -> dict[str, Any]:
    """Verify a token issued by the identity provider and return its claims.

    The token must be signed with the shared identity secret, carry a
    ``sub`` claim and, when an audience is configured, match it.
    """
    options = {"verify_aud": settings.identity_token_audience is not None}
    try:
        claims = jwt.decode(
            token,
            settings.identity_token_secret,
            algorithms=[settings.identity_token_algorithm],
            audience=settings.identity_token_audience,
            options=options,
        )
    except JWTError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid identity token",
        ) from exc

    if not claims.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Identity token missing subject",
        )
    return claims


def create_session_token(
    subject: str,
    session_id: str,
    *,
    email: str = "",
    full_name: str = "",
    expires_delta: timedelta | None = None,
) -> str:
    """Sign the cookie value that points at a server-side session."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.session_ttl_minutes)
    )
    payload = {
        "sub": subject,
        "sid": session_id,
        "email": email,
        "name": full_name,
        "exp": expire,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_session_token(token: str) -> dict[str, Any] | None:
    """Return the session claims, or None when the token is unusable."""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    if not payload.get("sub") or not payload.get("sid"):
        return None
    return payload


async def get_current_identity(request: Request) -> SessionIdentity:
    """FastAPI dependency: the identity behind a live session cookie.

    Anything short of a valid, unrevoked session redirects to the login page.
    """
    token = request.cookies.get(settings.session_cookie_name)
    payload = decode_session_token(token) if token else None
    if payload is None:
        raise RedirectRequired(LOGIN_PATH)

    if not await session_is_active(payload["sid"], payload["sub"]):
        raise RedirectRequired(LOGIN_PATH)

    return SessionIdentity(
        subject=payload["sub"],
        session_id=payload["sid"],
        email=payload.get("email") or "",
        full_name=payload.get("name") or "",
    )


async def get_current_profile(
    identity: SessionIdentity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db),
) -> UserProfile:
    """FastAPI dependency: the onboarded profile of the session user."""
    profile = await get_profile_by_subject(db, identity.subject)
    if profile is None:
        raise RedirectRequired(ONBOARDING_PATH)
    return profile
