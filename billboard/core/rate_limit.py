"""Request throttling.

Counting happens in the limits storage named by ``RATE_LIMIT_STORAGE_URI``
(moving window). Storage errors let the request through.
"""

from slowapi import Limiter
from starlette.requests import Request

from billboard.core.config import settings
from billboard.core.security import decode_session_token


def get_client_ip(request: Request) -> str:
    """Client address, preferring proxy headers over the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    for header in ("x-real-ip", "cf-connecting-ip"):
        value = request.headers.get(header)
        if value:
            return value.strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def session_or_ip_key(request: Request) -> str:
    """Key per signed-in user, falling back to the client IP."""
    subject = getattr(request.state, "auth_subject", None)
    if subject is None:
        token = request.cookies.get(settings.session_cookie_name)
        payload = decode_session_token(token) if token else None
        subject = payload["sub"] if payload else None
    if subject:
        return f"user:{subject}"
    return f"ip:{get_client_ip(request)}"


limiter = Limiter(
    key_func=get_client_ip,
    default_limits=[settings.rate_limit_global],
    storage_uri=settings.rate_limit_storage_uri,
    strategy="moving-window",
    enabled=settings.rate_limit_enabled,
    swallow_errors=True,
)
