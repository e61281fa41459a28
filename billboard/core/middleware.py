"""Request logging and session gate middlewares."""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response

from billboard.core.config import settings
from billboard.core.security import LOGIN_PATH, decode_session_token

logger = logging.getLogger(__name__)

PROTECTED_PREFIXES = ("/business", "/advertiser", "/profile")


def is_protected_path(path: str) -> bool:
    if path.startswith("/dashboard"):
        return True
    return any(path == p or path.startswith(p + "/") for p in PROTECTED_PREFIXES)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with request_id, method, path, status, and duration."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())[:8]
        request.state.request_id = request_id

        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000, 1)

        response.headers["X-Request-ID"] = request_id

        logger.info(
            "request",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "duration_ms": duration_ms,
            },
        )
        return response


class SessionGateMiddleware(BaseHTTPMiddleware):
    """Send visitors without a session cookie on page routes to the login page.

    Only the cookie signature is checked here; the route dependencies verify
    the server-side session and the profile.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        token = request.cookies.get(settings.session_cookie_name)
        payload = decode_session_token(token) if token else None
        request.state.auth_subject = payload["sub"] if payload else None

        if payload is None and is_protected_path(request.url.path):
            return RedirectResponse(LOGIN_PATH, status_code=303)
        return await call_next(request)
