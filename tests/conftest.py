from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from billboard.core.config import settings
from billboard.core.rate_limit import limiter
from billboard.core.security import create_session_token
from billboard.main import app

# Throttling is exercised in test_rate_limit; keep it out of the way elsewhere.
limiter.enabled = False


@pytest.fixture
def session_cookie() -> dict[str, str]:
    """A validly signed session cookie; whether the session is live is up to each test."""
    token = create_session_token("user_test_1", "sid-test", email="test@example.com", full_name="Test User")
    return {settings.session_cookie_name: token}


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Provide an async HTTP client wired to the FastAPI app (no real server)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def signed_in_client(session_cookie) -> AsyncGenerator[AsyncClient, None]:
    """Client carrying a session cookie so the page-route gate lets requests through."""
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport, base_url="http://testserver", cookies=session_cookie,
    ) as ac:
        yield ac
    app.dependency_overrides.clear()
