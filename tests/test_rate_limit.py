from unittest.mock import AsyncMock, patch

import pytest
from starlette.requests import Request

from billboard.core.config import settings
from billboard.core.deps import get_db
from billboard.core.rate_limit import get_client_ip, limiter, session_or_ip_key
from billboard.core.security import create_session_token
from billboard.main import app
from tests.factories import mock_db


def _request(headers: dict | None = None, client=("10.0.0.9", 1234)) -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    return Request(scope)


class TestClientIp:
    def test_forwarded_for_first_hop(self):
        req = _request({"x-forwarded-for": "203.0.113.5, 10.0.0.1", "x-real-ip": "198.51.100.1"})
        assert get_client_ip(req) == "203.0.113.5"

    def test_real_ip(self):
        req = _request({"x-real-ip": "198.51.100.1", "cf-connecting-ip": "192.0.2.1"})
        assert get_client_ip(req) == "198.51.100.1"

    def test_cloudflare(self):
        assert get_client_ip(_request({"cf-connecting-ip": "192.0.2.1"})) == "192.0.2.1"

    def test_peer(self):
        assert get_client_ip(_request()) == "10.0.0.9"

    def test_unknown(self):
        assert get_client_ip(_request(client=None)) == "unknown"


class TestSessionKey:
    def test_signed_in_user(self):
        token = create_session_token("user_9", "sid")
        req = _request({"cookie": f"{settings.session_cookie_name}={token}"})
        assert session_or_ip_key(req) == "user:user_9"

    def test_anonymous_falls_back_to_ip(self):
        assert session_or_ip_key(_request()) == "ip:10.0.0.9"

    def test_state_subject_wins(self):
        req = _request()
        req.state.auth_subject = "user_state"
        assert session_or_ip_key(req) == "user:user_state"


class TestLoginThrottle:
    @pytest.fixture
    def throttled(self):
        limiter.reset()
        limiter.enabled = True
        yield
        limiter.enabled = False
        limiter.reset()

    @pytest.mark.asyncio
    @patch("billboard.api.auth.log_audit", new_callable=AsyncMock)
    async def test_sixth_login_attempt_is_429(self, mock_audit, throttled, client):
        app.dependency_overrides[get_db] = lambda: mock_db()

        statuses = [
            (await client.post("/auth/login", json={"identity_token": "bad"})).status_code
            for _ in range(6)
        ]
        assert statuses[:5] == [401] * 5
        assert statuses[5] == 429
