from unittest.mock import AsyncMock, patch

import pytest

from billboard.core import sessions


def _redis(stored=None):
    r = AsyncMock()
    r.get.return_value = stored
    return r


class TestSessionStore:
    @pytest.mark.asyncio
    async def test_create_sets_ttl(self):
        r = _redis()
        with patch.object(sessions, "_get_redis", AsyncMock(return_value=r)):
            sid = await sessions.create_session("user_1")
        key, value = r.set.await_args.args
        assert key == f"session:{sid}"
        assert value == "user_1"
        assert r.set.await_args.kwargs["ex"] == 1440 * 60

    @pytest.mark.asyncio
    async def test_active_when_subject_matches(self):
        with patch.object(sessions, "_get_redis", AsyncMock(return_value=_redis("user_1"))):
            assert await sessions.session_is_active("sid", "user_1") is True
            assert await sessions.session_is_active("sid", "user_2") is False

    @pytest.mark.asyncio
    async def test_missing_session_inactive(self):
        with patch.object(sessions, "_get_redis", AsyncMock(return_value=_redis(None))):
            assert await sessions.session_is_active("sid", "user_1") is False

    @pytest.mark.asyncio
    async def test_store_error_fails_closed(self):
        r = _redis()
        r.get.side_effect = ConnectionError("redis down")
        with patch.object(sessions, "_get_redis", AsyncMock(return_value=r)):
            assert await sessions.session_is_active("sid", "user_1") is False

    @pytest.mark.asyncio
    async def test_revoke_deletes_key(self):
        r = _redis()
        with patch.object(sessions, "_get_redis", AsyncMock(return_value=r)):
            await sessions.revoke_session("abc")
        r.delete.assert_awaited_once_with("session:abc")
