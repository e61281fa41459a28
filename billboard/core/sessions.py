"""Server-side session store in Redis.

A session row is ``session:{sid} -> auth subject`` with a TTL. The cookie
only carries a signed pointer to it, so deleting the key logs the user out
everywhere the cookie was copied.
"""

import logging
import secrets

import redis.asyncio as aioredis

from billboard.core.config import settings

logger = logging.getLogger(__name__)

_redis: aioredis.Redis | None = None


async def _get_redis() -> aioredis.Redis:
    global _redis
    if _redis is None:
        _redis = aioredis.from_url(settings.redis_url, decode_responses=True)
    return _redis


async def close_redis() -> None:
    global _redis
    if _redis is not None:
        await _redis.aclose()
        _redis = None


def _key(sid: str) -> str:
    return f"session:{sid}"


async def create_session(subject: str) -> str:
    """Persist a new session for ``subject`` and return its id."""
    sid = secrets.token_urlsafe(24)
    r = await _get_redis()
    await r.set(_key(sid), subject, ex=settings.session_ttl_minutes * 60)
    return sid


async def session_is_active(sid: str, subject: str) -> bool:
    """True only when the stored session exists and belongs to ``subject``.

    Any store failure counts as an inactive session.
    """
    try:
        r = await _get_redis()
        stored = await r.get(_key(sid))
    except Exception:
        logger.exception("Session lookup failed for sid=%s, treating as logged out", sid)
        return False
    return stored == subject


async def revoke_session(sid: str) -> None:
    r = await _get_redis()
    await r.delete(_key(sid))
