"""Profile picture storage on the local media root.

Files land under ``{media_root}/profile_pictures/{user_id}/`` and are served
by the static mount at ``/media``.
"""

import logging
import time
from pathlib import Path

import aiofiles
from fastapi import HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from billboard.core.config import settings
from billboard.models.user_profile import UserProfile

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = frozenset({"image/jpeg", "image/png", "image/webp"})
MEDIA_URL_PREFIX = "/media/"
_CHUNK = 1024 * 1024


def storage_key(user_id: int, filename: str, timestamp_ms: int | None = None) -> str:
    """``profile_pictures/{user_id}/{timestamp}-{name}`` with spaces replaced by dashes."""
    ts = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
    name = Path(filename or "upload").name.replace(" ", "-")
    return f"profile_pictures/{user_id}/{ts}-{name}"


def _path_for_url(url: str) -> Path | None:
    if not url or not url.startswith(MEDIA_URL_PREFIX):
        return None
    root = Path(settings.media_root).resolve()
    path = (root / url[len(MEDIA_URL_PREFIX):]).resolve()
    if root not in path.parents:
        return None
    return path


def validate_upload(content_type: str | None, size: int | None = None) -> None:
    if content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid file type. Please upload a JPEG, PNG, or WebP image.",
        )
    if size is not None and size > settings.max_profile_picture_bytes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="File too large. Maximum size is 8MB.",
        )


async def save_profile_picture(db: AsyncSession, profile: UserProfile, upload: UploadFile) -> str:
    """Store the upload and point the profile at it. Returns the public URL."""
    validate_upload(upload.content_type, upload.size)

    key = storage_key(profile.id, upload.filename or "upload")
    dest = Path(settings.media_root) / key
    dest.parent.mkdir(parents=True, exist_ok=True)

    written = 0
    async with aiofiles.open(dest, "wb") as f:
        while chunk := await upload.read(_CHUNK):
            written += len(chunk)
            if written > settings.max_profile_picture_bytes:
                break
            await f.write(chunk)
    if written > settings.max_profile_picture_bytes:
        dest.unlink(missing_ok=True)
        validate_upload(upload.content_type, written)

    previous = profile.profile_picture_url
    profile.profile_picture_url = f"{MEDIA_URL_PREFIX}{key}"
    await db.commit()
    await db.refresh(profile)
    logger.info("Profile picture stored for profile %s at %s", profile.id, key)

    if previous:
        _remove_file(previous)
    return profile.profile_picture_url


def _remove_file(url: str) -> None:
    path = _path_for_url(url)
    if path is None:
        return
    try:
        path.unlink(missing_ok=True)
    except OSError:
        logger.exception("Failed to remove profile picture %s", path)


async def delete_profile_picture(db: AsyncSession, profile: UserProfile) -> None:
    """Clear the profile picture. A failed file removal is logged, the URL is still cleared."""
    if profile.profile_picture_url:
        _remove_file(profile.profile_picture_url)
    profile.profile_picture_url = None
    await db.commit()
