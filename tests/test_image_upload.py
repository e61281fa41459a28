"""Tests for profile picture storage."""

import io
from pathlib import Path

import pytest
from fastapi import HTTPException, UploadFile
from starlette.datastructures import Headers

from billboard.core.config import settings
from billboard.core.deps import get_db
from billboard.core.security import get_current_profile
from billboard.main import app
from billboard.services.image_upload import (
    delete_profile_picture,
    save_profile_picture,
    storage_key,
    validate_upload,
)
from tests.factories import make_advertiser, mock_db


@pytest.fixture
def media_root(tmp_path, monkeypatch) -> Path:
    monkeypatch.setattr(settings, "media_root", str(tmp_path))
    return tmp_path


def _upload(data: bytes = b"\x89PNG fake", filename: str = "my photo.png", content_type: str = "image/png"):
    return UploadFile(
        file=io.BytesIO(data),
        filename=filename,
        size=len(data),
        headers=Headers({"content-type": content_type}),
    )


class TestValidation:
    @pytest.mark.parametrize("content_type", ["image/jpeg", "image/png", "image/webp"])
    def test_allowed_types(self, content_type):
        validate_upload(content_type, 1024)

    @pytest.mark.parametrize("content_type", ["image/gif", "application/pdf", None])
    def test_rejected_types(self, content_type):
        with pytest.raises(HTTPException) as exc_info:
            validate_upload(content_type, 1024)
        assert exc_info.value.status_code == 400

    def test_too_large(self):
        with pytest.raises(HTTPException) as exc_info:
            validate_upload("image/png", 8 * 1024 * 1024 + 1)
        assert "8MB" in exc_info.value.detail

    def test_storage_key(self):
        assert storage_key(7, "my cool pic.jpg", 1700000000000) == "profile_pictures/7/1700000000000-my-cool-pic.jpg"

    def test_storage_key_strips_directories(self):
        assert storage_key(7, "../../etc/passwd", 1) == "profile_pictures/7/1-passwd"


class TestSaveAndDelete:
    @pytest.mark.asyncio
    async def test_save_writes_file_and_sets_url(self, media_root):
        profile = make_advertiser(id=5)
        db = mock_db()

        url = await save_profile_picture(db, profile, _upload(b"pixels"))

        assert url.startswith("/media/profile_pictures/5/")
        assert url.endswith("-my-photo.png")
        assert profile.profile_picture_url == url
        stored = media_root / url.removeprefix("/media/")
        assert stored.read_bytes() == b"pixels"
        db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_replacing_removes_previous(self, media_root):
        old = media_root / "profile_pictures/5/1-old.png"
        old.parent.mkdir(parents=True)
        old.write_bytes(b"old")
        profile = make_advertiser(id=5, profile_picture_url="/media/profile_pictures/5/1-old.png")

        await save_profile_picture(mock_db(), profile, _upload())
        assert not old.exists()

    @pytest.mark.asyncio
    async def test_wrong_type_writes_nothing(self, media_root):
        with pytest.raises(HTTPException):
            await save_profile_picture(mock_db(), make_advertiser(), _upload(content_type="image/gif"))
        assert not any(media_root.iterdir())

    @pytest.mark.asyncio
    async def test_delete_clears_url(self, media_root):
        path = media_root / "profile_pictures/5/1-a.png"
        path.parent.mkdir(parents=True)
        path.write_bytes(b"x")
        profile = make_advertiser(id=5, profile_picture_url="/media/profile_pictures/5/1-a.png")

        await delete_profile_picture(mock_db(), profile)
        assert profile.profile_picture_url is None
        assert not path.exists()

    @pytest.mark.asyncio
    async def test_delete_tolerates_missing_file(self, media_root):
        profile = make_advertiser(id=5, profile_picture_url="/media/profile_pictures/5/gone.png")
        db = mock_db()

        await delete_profile_picture(db, profile)
        assert profile.profile_picture_url is None
        db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_delete_ignores_paths_outside_media_root(self, media_root, tmp_path_factory):
        outside = tmp_path_factory.mktemp("outside") / "keep.png"
        outside.write_bytes(b"x")
        profile = make_advertiser(id=5, profile_picture_url=f"/media/../{outside.parent.name}/keep.png")

        await delete_profile_picture(mock_db(), profile)
        assert outside.exists()


class TestProfilePictureApi:
    @pytest.mark.asyncio
    async def test_upload(self, media_root, signed_in_client):
        app.dependency_overrides[get_current_profile] = lambda: make_advertiser(id=5)
        app.dependency_overrides[get_db] = lambda: mock_db()

        resp = await signed_in_client.post(
            "/profile/picture", files={"file": ("me.webp", b"webpdata", "image/webp")}
        )
        assert resp.status_code == 200
        assert resp.json()["url"].endswith("-me.webp")

    @pytest.mark.asyncio
    async def test_upload_rejects_type(self, media_root, signed_in_client):
        app.dependency_overrides[get_current_profile] = lambda: make_advertiser(id=5)
        app.dependency_overrides[get_db] = lambda: mock_db()

        resp = await signed_in_client.post(
            "/profile/picture", files={"file": ("me.gif", b"gif", "image/gif")}
        )
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_delete(self, media_root, signed_in_client):
        app.dependency_overrides[get_current_profile] = lambda: make_advertiser(id=5)
        app.dependency_overrides[get_db] = lambda: mock_db()

        resp = await signed_in_client.delete("/profile/picture")
        assert resp.status_code == 204
