from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from billboard.api.schemas import ProfilePictureResponse
from billboard.core.deps import get_db
from billboard.core.security import get_current_profile
from billboard.models.user_profile import UserProfile
from billboard.services import image_upload

router = APIRouter(prefix="/profile", tags=["profile"])


@router.post("/picture", response_model=ProfilePictureResponse)
async def upload_profile_picture(
    file: UploadFile = File(...),
    user: UserProfile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
):
    url = await image_upload.save_profile_picture(db, user, file)
    return ProfilePictureResponse(url=url)


@router.delete("/picture", status_code=204)
async def delete_profile_picture(
    user: UserProfile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
) -> None:
    await image_upload.delete_profile_picture(db, user)
