from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from billboard.api.schemas import WaitlistSignupRequest, WaitlistSignupResponse
from billboard.core.deps import get_db
from billboard.services import waitlist as waitlist_svc

router = APIRouter(prefix="/waitlist", tags=["waitlist"])


@router.post("")
async def join_waitlist(
    body: WaitlistSignupRequest,
    db: AsyncSession = Depends(get_db),
) -> dict:
    email = (body.email or "").strip()
    if not email:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email required",
        )
    await waitlist_svc.add_signup(db, email)
    return {"success": True}


@router.get("", response_model=list[WaitlistSignupResponse])
async def list_waitlist(db: AsyncSession = Depends(get_db)):
    return await waitlist_svc.list_signups(db)
