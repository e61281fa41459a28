import logging

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from billboard.models.waitlist import WaitlistSignup

logger = logging.getLogger(__name__)


async def add_signup(db: AsyncSession, email: str) -> WaitlistSignup:
    signup = WaitlistSignup(email=email)
    db.add(signup)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Already signed up",
        )
    await db.refresh(signup)
    logger.info("Waitlist signup %s", signup.id)
    return signup


async def list_signups(db: AsyncSession) -> list[WaitlistSignup]:
    result = await db.execute(
        select(WaitlistSignup).order_by(WaitlistSignup.created_at.desc(), WaitlistSignup.id.desc())
    )
    return list(result.scalars().all())
