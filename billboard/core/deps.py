from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from billboard.db.session import async_session_factory


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield one async session per request; it is closed when the request ends."""
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
