from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession

from food_delivery.db.session import AsyncSessionLocal


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """
    One session per request. Services commit their own writes;
    anything left uncommitted is rolled back when the session closes.
    """
    async with AsyncSessionLocal() as session:
        yield session
