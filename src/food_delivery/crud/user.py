from typing import List, Optional, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from food_delivery.models import Address, User


async def get_user(db: AsyncSession, user_id: int) -> Optional[User]:
    return await db.get(User, user_id)


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalars().first()


# --- addresses ---

async def get_address(db: AsyncSession, address_id: int) -> Optional[Address]:
    return await db.get(Address, address_id)


async def get_client_addresses(
    db: AsyncSession, client_id: int, limit: int, offset: int
) -> Tuple[List[Address], int]:
    """Page of the client's addresses, oldest first, plus the total count."""
    result = await db.execute(
        select(Address)
        .where(Address.client_id == client_id)
        .order_by(Address.id)
        .limit(limit)
        .offset(offset)
        .execution_options(populate_existing=True)
    )
    total = await db.scalar(select(func.count(Address.id)).where(Address.client_id == client_id))
    return list(result.scalars().all()), total or 0


async def select_address(db: AsyncSession, client_id: int, address_id: int) -> None:
    """Marks `address_id` as the client's only selected address."""
    await db.execute(
        update(Address)
        .where(Address.client_id == client_id)
        .values(selected=Address.id == address_id)
        .execution_options(synchronize_session=False)
    )
