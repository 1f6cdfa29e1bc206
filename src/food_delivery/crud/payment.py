from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from food_delivery.models import Payment


async def get_payments_by_user(db: AsyncSession, user_id: int) -> List[Payment]:
    result = await db.execute(
        select(Payment).where(Payment.user_id == user_id).order_by(Payment.created_at.desc(), Payment.id.desc())
    )
    return list(result.scalars().all())
