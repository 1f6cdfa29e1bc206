from typing import Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from food_delivery.models import Dish, User
from food_delivery.schemas.common import CoreOutput


async def get_dish(db: AsyncSession, dish_id: int) -> Optional[Dish]:
    return await db.get(Dish, dish_id)


async def get_dish_with_restaurant(db: AsyncSession, dish_id: int) -> Optional[Dish]:
    result = await db.execute(
        select(Dish).where(Dish.id == dish_id).options(selectinload(Dish.restaurant))
    )
    return result.scalars().first()


async def find_and_check_dish(
    db: AsyncSession, dish_id: int, owner: User, usage: str
) -> Union[Dish, CoreOutput]:
    """Returns the dish when its restaurant belongs to `owner`, otherwise the failed output."""
    dish = await get_dish_with_restaurant(db, dish_id)
    if not dish:
        return CoreOutput(ok=False, error="Dish not found")
    if dish.restaurant.owner_id != owner.id:
        return CoreOutput(ok=False, error=f"You cannot {usage} a dish to a restaurant that you don't own")
    return dish
