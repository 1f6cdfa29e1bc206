from datetime import datetime
from typing import List, Optional, Tuple, Union

from slugify import slugify
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from food_delivery.models import Category, Order, Restaurant, User
from food_delivery.schemas.common import CoreOutput


async def get_restaurant(db: AsyncSession, restaurant_id: int) -> Optional[Restaurant]:
    return await db.get(Restaurant, restaurant_id)


async def find_and_check_restaurant(
    db: AsyncSession, restaurant_id: int, owner: User, usage: str
) -> Union[Restaurant, CoreOutput]:
    """
    Returns the restaurant when `owner` owns it, otherwise the failed output
    the service should hand back as-is.
    """
    restaurant = await get_restaurant(db, restaurant_id)
    if not restaurant:
        return CoreOutput(ok=False, error="Restaurant not found")
    if restaurant.owner_id != owner.id:
        return CoreOutput(ok=False, error=f"You cannot {usage} a restaurant that you don't own")
    return restaurant


async def get_restaurant_with_menu(db: AsyncSession, restaurant_id: int) -> Optional[Restaurant]:
    result = await db.execute(
        select(Restaurant)
        .where(Restaurant.id == restaurant_id)
        .options(selectinload(Restaurant.menu))
        .execution_options(populate_existing=True)
    )
    return result.scalars().first()


async def get_owner_restaurant(db: AsyncSession, restaurant_id: int, owner_id: int) -> Optional[Restaurant]:
    """Owner's restaurant with menu and orders loaded."""
    result = await db.execute(
        select(Restaurant)
        .where(Restaurant.id == restaurant_id, Restaurant.owner_id == owner_id)
        .options(
            selectinload(Restaurant.menu),
            selectinload(Restaurant.orders).selectinload(Order.restaurant),
        )
        .execution_options(populate_existing=True)
    )
    return result.scalars().first()


async def get_restaurants_by_owner(db: AsyncSession, owner_id: int) -> List[Restaurant]:
    result = await db.execute(
        select(Restaurant).where(Restaurant.owner_id == owner_id).order_by(Restaurant.id)
    )
    return list(result.scalars().all())


async def get_restaurants_by_category(
    db: AsyncSession, category_id: int, limit: int, offset: int
) -> Tuple[List[Restaurant], int]:
    """Page of the category's restaurants, promoted ones first, plus the total count."""
    stmt = (
        select(Restaurant)
        .where(Restaurant.category_id == category_id)
        .order_by(Restaurant.is_promoted.desc(), Restaurant.id)
        .limit(limit)
        .offset(offset)
    )
    result = await db.execute(stmt)
    total = await db.scalar(
        select(func.count(Restaurant.id)).where(Restaurant.category_id == category_id)
    )
    return list(result.scalars().all()), total or 0


async def search_restaurants_by_name(
    db: AsyncSession, query: str, limit: int, offset: int
) -> Tuple[List[Restaurant], int]:
    """Case-insensitive substring search on the name."""
    condition = Restaurant.name.ilike(f"%{query}%")
    result = await db.execute(
        select(Restaurant).where(condition).order_by(Restaurant.id).limit(limit).offset(offset)
    )
    total = await db.scalar(select(func.count(Restaurant.id)).where(condition))
    return list(result.scalars().all()), total or 0


async def get_expired_promotions(db: AsyncSession, now: datetime) -> List[Restaurant]:
    result = await db.execute(
        select(Restaurant).where(
            Restaurant.is_promoted.is_(True),
            Restaurant.promoted_until < now,
        )
    )
    return list(result.scalars().all())


# --- categories ---

def category_slug(name: str) -> str:
    return slugify(name.strip().lower())


async def get_or_create_category(db: AsyncSession, name: str) -> Category:
    """Category by slug of `name`; staged for insert when it does not exist yet."""
    slug = category_slug(name)
    result = await db.execute(select(Category).where(Category.slug == slug))
    category = result.scalars().first()
    if category is None:
        category = Category(name=name.strip().lower(), slug=slug)
        db.add(category)
        await db.flush()
    return category


async def get_categories(db: AsyncSession) -> List[Category]:
    result = await db.execute(select(Category).order_by(Category.name))
    return list(result.scalars().all())


async def get_category_by_slug(db: AsyncSession, slug: str) -> Optional[Category]:
    result = await db.execute(select(Category).where(Category.slug == slug))
    return result.scalars().first()
