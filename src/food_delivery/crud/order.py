from decimal import Decimal
from typing import List, Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from food_delivery.models import Dish, Order, OrderItem, OrderStatusEnum, Restaurant


async def get_order_by_id(
    db: AsyncSession, order_id: int, with_items: bool = False
) -> Optional[Order]:
    """
    Returns the order with its restaurant loaded (needed by the visibility check).
    populate_existing refreshes an instance that is already in the session.
    """
    options = [selectinload(Order.restaurant)]
    if with_items:
        options.append(selectinload(Order.items))
    stmt = (
        select(Order)
        .where(Order.id == order_id)
        .options(*options)
        .execution_options(populate_existing=True)
    )
    result = await db.execute(stmt)
    return result.scalars().first()


async def get_orders(
    db: AsyncSession,
    customer_id: Optional[int] = None,
    driver_id: Optional[int] = None,
    restaurant_ids: Optional[Sequence[int]] = None,
    status: Optional[OrderStatusEnum] = None,
) -> List[Order]:
    """
    Orders matching every given filter. A filter left as None adds no constraint,
    so status=None returns orders in any status.
    """
    stmt = (
        select(Order)
        .options(selectinload(Order.restaurant))
        .order_by(Order.created_at.desc(), Order.id.desc())
        .execution_options(populate_existing=True)
    )

    if customer_id is not None:
        stmt = stmt.where(Order.customer_id == customer_id)
    if driver_id is not None:
        stmt = stmt.where(Order.driver_id == driver_id)
    if restaurant_ids is not None:
        stmt = stmt.where(Order.restaurant_id.in_(restaurant_ids))
    if status is not None:
        stmt = stmt.where(Order.status == status)

    result = await db.execute(stmt)
    return list(result.scalars().unique().all())


async def get_orders_for_owner(
    db: AsyncSession, owner_id: int, status: Optional[OrderStatusEnum] = None
) -> List[Order]:
    """Union of the orders of every restaurant the owner has."""
    result = await db.execute(
        select(Restaurant)
        .where(Restaurant.owner_id == owner_id)
        .options(selectinload(Restaurant.orders).selectinload(Order.restaurant))
        .order_by(Restaurant.id)
        .execution_options(populate_existing=True)
    )
    orders = [order for restaurant in result.scalars().all() for order in restaurant.orders]
    if status is not None:
        orders = [order for order in orders if order.status == status]
    return orders


def add_order(
    db: AsyncSession,
    customer_id: int,
    restaurant: Restaurant,
    dishes: List[Dish],
    item_options: List[Optional[list]],
    total: Decimal,
) -> Order:
    """
    Stages the order, one item per ordered dish and the order-dish association.
    Nothing is flushed here; the caller owns the transaction.
    """
    items = [
        OrderItem(dish_id=dish.id, options=options)
        for dish, options in zip(dishes, item_options)
    ]
    # the association holds each dish once even if it was ordered several times
    unique_dishes = list({dish.id: dish for dish in dishes}.values())
    order = Order(
        customer_id=customer_id,
        restaurant_id=restaurant.id,
        total=total,
        status=OrderStatusEnum.Pending,
        items=items,
        dishes=unique_dishes,
    )
    db.add(order)
    return order


async def set_order_status(db: AsyncSession, order_id: int, status: OrderStatusEnum) -> None:
    await db.execute(
        update(Order)
        .where(Order.id == order_id)
        .values(status=status)
        .execution_options(synchronize_session=False)
    )


async def claim_order_driver(db: AsyncSession, order_id: int, driver_id: int) -> bool:
    """
    Assigns the driver only if the order has none yet.
    The check and the write are one statement, so two concurrent claims
    cannot both succeed.
    """
    result = await db.execute(
        update(Order)
        .where(Order.id == order_id, Order.driver_id.is_(None))
        .values(driver_id=driver_id)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def get_current_ride(db: AsyncSession, driver_id: int) -> Optional[Order]:
    """Latest order assigned to the driver that is not delivered yet."""
    result = await db.execute(
        select(Order)
        .where(Order.driver_id == driver_id, Order.status != OrderStatusEnum.Delivered)
        .options(selectinload(Order.restaurant), selectinload(Order.items))
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(1)
        .execution_options(populate_existing=True)
    )
    return result.scalars().first()
