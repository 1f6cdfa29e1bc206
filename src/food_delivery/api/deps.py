from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from food_delivery.db.deps import get_async_session
from food_delivery.models import RoleEnum, User
from food_delivery.pubsub import PubSub, get_pubsub
from food_delivery.services.orders import OrderService
from food_delivery.services.payments import PaymentService
from food_delivery.services.restaurants import RestaurantService
from food_delivery.services.users import UserService


async def get_current_user(
    x_user_id: Optional[int] = Header(None, description="Id of the calling user"),
    db: AsyncSession = Depends(get_async_session),
) -> User:
    """
    Caller identity. Token authentication lives in front of this service and
    forwards the authenticated user id in X-User-Id.
    """
    if x_user_id is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    user = await UserService(db).find_by_id(x_user_id)
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def role_required(*roles: RoleEnum):
    """Dependency that lets through only users with one of `roles`."""

    async def checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise HTTPException(status_code=403, detail="Forbidden resource")
        return user

    return checker


def get_event_channel() -> PubSub:
    return get_pubsub()


def get_order_service(
    db: AsyncSession = Depends(get_async_session),
    pubsub: PubSub = Depends(get_event_channel),
) -> OrderService:
    return OrderService(db, pubsub)


def get_restaurant_service(db: AsyncSession = Depends(get_async_session)) -> RestaurantService:
    return RestaurantService(db)


def get_payment_service(db: AsyncSession = Depends(get_async_session)) -> PaymentService:
    return PaymentService(db)


def get_user_service(db: AsyncSession = Depends(get_async_session)) -> UserService:
    return UserService(db)
