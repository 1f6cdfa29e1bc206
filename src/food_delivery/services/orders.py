from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from food_delivery.crud import order as order_crud
from food_delivery.crud import dish as dish_crud
from food_delivery.crud import restaurant as restaurant_crud
from food_delivery.models import Dish, Order, OrderStatusEnum, RoleEnum, User
from food_delivery.pubsub import PubSub, Topic
from food_delivery.schemas.order import (
    CreateOrderInput,
    CreateOrderOutput,
    EditOrderInput,
    EditOrderOutput,
    GetOrderInput,
    GetOrderOutput,
    GetOrdersInput,
    GetOrdersOutput,
    OrderItemOption,
    OrderRead,
    TakeOrderInput,
    TakeOrderOutput,
)
from food_delivery.utils.logging import get_logger

logger = get_logger(__name__)

# statuses each role may move an order to
ALLOWED_STATUSES = {
    RoleEnum.Client: frozenset(),
    RoleEnum.Owner: frozenset({OrderStatusEnum.Cooking, OrderStatusEnum.Cooked}),
    RoleEnum.Delivery: frozenset({OrderStatusEnum.PickedUp, OrderStatusEnum.Delivered}),
}


def can_see_order(user: User, order: Order) -> bool:
    """
    True when the user is the order's customer, its assigned driver,
    or the owner of its restaurant, according to the user's role.
    """
    if user.role == RoleEnum.Client:
        return order.customer_id == user.id
    if user.role == RoleEnum.Delivery:
        return order.driver_id == user.id
    if user.role == RoleEnum.Owner:
        return order.restaurant is not None and order.restaurant.owner_id == user.id
    return False


def can_set_status(user: User, status: OrderStatusEnum) -> bool:
    return status in ALLOWED_STATUSES.get(user.role, frozenset())


def find_invalid_option(dish: Dish, options: Optional[List[OrderItemOption]]) -> Optional[OrderItemOption]:
    """
    First selected option that the dish does not declare, or whose choice is
    not one of the option's declared choices. None when every option is valid.
    """
    declared = {option["name"]: option for option in (dish.options or [])}
    for option in options or []:
        dish_option = declared.get(option.name)
        if dish_option is None:
            return option
        if option.choice is not None:
            choices = {choice["name"] for choice in (dish_option.get("choices") or [])}
            if option.choice not in choices:
                return option
    return None


class OrderService:
    """
    Order lifecycle: creation, role-scoped reads, status transitions and driver
    assignment. Every operation returns an output model with ok/error instead of
    raising, and publishes order events after its write is committed.
    """

    def __init__(self, db: AsyncSession, pubsub: PubSub):
        self.db = db
        self.pubsub = pubsub

    async def _publish(self, topic: Topic, payload: Dict[str, Any]) -> None:
        # the write is already committed, a lost event must not fail the call
        try:
            await self.pubsub.publish(topic, payload)
        except Exception:
            logger.exception(f"Could not publish {topic.value}")

    async def _rollback(self) -> None:
        try:
            await self.db.rollback()
        except Exception:
            logger.exception("Rollback failed")

    async def _committed_payload(self, order_id: int) -> Optional[Dict[str, Any]]:
        """
        Order as published, read back after the commit. None when it cannot be
        read; the write itself has already succeeded.
        """
        try:
            order = await order_crud.get_order_by_id(self.db, order_id)
            if order is None:
                logger.warning(f"Order {order_id} vanished after commit, event not published")
                return None
            return OrderRead.from_orm_with_owner(order).model_dump(mode="json")
        except Exception:
            logger.exception(f"Could not read order {order_id} after commit, event not published")
            return None

    async def create_order(self, customer: User, order_in: CreateOrderInput) -> CreateOrderOutput:
        """
        1. Restaurant must exist
        2. Every dish must exist and belong to that restaurant
        3. Selected options must be declared on the dish
        4. Items and order are written in one transaction, status Pending
        5. NEW_PENDING_ORDER goes to the restaurant owner's feed
        """
        try:
            restaurant = await restaurant_crud.get_restaurant(self.db, order_in.restaurant_id)
            if not restaurant:
                return CreateOrderOutput(ok=False, error="Restaurant not found")

            dishes: List[Dish] = []
            for item in order_in.items:
                dish = await dish_crud.get_dish(self.db, item.dish_id)
                if not dish:
                    return CreateOrderOutput(ok=False, error="Dish not found")
                if dish.restaurant_id != restaurant.id:
                    return CreateOrderOutput(ok=False, error="Dish is not belong this restaurant")
                if find_invalid_option(dish, item.options) is not None:
                    return CreateOrderOutput(ok=False, error="Dish option not found")
                dishes.append(dish)

            # base prices only, option extras are not charged
            total = sum((Decimal(dish.price) for dish in dishes), Decimal("0"))

            order = order_crud.add_order(
                self.db,
                customer_id=customer.id,
                restaurant=restaurant,
                dishes=dishes,
                item_options=[
                    [option.model_dump() for option in item.options] if item.options is not None else None
                    for item in order_in.items
                ],
                total=total,
            )
            await self.db.commit()
            order_id, owner_id = order.id, restaurant.owner_id
            logger.info(f"Order {order_id} created by customer {customer.id} for restaurant {restaurant.id}")
        except Exception:
            logger.exception("Could not create order")
            await self._rollback()
            return CreateOrderOutput(ok=False, error="Could not create order")

        payload = await self._committed_payload(order_id)
        if payload is not None:
            await self._publish(Topic.NEW_PENDING_ORDER, {"pending_orders": payload, "owner_id": owner_id})
        return CreateOrderOutput(ok=True, order_id=order_id)

    async def get_orders(self, user: User, orders_in: GetOrdersInput) -> GetOrdersOutput:
        try:
            status = orders_in.status
            if user.role == RoleEnum.Client:
                orders = await order_crud.get_orders(self.db, customer_id=user.id, status=status)
            elif user.role == RoleEnum.Delivery:
                orders = await order_crud.get_orders(self.db, driver_id=user.id, status=status)
            elif user.role == RoleEnum.Owner:
                orders = await order_crud.get_orders_for_owner(self.db, owner_id=user.id, status=status)
            else:
                orders = []
            return GetOrdersOutput(
                ok=True, orders=[OrderRead.from_orm_with_owner(order) for order in orders]
            )
        except Exception:
            logger.exception("Could not get orders")
            return GetOrdersOutput(ok=False, error="Could not get orders")

    async def get_order(self, user: User, order_in: GetOrderInput) -> GetOrderOutput:
        try:
            order = await order_crud.get_order_by_id(self.db, order_in.id, with_items=True)
            if not order:
                return GetOrderOutput(ok=False, error="Order not found")
            if not can_see_order(user, order):
                return GetOrderOutput(ok=False, error="You cannot see that")
            return GetOrderOutput(ok=True, order=OrderRead.from_orm_with_owner(order, with_items=True))
        except Exception:
            logger.exception("Could not get order")
            return GetOrderOutput(ok=False, error="Could not get order")

    async def edit_order(self, user: User, order_in: EditOrderInput) -> EditOrderOutput:
        """
        Visibility is checked first, then whether the user's role may set the
        requested status. Cooked orders are also pushed to the drivers' feed.
        """
        try:
            order = await order_crud.get_order_by_id(self.db, order_in.id)
            if not order:
                return EditOrderOutput(ok=False, error="Order not found")
            if not can_see_order(user, order):
                return EditOrderOutput(ok=False, error="You cannot see that")
            if not can_set_status(user, order_in.status):
                return EditOrderOutput(ok=False, error="You cannot do that")

            await order_crud.set_order_status(self.db, order.id, order_in.status)
            await self.db.commit()
            logger.info(f"Order {order_in.id} moved to {order_in.status.value} by user {user.id}")
        except Exception:
            logger.exception("Could not edit order")
            await self._rollback()
            return EditOrderOutput(ok=False, error="Could not edit order")

        payload = await self._committed_payload(order_in.id)
        if payload is not None:
            await self._publish(Topic.NEW_ORDER_UPDATES, {"order_updates": payload})
            if order_in.status == OrderStatusEnum.Cooked:
                await self._publish(Topic.NEW_COOKED_ORDER, {"cooked_orders": payload})
        return EditOrderOutput(ok=True)

    async def take_order(self, driver: User, order_in: TakeOrderInput) -> TakeOrderOutput:
        try:
            order = await order_crud.get_order_by_id(self.db, order_in.id)
            if not order:
                return TakeOrderOutput(ok=False, error="Order not found")
            if order.driver_id is not None:
                return TakeOrderOutput(ok=False, error="This order already has a driver")

            claimed = await order_crud.claim_order_driver(self.db, order.id, driver.id)
            if not claimed:
                # another driver got it between the read and the update
                await self._rollback()
                return TakeOrderOutput(ok=False, error="This order already has a driver")
            await self.db.commit()
            logger.info(f"Order {order_in.id} taken by driver {driver.id}")
        except Exception:
            logger.exception("Could not take order")
            await self._rollback()
            return TakeOrderOutput(ok=False, error="Could not take order")

        payload = await self._committed_payload(order_in.id)
        if payload is not None:
            await self._publish(Topic.NEW_ORDER_UPDATES, {"order_updates": payload})
        return TakeOrderOutput(ok=True)

    async def get_order_by_driver(self, driver: User) -> GetOrderOutput:
        """The driver's current order: the latest assigned one not yet delivered."""
        try:
            order = await order_crud.get_current_ride(self.db, driver.id)
            if not order:
                return GetOrderOutput(ok=False, error="Order not found")
            return GetOrderOutput(ok=True, order=OrderRead.from_orm_with_owner(order, with_items=True))
        except Exception:
            logger.exception("Could not get order")
            return GetOrderOutput(ok=False, error="Could not get order")


# --- subscription filters ---

def pending_order_visible_to(user: User, payload: Dict[str, Any]) -> bool:
    return user.role == RoleEnum.Owner and payload.get("owner_id") == user.id


def cooked_order_visible_to(user: User, payload: Dict[str, Any]) -> bool:
    return user.role == RoleEnum.Delivery


def order_update_visible_to(user: User, payload: Dict[str, Any]) -> bool:
    order = payload.get("order_updates") or {}
    if user.role == RoleEnum.Client:
        return order.get("customer_id") == user.id
    if user.role == RoleEnum.Delivery:
        return order.get("driver_id") == user.id
    if user.role == RoleEnum.Owner:
        return order.get("owner_id") == user.id
    return False


FEED_FILTERS = {
    Topic.NEW_PENDING_ORDER: pending_order_visible_to,
    Topic.NEW_COOKED_ORDER: cooked_order_visible_to,
    Topic.NEW_ORDER_UPDATES: order_update_visible_to,
}
