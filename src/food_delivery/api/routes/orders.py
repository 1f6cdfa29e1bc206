import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, Header, Path, Query, WebSocket, WebSocketDisconnect, status
from sqlalchemy.ext.asyncio import AsyncSession

from food_delivery.api.deps import get_event_channel, get_order_service, role_required
from food_delivery.db.deps import get_async_session
from food_delivery.models import OrderStatusEnum, RoleEnum, User
from food_delivery.pubsub import PubSub, Subscription, Topic
from food_delivery.schemas.order import (
    CreateOrderInput,
    CreateOrderOutput,
    EditOrderInput,
    EditOrderOutput,
    GetOrderInput,
    GetOrderOutput,
    GetOrdersInput,
    GetOrdersOutput,
    OrderStatusUpdate,
    TakeOrderInput,
    TakeOrderOutput,
)
from food_delivery.services.orders import FEED_FILTERS, OrderService
from food_delivery.services.users import UserService
from food_delivery.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])

any_role = role_required(RoleEnum.Client, RoleEnum.Owner, RoleEnum.Delivery)

FEEDS = {
    "pending": (Topic.NEW_PENDING_ORDER, {RoleEnum.Owner}),
    "cooked": (Topic.NEW_COOKED_ORDER, {RoleEnum.Delivery}),
    "updates": (Topic.NEW_ORDER_UPDATES, {RoleEnum.Client, RoleEnum.Owner, RoleEnum.Delivery}),
}


@router.post("/", response_model=CreateOrderOutput)
async def create_order(
    order_in: CreateOrderInput,
    user: User = Depends(role_required(RoleEnum.Client)),
    service: OrderService = Depends(get_order_service),
):
    """
    Places an order for the calling client.
    """
    return await service.create_order(user, order_in)


@router.get("/", response_model=GetOrdersOutput)
async def list_orders(
    status: Optional[OrderStatusEnum] = Query(None, description="Filter by status"),
    user: User = Depends(any_role),
    service: OrderService = Depends(get_order_service),
):
    """
    Orders visible to the caller: own orders for clients, rides for drivers,
    orders of every owned restaurant for owners.
    """
    return await service.get_orders(user, GetOrdersInput(status=status))


@router.get("/current", response_model=GetOrderOutput)
async def current_ride(
    driver: User = Depends(role_required(RoleEnum.Delivery)),
    service: OrderService = Depends(get_order_service),
):
    """The order the calling driver is delivering right now."""
    return await service.get_order_by_driver(driver)


@router.get("/{order_id}", response_model=GetOrderOutput)
async def get_order(
    order_id: int = Path(..., description="Order id"),
    user: User = Depends(any_role),
    service: OrderService = Depends(get_order_service),
):
    return await service.get_order(user, GetOrderInput(id=order_id))


@router.patch("/{order_id}", response_model=EditOrderOutput)
async def edit_order(
    order_id: int,
    order_in: OrderStatusUpdate,
    user: User = Depends(role_required(RoleEnum.Owner, RoleEnum.Delivery)),
    service: OrderService = Depends(get_order_service),
):
    """
    Moves the order to a new status. Owners cook, drivers pick up and deliver.
    """
    return await service.edit_order(user, EditOrderInput(id=order_id, status=order_in.status))


@router.post("/{order_id}/take", response_model=TakeOrderOutput)
async def take_order(
    order_id: int,
    user: User = Depends(role_required(RoleEnum.Delivery)),
    service: OrderService = Depends(get_order_service),
):
    return await service.take_order(user, TakeOrderInput(id=order_id))


async def _forward(websocket: WebSocket, subscription: Subscription, user: User, topic: Topic) -> None:
    visible = FEED_FILTERS[topic]
    async for payload in subscription:
        if visible(user, payload):
            await websocket.send_json(payload)


async def _wait_disconnect(websocket: WebSocket) -> None:
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass


@router.websocket("/feed/{feed}")
async def order_feed(
    websocket: WebSocket,
    feed: str,
    x_user_id: Optional[int] = Header(None),
    db: AsyncSession = Depends(get_async_session),
    pubsub: PubSub = Depends(get_event_channel),
):
    """
    Live order events: `pending` for owners, `cooked` for drivers,
    `updates` for anyone who can see the order.
    """
    user = await UserService(db).find_by_id(x_user_id) if x_user_id is not None else None
    # the feed can stay open for hours, do not hold a connection for it
    await db.close()

    if feed not in FEEDS or user is None or user.role not in FEEDS[feed][1]:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    topic = FEEDS[feed][0]
    await websocket.accept()
    subscription = await pubsub.subscribe(topic)
    logger.info(f"User {user.id} subscribed to {topic.value}")

    tasks = [
        asyncio.create_task(_forward(websocket, subscription, user, topic)),
        asyncio.create_task(_wait_disconnect(websocket)),
    ]
    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        for task in done:
            if not task.cancelled() and task.exception() is not None:
                logger.warning(f"Feed {topic.value} for user {user.id} stopped: {task.exception()!r}")
    finally:
        await subscription.close()
        logger.info(f"User {user.id} left {topic.value}")
