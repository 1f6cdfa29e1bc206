from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from food_delivery.models.order import OrderStatusEnum
from food_delivery.schemas.common import CoreOutput


class OrderItemOption(BaseModel):
    name: str
    choice: Optional[str] = None


class OrderItemRead(BaseModel):
    id: int
    dish_id: Optional[int] = None
    options: Optional[List[OrderItemOption]] = None

    class Config:
        from_attributes = True


class OrderRead(BaseModel):
    id: int
    customer_id: Optional[int] = None
    driver_id: Optional[int] = None
    restaurant_id: Optional[int] = None
    owner_id: Optional[int] = None
    total: float
    status: OrderStatusEnum
    created_at: datetime
    items: List[OrderItemRead] = []

    @classmethod
    def from_orm_with_owner(cls, order, with_items: bool = False):
        """
        Builds the read model; owner_id comes from the loaded restaurant.
        Items are read only when the caller loaded them.
        """
        restaurant = order.restaurant
        return cls(
            id=order.id,
            customer_id=order.customer_id,
            driver_id=order.driver_id,
            restaurant_id=order.restaurant_id,
            owner_id=restaurant.owner_id if restaurant else None,
            total=float(order.total),
            status=order.status,
            created_at=order.created_at,
            items=[OrderItemRead.model_validate(i) for i in order.items] if with_items else [],
        )

    class Config:
        from_attributes = True


class CreateOrderItemInput(BaseModel):
    dish_id: int
    options: Optional[List[OrderItemOption]] = None


class CreateOrderInput(BaseModel):
    restaurant_id: int
    items: List[CreateOrderItemInput] = Field(..., min_length=1)


class CreateOrderOutput(CoreOutput):
    order_id: Optional[int] = None


class GetOrdersInput(BaseModel):
    status: Optional[OrderStatusEnum] = None


class GetOrdersOutput(CoreOutput):
    orders: Optional[List[OrderRead]] = None


class GetOrderInput(BaseModel):
    id: int


class GetOrderOutput(CoreOutput):
    order: Optional[OrderRead] = None


class EditOrderInput(BaseModel):
    id: int
    status: OrderStatusEnum


class EditOrderOutput(CoreOutput):
    pass


class TakeOrderInput(BaseModel):
    id: int


class TakeOrderOutput(CoreOutput):
    pass


class OrderStatusUpdate(BaseModel):
    status: OrderStatusEnum
