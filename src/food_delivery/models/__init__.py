from .user import User, RoleEnum
from .address import Address
from .restaurant import Category, Restaurant
from .dish import Dish
from .order import Order, OrderStatusEnum, order_dishes
from .order_item import OrderItem
from .payment import Payment

__all__ = [
    "User",
    "RoleEnum",
    "Address",
    "Category",
    "Restaurant",
    "Dish",
    "Order",
    "OrderStatusEnum",
    "order_dishes",
    "OrderItem",
    "Payment",
]
