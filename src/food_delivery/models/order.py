import enum
from sqlalchemy import Column, Integer, ForeignKey, Numeric, Table, Enum as SAEnum
from sqlalchemy.orm import relationship
from ..db.base import Base, CoreMixin


class OrderStatusEnum(str, enum.Enum):
    Pending = "Pending"
    Cooking = "Cooking"
    Cooked = "Cooked"
    PickedUp = "PickedUp"
    Delivered = "Delivered"


order_dishes = Table(
    "order_dishes",
    Base.metadata,
    Column("order_id", Integer, ForeignKey("orders.id", ondelete="CASCADE"), primary_key=True),
    Column("dish_id", Integer, ForeignKey("dishes.id", ondelete="CASCADE"), primary_key=True),
)


class Order(CoreMixin, Base):
    __tablename__ = "orders"

    customer_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    driver_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id", ondelete="SET NULL"), nullable=True, index=True)
    total = Column(Numeric(10, 2), nullable=False)  # fixed at creation time
    status = Column(SAEnum(OrderStatusEnum, name="order_status"), nullable=False, default=OrderStatusEnum.Pending)

    # relations
    customer = relationship("User", back_populates="orders", foreign_keys=[customer_id])
    driver = relationship("User", back_populates="rides", foreign_keys=[driver_id])
    restaurant = relationship("Restaurant", back_populates="orders")
    dishes = relationship("Dish", secondary=order_dishes)
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")
