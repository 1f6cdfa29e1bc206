from sqlalchemy import Column, Integer, ForeignKey, JSON
from sqlalchemy.orm import relationship
from ..db.base import Base, CoreMixin


class OrderItem(CoreMixin, Base):
    __tablename__ = "order_items"

    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    dish_id = Column(Integer, ForeignKey("dishes.id", ondelete="CASCADE"), nullable=True)
    # [{"name": ..., "choice": ...}] as picked by the customer
    options = Column(JSON, nullable=True)

    # relations
    order = relationship("Order", back_populates="items")
    dish = relationship("Dish")
