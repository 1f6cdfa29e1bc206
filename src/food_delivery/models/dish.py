from sqlalchemy import Column, ForeignKey, Integer, JSON, Numeric, String
from sqlalchemy.orm import relationship
from ..db.base import Base, CoreMixin


class Dish(CoreMixin, Base):
    __tablename__ = "dishes"

    name = Column(String(128), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    photo = Column(String(512), nullable=True)
    description = Column(String(100), nullable=True)
    restaurant_id = Column(Integer, ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True)
    # [{"name": ..., "extra": ..., "choices": [{"name": ..., "extra": ...}]}]
    options = Column(JSON, nullable=True)

    restaurant = relationship("Restaurant", back_populates="menu")
