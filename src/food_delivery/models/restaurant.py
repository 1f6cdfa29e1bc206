from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from ..db.base import Base, CoreMixin


class Category(CoreMixin, Base):
    __tablename__ = "categories"

    name = Column(String(128), nullable=False, unique=True)
    slug = Column(String(128), nullable=False, unique=True, index=True)
    cover_img = Column(String(512), nullable=True)

    restaurants = relationship("Restaurant", back_populates="category")


class Restaurant(CoreMixin, Base):
    __tablename__ = "restaurants"

    name = Column(String(128), nullable=False, index=True)
    cover_img = Column(String(512), nullable=False)
    address = Column(String(255), nullable=False)
    lat = Column(Float, nullable=False)
    lng = Column(Float, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    is_promoted = Column(Boolean, nullable=False, default=False)
    promoted_until = Column(DateTime(timezone=True), nullable=True)

    category = relationship("Category", back_populates="restaurants")
    owner = relationship("User", back_populates="restaurants")
    menu = relationship("Dish", back_populates="restaurant", cascade="all, delete-orphan", passive_deletes=True)
    orders = relationship("Order", back_populates="restaurant", passive_deletes=True)
