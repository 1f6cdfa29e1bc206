import enum
from sqlalchemy import Boolean, Column, String, Enum
from sqlalchemy.orm import relationship
from ..db.base import Base, CoreMixin


class RoleEnum(str, enum.Enum):
    Client = "Client"
    Owner = "Owner"
    Delivery = "Delivery"


class User(CoreMixin, Base):
    __tablename__ = "users"

    email = Column(String(255), nullable=False, unique=True, index=True)
    role = Column(Enum(RoleEnum, name="user_role"), nullable=False)
    verified = Column(Boolean, nullable=False, default=False)

    restaurants = relationship("Restaurant", back_populates="owner", passive_deletes=True)
    orders = relationship("Order", back_populates="customer", foreign_keys="Order.customer_id")
    rides = relationship("Order", back_populates="driver", foreign_keys="Order.driver_id")
    payments = relationship("Payment", back_populates="user", passive_deletes=True)
    addresses = relationship("Address", back_populates="client", passive_deletes=True)
