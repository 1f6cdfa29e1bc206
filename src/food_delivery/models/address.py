from sqlalchemy import Boolean, Column, Float, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from ..db.base import Base, CoreMixin


class Address(CoreMixin, Base):
    """Delivery address saved by a client; at most one per client is selected."""

    __tablename__ = "addresses"

    client_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    address = Column(String(255), nullable=False)
    lat = Column(Float, nullable=False)
    lng = Column(Float, nullable=False)
    selected = Column(Boolean, nullable=False, default=False)

    client = relationship("User", back_populates="addresses")
