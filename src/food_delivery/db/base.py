from sqlalchemy import Column, DateTime, Integer, func
from sqlalchemy.orm import declarative_base

# Base for the models
Base = declarative_base()


class CoreMixin:
    """Id and timestamps shared by every table."""

    __mapper_args__ = {"eager_defaults": True}

    id = Column(Integer, primary_key=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
