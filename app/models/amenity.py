"""Amenity model."""
from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import Boolean, DateTime, Enum as SqlEnum, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class AmenityCategory(str, PyEnum):
    basic = "basic"
    comfort = "comfort"
    additional = "additional"


class Amenity(Base):
    """Facility feature offered at venue spots."""

    __tablename__ = "amenities"

    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    icon: Mapped[str | None] = mapped_column(String(255), nullable=True)
    category: Mapped[AmenityCategory] = mapped_column(
        SqlEnum(AmenityCategory, name="amenitycategory", native_enum=False), nullable=False
    )
    enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
