"""Amenity schemas."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.amenity import AmenityCategory


class AmenityCreate(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    icon: str | None = Field(default=None, max_length=255)
    category: AmenityCategory
    enabled: bool = True


class AmenityBulkItem(BaseModel):
    id: int = Field(gt=0)
    name: str | None = Field(default=None, min_length=1, max_length=50)
    icon: str | None = Field(default=None, max_length=255)
    category: AmenityCategory | None = None
    enabled: bool | None = None

    @field_validator("name", "category", "enabled")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class AmenityBulkUpdate(BaseModel):
    amenities: list[AmenityBulkItem] = Field(min_length=1)


class AmenityRead(BaseModel):
    id: int
    name: str
    icon: str | None = None
    category: AmenityCategory
    enabled: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


__all__ = ["AmenityBulkItem", "AmenityBulkUpdate", "AmenityCreate", "AmenityRead"]
