"""Activity log schemas."""
from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.models.activity_log import ActivityCategory


class ActivityLogCreate(BaseModel):
    action: str = Field(min_length=1, max_length=255)
    target: str = Field(min_length=1, max_length=255)
    category: ActivityCategory
    details: str = Field(min_length=1)
    old_values: dict[str, Any] | None = None
    new_values: dict[str, Any] | None = None


class ActivityLogRead(BaseModel):
    id: int
    action: str
    user: str
    target: str
    category: ActivityCategory
    details: str
    ip_address: str | None = None
    old_values: dict[str, Any] | None = None
    new_values: dict[str, Any] | None = None
    performed_by: int | None = None
    entity_type: str | None = None
    entity_id: int | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


__all__ = ["ActivityLogCreate", "ActivityLogRead"]
