"""Batch and batch session schemas."""
from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.models.batch import BatchStatus, SessionStatus


class BatchCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    status: BatchStatus = BatchStatus.active
    capacity: int = Field(default=0, ge=0)
    description: str | None = None
    start_date: dt.date | None = None
    end_date: dt.date | None = None

    @model_validator(mode="after")
    def _check_dates(self) -> "BatchCreate":
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class BatchRead(BaseModel):
    id: int
    name: str
    status: BatchStatus
    capacity: int
    description: str | None = None
    start_date: dt.date | None = None
    end_date: dt.date | None = None
    member_ids: list[int]
    partner_ids: list[int]
    created_at: dt.datetime

    model_config = ConfigDict(from_attributes=True)


class _TimeWindow(BaseModel):
    @model_validator(mode="after")
    def _check_times(self):
        start = getattr(self, "start_time", None)
        end = getattr(self, "end_time", None)
        if start is not None and end is not None and end <= start:
            raise ValueError("end_time must be after start_time")
        return self


class SessionCreate(_TimeWindow):
    title: str | None = Field(default=None, max_length=255)
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    status: SessionStatus = SessionStatus.scheduled
    notes: str | None = None


class SessionUpdate(_TimeWindow):
    title: str | None = Field(default=None, max_length=255)
    date: dt.date | None = None
    start_time: dt.time | None = None
    end_time: dt.time | None = None
    status: SessionStatus | None = None
    notes: str | None = None

    @field_validator("date", "start_time", "end_time", "status")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class SessionReschedule(_TimeWindow):
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    notes: str = Field(min_length=1)
    status: SessionStatus = SessionStatus.rescheduled


class SessionRead(BaseModel):
    id: int
    batch_id: int
    title: str | None = None
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    status: SessionStatus
    notes: str | None = None

    model_config = ConfigDict(from_attributes=True)


__all__ = [
    "BatchCreate",
    "BatchRead",
    "SessionCreate",
    "SessionRead",
    "SessionReschedule",
    "SessionUpdate",
]
