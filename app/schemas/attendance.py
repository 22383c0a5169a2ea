"""Attendance schemas."""
from __future__ import annotations

import datetime as dt
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from app.models.attendance import AttendanceStatus
from app.models.person import PersonKind, PersonStatus


class MarkAttendanceIn(BaseModel):
    batch_id: int = Field(gt=0)
    date: dt.date
    type: PersonKind
    person_id: int = Field(gt=0)
    status: AttendanceStatus
    notes: str | None = Field(default=None, max_length=500)


class SessionRefRead(BaseModel):
    id: int
    date: dt.date
    batch_id: int
    batch_name: str

    model_config = ConfigDict(from_attributes=True)


class PersonRefRead(BaseModel):
    id: int
    type: PersonKind
    name: str
    email: str
    excused_until: dt.date | None = None
    excuse_reason: str | None = None

    model_config = ConfigDict(from_attributes=True)


class AttendanceRecordRead(BaseModel):
    """A stored or placeholder attendance record; ``id`` is null for placeholders."""

    id: int | None = None
    source: Literal["persisted", "synthetic"]
    status: AttendanceStatus
    display_status: AttendanceStatus
    is_editable: bool
    notes: str | None = None
    marked_at: dt.datetime | None = None
    marked_by: int | None = None
    session: SessionRefRead
    person: PersonRefRead

    model_config = ConfigDict(from_attributes=True)


class AttendanceSnapshotRead(BaseModel):
    batch_id: int
    batch_name: str
    type: PersonKind
    current_date: dt.date
    session_dates: list[dt.date]
    records: list[AttendanceRecordRead]
    records_by_date: dict[dt.date, list[AttendanceRecordRead]]

    model_config = ConfigDict(from_attributes=True)


class RosterPersonRead(BaseModel):
    id: int
    name: str
    email: str
    status: PersonStatus
    excused_until: dt.date | None = None
    excuse_reason: str | None = None
    effective_display_status: str


class BatchRosterRead(BaseModel):
    id: int
    name: str
    status: str
    start_date: dt.date | None = None
    end_date: dt.date | None = None
    members: list[RosterPersonRead]
    partners: list[RosterPersonRead]


__all__ = [
    "AttendanceRecordRead",
    "AttendanceSnapshotRead",
    "BatchRosterRead",
    "MarkAttendanceIn",
    "PersonRefRead",
    "RosterPersonRead",
    "SessionRefRead",
]
