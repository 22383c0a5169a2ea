"""Attendance endpoints."""
from __future__ import annotations

import datetime as dt

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.config import get_settings
from app.db import get_db
from app.models.api_key import ApiScope
from app.models.person import PersonKind
from app.schemas.attendance import (
    AttendanceRecordRead,
    AttendanceSnapshotRead,
    BatchRosterRead,
    MarkAttendanceIn,
)
from app.security import require_scope
from app.services import attendance as attendance_service
from app.services.activity_log import ActivityLogger, get_activity_logger
from app.utils.time import Clock, get_clock

router = APIRouter(
    prefix="/attendance",
    tags=["attendance"],
    dependencies=[Depends(require_scope({ApiScope.staff}))],
)


@router.get("/batches", response_model=list[BatchRosterRead])
def list_attendance_batches(db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
    """Active batches with their rosters and excuse state."""

    return attendance_service.active_batches_with_rosters(db, today=clock.today())


@router.get("/batch/{batch_id}/all", response_model=AttendanceSnapshotRead)
def batch_attendance(
    batch_id: int,
    person_type: PersonKind = Query(PersonKind.member, alias="type"),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> AttendanceSnapshotRead:
    """Attendance matrix of a batch across all of its sessions."""

    snapshot = attendance_service.build_snapshot(db, batch_id, person_type, clock.today())
    return AttendanceSnapshotRead.model_validate(snapshot)


@router.post("/mark", response_model=AttendanceRecordRead)
def mark_attendance(
    payload: MarkAttendanceIn,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    activity: ActivityLogger = Depends(get_activity_logger),
) -> AttendanceRecordRead:
    record = attendance_service.mark_attendance(
        db, payload, today=clock.today(), now=clock.now(), activity=activity
    )
    return AttendanceRecordRead.model_validate(record)


@router.get("/by-date", response_model=list[AttendanceRecordRead])
def attendance_by_date(
    batch_id: int = Query(gt=0),
    session_date: dt.date = Query(alias="date"),
    person_type: PersonKind = Query(PersonKind.member, alias="type"),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> list[AttendanceRecordRead]:
    records = attendance_service.attendance_by_date(
        db, batch_id, session_date, person_type, today=clock.today()
    )
    return [AttendanceRecordRead.model_validate(record) for record in records]


@router.get("/partner/{partner_id}/recent", response_model=list[AttendanceRecordRead])
def partner_recent_attendance(
    partner_id: int,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> list[AttendanceRecordRead]:
    records = attendance_service.recent_partner_attendance(
        db, partner_id, today=clock.today(), limit=get_settings().RECENT_ATTENDANCE_LIMIT
    )
    return [AttendanceRecordRead.model_validate(record) for record in records]
