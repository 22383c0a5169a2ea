"""Attendance services: batch snapshots, marking and read helpers.

The snapshot is a dense (session date x person) matrix. Rows that exist in
the attendance tables come back as :class:`PersistedAttendance`; missing
pairs are filled with :class:`SyntheticAttendance` placeholders that are
never written to the database.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import ClassVar, Literal

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.attendance import AttendanceStatus
from app.models.batch import Batch, BatchSession, BatchStatus
from app.models.person import Partner, PersonKind, PersonStatus
from app.schemas.attendance import MarkAttendanceIn
from app.services.activity_log import ActivityLogger
from app.services.people import (
    AttendanceRow,
    Person,
    attendance_model,
    attendance_person_column,
    effective_display_status,
    get_batch,
    get_person,
    is_excused_on,
    is_on_roster,
    is_paused_through,
    roster,
)
from app.utils.errors import error_response, is_unique_violation, not_found, validation_failed

logger = logging.getLogger(__name__)

_UNMARKED = AttendanceStatus.NOT_MARKED


@dataclass(frozen=True)
class SessionRef:
    id: int
    date: date
    batch_id: int
    batch_name: str


@dataclass(frozen=True)
class PersonRef:
    id: int
    type: PersonKind
    name: str
    email: str
    excused_until: date | None
    excuse_reason: str | None

    @classmethod
    def of(cls, person: Person, kind: PersonKind) -> "PersonRef":
        return cls(
            id=person.id,
            type=PersonKind(kind),
            name=person.name,
            email=person.email,
            excused_until=person.excused_until,
            excuse_reason=person.excuse_reason,
        )


@dataclass(frozen=True)
class PersistedAttendance:
    """An attendance row read from storage."""

    source: ClassVar[Literal["persisted"]] = "persisted"

    id: int
    session: SessionRef
    person: PersonRef
    status: AttendanceStatus
    display_status: AttendanceStatus
    is_editable: bool
    notes: str | None
    marked_at: datetime | None
    marked_by: int | None


@dataclass(frozen=True)
class SyntheticAttendance:
    """Placeholder for a (person, session) pair with no stored row."""

    source: ClassVar[Literal["synthetic"]] = "synthetic"
    id: ClassVar[None] = None
    notes: ClassVar[None] = None
    marked_at: ClassVar[None] = None
    marked_by: ClassVar[None] = None

    session: SessionRef
    person: PersonRef
    status: AttendanceStatus
    display_status: AttendanceStatus
    is_editable: bool


AttendanceView = PersistedAttendance | SyntheticAttendance


@dataclass
class AttendanceSnapshot:
    batch_id: int
    batch_name: str
    type: PersonKind
    current_date: date
    session_dates: list[date] = field(default_factory=list)
    records: list[AttendanceView] = field(default_factory=list)

    @property
    def records_by_date(self) -> dict[date, list[AttendanceView]]:
        grouped: dict[date, list[AttendanceView]] = defaultdict(list)
        for record in self.records:
            grouped[record.session.date].append(record)
        return dict(grouped)


def _session_ref(session: BatchSession, batch: Batch) -> SessionRef:
    return SessionRef(id=session.id, date=session.date, batch_id=batch.id, batch_name=batch.name)


def _row_person_id(row: AttendanceRow) -> int:
    return getattr(row, "member_id", None) or getattr(row, "partner_id")


def persisted_view(
    row: AttendanceRow,
    session: BatchSession,
    batch: Batch,
    person: Person,
    kind: PersonKind,
    as_of: date,
) -> PersistedAttendance:
    stored = AttendanceStatus(row.status)
    display = stored
    # Marked history is never overridden; only an unmarked row shows the pause.
    if stored == _UNMARKED and is_excused_on(person, session.date, as_of):
        display = AttendanceStatus.EXCUSED
    return PersistedAttendance(
        id=row.id,
        session=_session_ref(session, batch),
        person=PersonRef.of(person, kind),
        status=stored,
        display_status=display,
        is_editable=session.date <= as_of,
        notes=row.notes,
        marked_at=row.marked_at,
        marked_by=row.marked_by,
    )


def synthetic_view(
    session: BatchSession,
    batch: Batch,
    person: Person,
    kind: PersonKind,
    as_of: date,
) -> SyntheticAttendance:
    attendance_status = _UNMARKED
    if is_excused_on(person, session.date, as_of):
        attendance_status = AttendanceStatus.EXCUSED
    return SyntheticAttendance(
        session=_session_ref(session, batch),
        person=PersonRef.of(person, kind),
        status=attendance_status,
        display_status=attendance_status,
        is_editable=session.date <= as_of,
    )


def _batch_sessions(db: Session, batch_id: int) -> list[BatchSession]:
    stmt = (
        select(BatchSession)
        .where(BatchSession.batch_id == batch_id)
        .order_by(BatchSession.date.asc(), BatchSession.id.asc())
    )
    return list(db.scalars(stmt).all())


def build_snapshot(db: Session, batch_id: int, kind: PersonKind, as_of: date) -> AttendanceSnapshot:
    """Reconstruct the attendance matrix of a batch for one person type."""

    kind = PersonKind(kind)
    batch = get_batch(db, batch_id)
    snapshot = AttendanceSnapshot(batch_id=batch.id, batch_name=batch.name, type=kind, current_date=as_of)

    people = roster(db, batch.id, kind)
    sessions = _batch_sessions(db, batch.id)
    if not people or not sessions:
        logger.info(
            "Empty attendance snapshot",
            extra={"batch_id": batch.id, "type": kind.value, "people": len(people), "sessions": len(sessions)},
        )
        return snapshot

    model = attendance_model(kind)
    person_column = attendance_person_column(kind)
    rows = db.scalars(
        select(model).where(
            model.batch_session_id.in_([s.id for s in sessions]),
            person_column.in_([p.id for p in people]),
        )
    ).all()
    existing = {(row.batch_session_id, _row_person_id(row)): row for row in rows}

    for session in sessions:
        for person in people:
            row = existing.get((session.id, person.id))
            if row is not None:
                snapshot.records.append(persisted_view(row, session, batch, person, kind, as_of))
            else:
                snapshot.records.append(synthetic_view(session, batch, person, kind, as_of))

    snapshot.session_dates = sorted({session.date for session in sessions})
    return snapshot


def find_session(db: Session, batch_id: int, session_date: date) -> BatchSession | None:
    stmt = select(BatchSession).where(BatchSession.batch_id == batch_id, BatchSession.date == session_date)
    return db.scalars(stmt).first()


def mark_attendance(
    db: Session,
    payload: MarkAttendanceIn,
    *,
    today: date,
    now: datetime,
    activity: ActivityLogger,
) -> PersistedAttendance:
    """Upsert the attendance row of one person for the session on ``payload.date``."""

    kind = PersonKind(payload.type)
    batch = get_batch(db, payload.batch_id)
    person = get_person(db, kind, payload.person_id)

    session = find_session(db, batch.id, payload.date)
    if session is None:
        raise not_found("SESSION_NOT_FOUND", "No session found for the given date.")
    if not is_on_roster(db, batch.id, kind, person.id):
        raise not_found("PERSON_NOT_IN_BATCH", f"{kind.value.capitalize()} is not part of this batch.")

    if session.date > today:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=error_response(
                "ATTENDANCE_NOT_EDITABLE",
                "Cannot mark attendance for future dates.",
                {"date": session.date.isoformat(), "current_date": today.isoformat()},
            ),
        )

    if is_paused_through(person, session.date) and payload.status != AttendanceStatus.EXCUSED:
        raise validation_failed(
            f"{kind.value.capitalize()} is excused until {person.excused_until.isoformat()}. "
            "Can only mark as excused during excused period.",
            {"status": ["Only 'excused' is allowed while the person is paused."]},
            code="PERSON_EXCUSED",
        )

    model = attendance_model(kind)
    person_column = attendance_person_column(kind)
    row = db.scalars(
        select(model).where(person_column == person.id, model.batch_session_id == session.id)
    ).first()
    old_values = {"status": AttendanceStatus(row.status).value} if row is not None else None
    if row is None:
        row = model(**{person_column.key: person.id, "batch_session_id": session.id})
        db.add(row)

    row.status = payload.status
    row.notes = payload.notes
    row.marked_at = now
    row.marked_by = activity.actor_id
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        if not is_unique_violation(exc):
            raise
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=error_response("ATTENDANCE_CONFLICT", "Attendance was marked concurrently; retry."),
        ) from exc

    activity.log_attendance(
        "Attendance Marked",
        person,
        f'Attendance for {person.name} on {session.date.isoformat()} for batch "{batch.name}" '
        f"marked as {AttendanceStatus(payload.status).value}.",
        old_values,
        {"status": AttendanceStatus(payload.status).value},
    )
    db.commit()
    db.refresh(row)
    logger.info(
        "Attendance marked",
        extra={"batch_id": batch.id, "session_id": session.id, "type": kind.value, "person_id": person.id},
    )
    return persisted_view(row, session, batch, person, kind, today)


def attendance_by_date(
    db: Session, batch_id: int, session_date: date, kind: PersonKind, *, today: date
) -> list[PersistedAttendance]:
    """Stored attendance rows of one session."""

    kind = PersonKind(kind)
    batch = get_batch(db, batch_id)
    session = find_session(db, batch.id, session_date)
    if session is None:
        raise not_found("SESSION_NOT_FOUND", "No session found for this batch on the specified date.")

    model = attendance_model(kind)
    rows = db.scalars(select(model).where(model.batch_session_id == session.id).order_by(model.id.asc())).all()
    relation = "member" if kind == PersonKind.member else "partner"
    return [persisted_view(row, session, batch, getattr(row, relation), kind, today) for row in rows]


def recent_partner_attendance(
    db: Session, partner_id: int, *, today: date, limit: int = 10
) -> list[PersistedAttendance]:
    """Latest stored attendance of a partner on sessions up to today."""

    partner: Partner = get_person(db, PersonKind.partner, partner_id)
    if partner.status != PersonStatus.active:
        return []

    model = attendance_model(PersonKind.partner)
    stmt = (
        select(model, BatchSession, Batch)
        .join(BatchSession, model.batch_session_id == BatchSession.id)
        .join(Batch, BatchSession.batch_id == Batch.id)
        .where(model.partner_id == partner.id, BatchSession.date <= today)
        .order_by(BatchSession.date.desc(), model.marked_at.desc())
        .limit(limit)
    )
    return [
        persisted_view(row, session, batch, partner, PersonKind.partner, today)
        for row, session, batch in db.execute(stmt).all()
    ]


def active_batches_with_rosters(db: Session, *, today: date) -> list[dict]:
    """Active batches with their members and partners, including excuse state."""

    stmt = (
        select(Batch)
        .where(Batch.status == BatchStatus.active, Batch.deleted_at.is_(None))
        .order_by(Batch.name.asc())
    )
    result = []
    for batch in db.scalars(stmt).all():
        result.append(
            {
                "id": batch.id,
                "name": batch.name,
                "status": batch.status,
                "start_date": batch.start_date,
                "end_date": batch.end_date,
                "members": [_roster_entry(p, today) for p in roster(db, batch.id, PersonKind.member, active_only=False)],
                "partners": [_roster_entry(p, today) for p in roster(db, batch.id, PersonKind.partner, active_only=False)],
            }
        )
    return result


def _roster_entry(person: Person, today: date) -> dict:
    return {
        "id": person.id,
        "name": person.name,
        "email": person.email,
        "status": person.status,
        "excused_until": person.excused_until,
        "excuse_reason": person.excuse_reason,
        "effective_display_status": effective_display_status(person, today),
    }


__all__ = [
    "AttendanceSnapshot",
    "AttendanceView",
    "PersistedAttendance",
    "PersonRef",
    "SessionRef",
    "SyntheticAttendance",
    "active_batches_with_rosters",
    "attendance_by_date",
    "build_snapshot",
    "find_session",
    "mark_attendance",
    "recent_partner_attendance",
]
