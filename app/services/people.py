"""Member/partner lookups shared by the attendance and excuse services."""
from __future__ import annotations

from datetime import date
from typing import Type

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.attendance import MemberAttendance, PartnerAttendance
from app.models.batch import Batch, batch_members, batch_partners
from app.models.person import Member, Partner, PersonKind, PersonStatus
from app.utils.errors import not_found

Person = Member | Partner
AttendanceRow = MemberAttendance | PartnerAttendance

PAUSED = "paused"

_PERSON_MODELS: dict[PersonKind, Type[Member] | Type[Partner]] = {
    PersonKind.member: Member,
    PersonKind.partner: Partner,
}
_ATTENDANCE_MODELS: dict[PersonKind, Type[MemberAttendance] | Type[PartnerAttendance]] = {
    PersonKind.member: MemberAttendance,
    PersonKind.partner: PartnerAttendance,
}
_ROSTER_TABLES = {
    PersonKind.member: (batch_members, "member_id"),
    PersonKind.partner: (batch_partners, "partner_id"),
}


def person_model(kind: PersonKind) -> Type[Member] | Type[Partner]:
    return _PERSON_MODELS[PersonKind(kind)]


def attendance_model(kind: PersonKind) -> Type[MemberAttendance] | Type[PartnerAttendance]:
    return _ATTENDANCE_MODELS[PersonKind(kind)]


def attendance_person_column(kind: PersonKind):
    """The ``member_id``/``partner_id`` column of the attendance table for ``kind``."""

    model = attendance_model(kind)
    return model.member_id if model is MemberAttendance else model.partner_id


def get_person(db: Session, kind: PersonKind, person_id: int) -> Person:
    """Return a live (not soft-deleted) member or partner, or raise 404."""

    model = person_model(kind)
    person = db.get(model, person_id)
    if person is None or person.deleted_at is not None:
        label = PersonKind(kind).value.capitalize()
        raise not_found(f"{PersonKind(kind).value.upper()}_NOT_FOUND", f"{label} not found.")
    return person


def get_batch(db: Session, batch_id: int) -> Batch:
    batch = db.get(Batch, batch_id)
    if batch is None or batch.deleted_at is not None:
        raise not_found("BATCH_NOT_FOUND", "Batch not found.")
    return batch


def roster(db: Session, batch_id: int, kind: PersonKind, *, active_only: bool = True) -> list[Person]:
    """Members enrolled in, or partners assigned to, a batch."""

    model = person_model(kind)
    table, column = _ROSTER_TABLES[PersonKind(kind)]
    stmt = (
        select(model)
        .join(table, table.c[column] == model.id)
        .where(table.c.batch_id == batch_id, model.deleted_at.is_(None))
        .order_by(model.name.asc(), model.id.asc())
    )
    if active_only:
        stmt = stmt.where(model.status == PersonStatus.active)
    return list(db.scalars(stmt).all())


def is_on_roster(db: Session, batch_id: int, kind: PersonKind, person_id: int) -> bool:
    """Whether the person belongs to the batch roster, with the same rule as :func:`roster`."""

    model = person_model(kind)
    table, column = _ROSTER_TABLES[PersonKind(kind)]
    stmt = (
        select(model.id)
        .join(table, table.c[column] == model.id)
        .where(
            table.c.batch_id == batch_id,
            model.id == person_id,
            model.deleted_at.is_(None),
            model.status == PersonStatus.active,
        )
    )
    return db.execute(stmt).first() is not None


def is_effectively_paused(person: Person, today: date) -> bool:
    """A person is paused while ``excused_until`` is set and not before today."""

    return person.excused_until is not None and person.excused_until >= today


def is_excused_on(person: Person, session_date: date, today: date) -> bool:
    """Whether the pause window ``[today, excused_until]`` covers ``session_date``."""

    return is_effectively_paused(person, today) and today <= session_date <= person.excused_until


def is_paused_through(person: Person, session_date: date) -> bool:
    """Whether ``session_date`` falls on or before the end of the person's pause."""

    return person.excused_until is not None and session_date <= person.excused_until


def effective_display_status(person: Person, today: date) -> str:
    if is_effectively_paused(person, today):
        return PAUSED
    return PersonStatus(person.status).value


__all__ = [
    "AttendanceRow",
    "PAUSED",
    "Person",
    "attendance_model",
    "attendance_person_column",
    "effective_display_status",
    "get_batch",
    "get_person",
    "is_effectively_paused",
    "is_excused_on",
    "is_on_roster",
    "is_paused_through",
    "person_model",
    "roster",
]
