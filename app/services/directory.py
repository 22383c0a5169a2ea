"""Member and partner directory: create, list, update and soft delete."""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any

from fastapi import HTTPException, status
from pydantic import BaseModel
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.batch import Batch, BatchStatus
from app.models.person import PersonKind, PersonStatus
from app.services.activity_log import ActivityLogger
from app.services.people import Person, effective_display_status, person_model
from app.utils.audit import describe_changes, diff_values, snapshot
from app.utils.errors import error_response, is_unique_violation, validation_failed

logger = logging.getLogger(__name__)

_COMMON_FIELDS = ("name", "email", "mobile", "status", "excused_until", "excuse_reason")
READ_FIELDS: dict[PersonKind, tuple[str, ...]] = {
    PersonKind.member: _COMMON_FIELDS,
    PersonKind.partner: _COMMON_FIELDS + ("specialization", "pay_type", "pay_amount", "pay_percentage"),
}


def _audit_fields(kind: PersonKind) -> tuple[str, ...]:
    return READ_FIELDS[kind] + ("batch_ids", "updated_by")


def to_read(person: Person, kind: PersonKind, today: date) -> dict[str, Any]:
    """Response payload for a person, including the derived display status."""

    data = snapshot(person, READ_FIELDS[PersonKind(kind)])
    data.update(
        id=person.id,
        batch_ids=person.batch_ids,
        effective_display_status=effective_display_status(person, today),
        created_at=person.created_at,
        updated_at=person.updated_at,
    )
    return data


def _active_batches(db: Session, batch_ids: list[int]) -> list[Batch]:
    if not batch_ids:
        return []
    batches = list(
        db.scalars(
            select(Batch).where(
                Batch.id.in_(batch_ids),
                Batch.status == BatchStatus.active,
                Batch.deleted_at.is_(None),
            )
        ).all()
    )
    missing = sorted(set(batch_ids) - {batch.id for batch in batches})
    if missing:
        raise validation_failed(
            "Some batches do not exist or are not active.",
            {"batch_ids": [f"Batch {batch_id} is not an active batch." for batch_id in missing]},
        )
    return batches


def _flush_or_conflict(db: Session, kind: PersonKind) -> None:
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        if not is_unique_violation(exc):
            raise
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_response(
                f"{kind.value.upper()}_EXISTS",
                f"A {kind.value} with this email or mobile already exists.",
            ),
        ) from exc


def create_person(
    db: Session, kind: PersonKind, payload: BaseModel, *, activity: ActivityLogger
) -> Person:
    kind = PersonKind(kind)
    label = kind.value.capitalize()
    model = person_model(kind)

    person = model(
        **payload.model_dump(exclude={"batch_ids"}),
        created_by=activity.actor_id,
        updated_by=activity.actor_id,
    )
    person.batches = _active_batches(db, payload.batch_ids)
    db.add(person)
    _flush_or_conflict(db, kind)

    activity.log_entity(
        f"{label} Created",
        person,
        f'{label} "{person.name}" was created.',
        new_values=snapshot(person, _audit_fields(kind)),
    )
    db.commit()
    db.refresh(person)
    logger.info("Person created", extra={"type": kind.value, "person_id": person.id})
    return person


def list_people(
    db: Session,
    kind: PersonKind,
    *,
    search: str | None = None,
    batch_id: int | None = None,
    person_status: PersonStatus | None = None,
    page: int = 1,
    per_page: int = 15,
) -> tuple[list[Person], int]:
    model = person_model(kind)
    stmt = select(model).where(model.deleted_at.is_(None))
    if search:
        pattern = f"%{search}%"
        stmt = stmt.where(or_(model.name.ilike(pattern), model.email.ilike(pattern), model.mobile.ilike(pattern)))
    if batch_id is not None:
        stmt = stmt.where(model.batches.any(Batch.id == batch_id))
    if person_status is not None:
        stmt = stmt.where(model.status == person_status)

    total = db.scalar(select(func.count()).select_from(stmt.subquery())) or 0
    stmt = stmt.order_by(model.name.asc(), model.id.asc()).offset((page - 1) * per_page).limit(per_page)
    return list(db.scalars(stmt).all()), total


def update_person(
    db: Session, person: Person, kind: PersonKind, payload: BaseModel, *, activity: ActivityLogger
) -> Person:
    """Apply a partial update and log only the fields that actually changed."""

    kind = PersonKind(kind)
    label = kind.value.capitalize()
    before = snapshot(person, _audit_fields(kind))

    for field, value in payload.model_dump(exclude_unset=True, exclude={"batch_ids"}).items():
        setattr(person, field, value)
    if "batch_ids" in payload.model_fields_set and payload.batch_ids is not None:
        person.batches = _active_batches(db, payload.batch_ids)
    person.updated_by = activity.actor_id
    _flush_or_conflict(db, kind)

    old_values, new_values = diff_values(before, snapshot(person, _audit_fields(kind)))
    changes = describe_changes(old_values, new_values)
    if changes:
        activity.log_entity(
            f"{label} Updated",
            person,
            f'{label} "{person.name}" was updated: ' + "; ".join(changes) + ".",
            old_values,
            new_values,
        )
    db.commit()
    db.refresh(person)
    return person


def delete_person(
    db: Session, person: Person, kind: PersonKind, *, now: datetime, activity: ActivityLogger
) -> None:
    """Soft delete: detach from all batches and stamp ``deleted_at``."""

    kind = PersonKind(kind)
    label = kind.value.capitalize()
    before = snapshot(person, _audit_fields(kind))

    person.batches = []
    person.deleted_at = now
    person.updated_by = activity.actor_id
    activity.log_entity(
        f"{label} Deleted",
        person,
        f'{label} "{person.name}" was deleted.',
        old_values=before,
    )
    db.commit()
    logger.info("Person deleted", extra={"type": kind.value, "person_id": person.id})


__all__ = [
    "READ_FIELDS",
    "create_person",
    "delete_person",
    "list_people",
    "to_read",
    "update_person",
]
