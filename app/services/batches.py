"""Batch and batch session services."""
from __future__ import annotations

import logging
from datetime import date

from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.batch import Batch, BatchSession, BatchStatus
from app.schemas.batch import BatchCreate, SessionCreate, SessionReschedule, SessionUpdate
from app.services.activity_log import ActivityLogger, entity_label
from app.utils.audit import describe_changes, diff_values, snapshot
from app.utils.errors import error_response, is_unique_violation, not_found, validation_failed

logger = logging.getLogger(__name__)

BATCH_FIELDS = ("name", "status", "capacity", "description", "start_date", "end_date")
SESSION_FIELDS = ("title", "date", "start_time", "end_time", "status", "notes")


def _session_conflict(session_date: date) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=error_response(
            "SESSION_CONFLICT",
            "This batch already has a session on that date.",
            {"date": session_date.isoformat()},
        ),
    )


def create_batch(db: Session, payload: BatchCreate, *, activity: ActivityLogger) -> Batch:
    batch = Batch(**payload.model_dump())
    db.add(batch)
    db.flush()
    activity.log_entity(
        "Batch Created",
        batch,
        f'Batch "{batch.name}" was created.',
        new_values=snapshot(batch, BATCH_FIELDS),
    )
    db.commit()
    db.refresh(batch)
    logger.info("Batch created", extra={"batch_id": batch.id})
    return batch


def list_batches(
    db: Session, *, batch_status: BatchStatus | None = None, page: int = 1, per_page: int = 15
) -> tuple[list[Batch], int]:
    stmt = select(Batch).where(Batch.deleted_at.is_(None))
    if batch_status is not None:
        stmt = stmt.where(Batch.status == batch_status)
    total = db.scalar(select(func.count()).select_from(stmt.subquery())) or 0
    stmt = stmt.order_by(Batch.name.asc(), Batch.id.asc()).offset((page - 1) * per_page).limit(per_page)
    return list(db.scalars(stmt).all()), total


def get_session(db: Session, session_id: int) -> BatchSession:
    session = db.get(BatchSession, session_id)
    if session is None:
        raise not_found("SESSION_NOT_FOUND", "Session not found.")
    return session


def _ensure_date_free(db: Session, batch_id: int, session_date: date, *, exclude_id: int | None = None) -> None:
    stmt = select(BatchSession.id).where(BatchSession.batch_id == batch_id, BatchSession.date == session_date)
    if exclude_id is not None:
        stmt = stmt.where(BatchSession.id != exclude_id)
    if db.execute(stmt).first() is not None:
        raise _session_conflict(session_date)


def _flush_session(db: Session, session: BatchSession) -> None:
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        if not is_unique_violation(exc):
            raise
        raise _session_conflict(session.date) from exc


def create_session(
    db: Session, batch: Batch, payload: SessionCreate, *, activity: ActivityLogger
) -> BatchSession:
    _ensure_date_free(db, batch.id, payload.date)
    session = BatchSession(batch_id=batch.id, **payload.model_dump())
    db.add(session)
    _flush_session(db, session)
    activity.log_entity(
        "Batch Session Created",
        session,
        f'Session "{entity_label(session)}" on {session.date.isoformat()} was created for batch "{batch.name}".',
        new_values=snapshot(session, SESSION_FIELDS),
    )
    db.commit()
    db.refresh(session)
    return session


def update_session(
    db: Session, session: BatchSession, payload: SessionUpdate, *, activity: ActivityLogger
) -> BatchSession:
    before = snapshot(session, SESSION_FIELDS)
    changes = payload.model_dump(exclude_unset=True)
    start = changes.get("start_time", session.start_time)
    end = changes.get("end_time", session.end_time)
    if end <= start:
        raise validation_failed("Invalid session time window.", {"end_time": ["end_time must be after start_time"]})
    if changes.get("date") is not None and changes["date"] != session.date:
        _ensure_date_free(db, session.batch_id, changes["date"], exclude_id=session.id)

    for field, value in changes.items():
        setattr(session, field, value)
    _flush_session(db, session)

    old_values, new_values = diff_values(before, snapshot(session, SESSION_FIELDS))
    if new_values:
        activity.log_entity(
            "Batch Session Updated",
            session,
            f'Session "{entity_label(session)}" was updated: ' + "; ".join(describe_changes(old_values, new_values)) + ".",
            old_values,
            new_values,
        )
    db.commit()
    db.refresh(session)
    return session


def reschedule_session(
    db: Session, session: BatchSession, payload: SessionReschedule, *, activity: ActivityLogger
) -> BatchSession:
    """Move a session in place to a new date and time window."""

    before = snapshot(session, SESSION_FIELDS)
    previous_date = session.date
    if payload.date != session.date:
        _ensure_date_free(db, session.batch_id, payload.date, exclude_id=session.id)

    session.date = payload.date
    session.start_time = payload.start_time
    session.end_time = payload.end_time
    session.notes = payload.notes
    session.status = payload.status
    _flush_session(db, session)

    old_values, new_values = diff_values(before, snapshot(session, SESSION_FIELDS))
    activity.log_entity(
        "Batch Session Rescheduled",
        session,
        f'Session "{entity_label(session)}" was rescheduled from {previous_date.isoformat()} '
        f'to {session.date.isoformat()}. Reason: "{payload.notes}".',
        old_values,
        new_values,
    )
    db.commit()
    db.refresh(session)
    logger.info("Session rescheduled", extra={"session_id": session.id, "batch_id": session.batch_id})
    return session


def delete_session(db: Session, session: BatchSession, *, activity: ActivityLogger) -> None:
    activity.log_entity(
        "Batch Session Deleted",
        session,
        f'Session "{entity_label(session)}" on {session.date.isoformat()} was deleted.',
        old_values=snapshot(session, SESSION_FIELDS),
    )
    db.delete(session)
    db.commit()


__all__ = [
    "BATCH_FIELDS",
    "SESSION_FIELDS",
    "create_batch",
    "create_session",
    "delete_session",
    "get_session",
    "list_batches",
    "reschedule_session",
    "update_session",
]
