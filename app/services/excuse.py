"""Pause/resume of a member's or partner's attendance."""
from __future__ import annotations

import logging
from datetime import date

from sqlalchemy.orm import Session

from app.models.person import PersonKind
from app.schemas.people import TogglePauseIn
from app.services.activity_log import ActivityLogger
from app.services.people import Person
from app.utils.audit import snapshot
from app.utils.errors import validation_failed

logger = logging.getLogger(__name__)

EXCUSE_FIELDS = ("excused_until", "excuse_reason")


def _validate_pause(payload: TogglePauseIn, today: date) -> str:
    errors: dict[str, list[str]] = {}
    reason = (payload.reason or "").strip()
    if not reason:
        errors["reason"] = ["The reason field is required when pausing."]
    if payload.end_date is None:
        errors["end_date"] = ["The end date field is required when pausing."]
    elif payload.end_date < today:
        errors["end_date"] = ["The end date must be today or a later date."]
    if errors:
        raise validation_failed("The pause request is invalid.", errors)
    return reason


def toggle_excuse(
    db: Session,
    person: Person,
    kind: PersonKind,
    payload: TogglePauseIn,
    *,
    today: date,
    activity: ActivityLogger,
) -> Person:
    """Set or clear ``excused_until``/``excuse_reason`` together and log the change.

    Resuming is unconditional: it succeeds (and is logged) even when the
    person is not paused.
    """

    kind = PersonKind(kind)
    label = kind.value.capitalize()
    before = snapshot(person, EXCUSE_FIELDS)

    if payload.action == "pause":
        reason = _validate_pause(payload, today)
        person.excused_until = payload.end_date
        person.excuse_reason = reason
        action = f"{label} Attendance Paused"
        details = (
            f'Attendance for {kind.value} "{person.name}" paused until '
            f'{payload.end_date.isoformat()} due to: "{reason}".'
        )
    else:
        person.excused_until = None
        person.excuse_reason = None
        action = f"{label} Attendance Resumed"
        details = f'Attendance for {kind.value} "{person.name}" resumed.'

    person.updated_by = activity.actor_id
    activity.log_attendance(action, person, details, before, snapshot(person, EXCUSE_FIELDS))
    db.commit()
    db.refresh(person)
    logger.info(
        "Attendance excuse toggled",
        extra={"type": kind.value, "person_id": person.id, "action": payload.action},
    )
    return person


__all__ = ["EXCUSE_FIELDS", "toggle_excuse"]
