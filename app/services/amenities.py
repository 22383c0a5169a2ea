"""Amenity services."""
from __future__ import annotations

import logging
from datetime import datetime

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.amenity import Amenity
from app.schemas.amenity import AmenityBulkUpdate, AmenityCreate
from app.services.activity_log import ActivityLogger
from app.utils.audit import describe_changes, diff_values, snapshot
from app.utils.errors import error_response, is_unique_violation, not_found

logger = logging.getLogger(__name__)

AMENITY_FIELDS = ("name", "icon", "category", "enabled")


def _amenity_exists() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=error_response("AMENITY_EXISTS", "An amenity with this name already exists."),
    )


def get_amenity(db: Session, amenity_id: int) -> Amenity:
    amenity = db.get(Amenity, amenity_id)
    if amenity is None or amenity.deleted_at is not None:
        raise not_found("AMENITY_NOT_FOUND", "Amenity not found.")
    return amenity


def list_amenities(db: Session, *, enabled: bool | None = None) -> list[Amenity]:
    stmt = select(Amenity).where(Amenity.deleted_at.is_(None))
    if enabled is not None:
        stmt = stmt.where(Amenity.enabled.is_(enabled))
    return list(db.scalars(stmt.order_by(Amenity.category.asc(), Amenity.name.asc())).all())


def create_amenity(db: Session, payload: AmenityCreate, *, activity: ActivityLogger) -> Amenity:
    amenity = Amenity(**payload.model_dump())
    db.add(amenity)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        if not is_unique_violation(exc):
            raise
        raise _amenity_exists() from exc

    activity.log_entity(
        "Amenity Created",
        amenity,
        f'Amenity "{amenity.name}" was created.',
        new_values=snapshot(amenity, AMENITY_FIELDS),
    )
    db.commit()
    db.refresh(amenity)
    return amenity


def toggle_amenity(db: Session, amenity: Amenity, *, activity: ActivityLogger) -> Amenity:
    before = snapshot(amenity, ("enabled",))
    amenity.enabled = not amenity.enabled
    state = "enabled" if amenity.enabled else "disabled"
    activity.log_entity(
        "Amenity Status Changed",
        amenity,
        f'Amenity "{amenity.name}" was {state}.',
        before,
        snapshot(amenity, ("enabled",)),
    )
    db.commit()
    db.refresh(amenity)
    return amenity


def bulk_update_amenities(db: Session, payload: AmenityBulkUpdate, *, activity: ActivityLogger) -> list[Amenity]:
    """Apply several amenity updates in one transaction.

    Any failure rolls back every change together with the log entries added
    for the items processed before it.
    """

    updated: list[Amenity] = []
    try:
        for item in payload.amenities:
            amenity = get_amenity(db, item.id)
            before = snapshot(amenity, AMENITY_FIELDS)
            for field, value in item.model_dump(exclude_unset=True, exclude={"id"}).items():
                setattr(amenity, field, value)
            db.flush()

            old_values, new_values = diff_values(before, snapshot(amenity, AMENITY_FIELDS))
            if new_values:
                activity.log_entity(
                    "Amenity Updated",
                    amenity,
                    f'Amenity "{amenity.name}" was updated: '
                    + "; ".join(describe_changes(old_values, new_values))
                    + ".",
                    old_values,
                    new_values,
                )
            updated.append(amenity)
    except IntegrityError as exc:
        db.rollback()
        if not is_unique_violation(exc):
            raise
        logger.warning("Bulk amenity update rolled back", extra={"count": len(payload.amenities)})
        raise _amenity_exists() from exc
    except HTTPException:
        db.rollback()
        raise

    db.commit()
    for amenity in updated:
        db.refresh(amenity)
    return updated


def delete_amenity(db: Session, amenity: Amenity, *, now: datetime, activity: ActivityLogger) -> None:
    activity.log_entity(
        "Amenity Deleted",
        amenity,
        f'Amenity "{amenity.name}" was deleted.',
        old_values=snapshot(amenity, AMENITY_FIELDS),
    )
    amenity.deleted_at = now
    db.commit()


__all__ = [
    "AMENITY_FIELDS",
    "bulk_update_amenities",
    "create_amenity",
    "delete_amenity",
    "get_amenity",
    "list_amenities",
    "toggle_amenity",
]
