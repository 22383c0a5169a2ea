"""Activity logging service.

Every mutating endpoint receives an :class:`ActivityLogger` through FastAPI
dependency injection and calls it explicitly after its domain write. The
entry is added to the same session, so it is committed (or rolled back)
together with the write that triggered it.
"""
from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta, tzinfo
from typing import Any, Mapping

from fastapi import Depends, Request
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from app.db import get_db
from app.models.activity_log import ActivityCategory, ActivityLog
from app.models.admin_user import AdminUser
from app.security import get_current_admin
from app.utils.audit import sanitize_payload_for_audit

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = "System"

_ENTITY_CATEGORIES: dict[str, ActivityCategory] = {
    "AdminUser": ActivityCategory.user_management,
    "ApiKey": ActivityCategory.user_management,
    "Amenity": ActivityCategory.amenity_management,
    "Batch": ActivityCategory.batch_management,
    "BatchSession": ActivityCategory.batch_session_management,
    "Member": ActivityCategory.member_management,
    "Partner": ActivityCategory.partner_management,
}


def entity_label(entity: Any) -> str:
    """Human-readable name of a logged entity."""

    kind = type(entity).__name__
    if kind == "AdminUser":
        return entity.display_name
    if kind == "BatchSession":
        return entity.title or f"Session #{entity.id}"
    return str(getattr(entity, "name", f"{kind} #{entity.id}"))


class ActivityLogger:
    """Builds uniform activity log entries for one request."""

    def __init__(self, db: Session, *, actor: AdminUser | None = None, ip_address: str | None = None) -> None:
        self.db = db
        self.actor = actor
        self.ip_address = ip_address

    @property
    def actor_name(self) -> str:
        return self.actor.display_name if self.actor is not None else SYSTEM_ACTOR

    @property
    def actor_id(self) -> int | None:
        return self.actor.id if self.actor is not None else None

    def record(
        self,
        action: str,
        category: ActivityCategory,
        target: str,
        details: str,
        old_values: Mapping[str, Any] | None = None,
        new_values: Mapping[str, Any] | None = None,
        entity_type: str | None = None,
        entity_id: int | None = None,
    ) -> ActivityLog:
        """Add one activity log entry to the current unit of work."""

        entry = ActivityLog(
            action=action,
            user=self.actor_name,
            target=target,
            category=ActivityCategory(category),
            details=details,
            ip_address=self.ip_address,
            old_values=sanitize_payload_for_audit(old_values) if old_values is not None else None,
            new_values=sanitize_payload_for_audit(new_values) if new_values is not None else None,
            performed_by=self.actor_id,
            entity_type=entity_type,
            entity_id=entity_id,
        )
        self.db.add(entry)
        logger.info(
            "Activity recorded",
            extra={"action": action, "category": str(getattr(category, "value", category)), "entity_id": entity_id},
        )
        return entry

    def log_entity(
        self,
        action: str,
        entity: Any,
        details: str,
        old_values: Mapping[str, Any] | None = None,
        new_values: Mapping[str, Any] | None = None,
    ) -> None:
        """Record an action on a domain entity, deriving category and label from its kind."""

        kind = type(entity).__name__
        self.record(
            action,
            _ENTITY_CATEGORIES.get(kind, ActivityCategory.system),
            entity_label(entity),
            details,
            old_values,
            new_values,
            entity_type=kind,
            entity_id=entity.id,
        )

    def log_attendance(
        self,
        action: str,
        person: Any,
        details: str,
        old_values: Mapping[str, Any] | None = None,
        new_values: Mapping[str, Any] | None = None,
    ) -> None:
        """Record an attendance or excuse change for a member or partner."""

        self.record(
            action,
            ActivityCategory.attendance_management,
            person.name,
            details,
            old_values,
            new_values,
            entity_type=type(person).__name__,
            entity_id=person.id,
        )


def get_activity_logger(
    request: Request,
    db: Session = Depends(get_db),
    admin: AdminUser | None = Depends(get_current_admin),
) -> ActivityLogger:
    """FastAPI dependency building the request-scoped activity logger."""

    ip_address = request.client.host if request.client else None
    return ActivityLogger(db, actor=admin, ip_address=ip_address)


# --- Queries -------------------------------------------------------------

def date_range_bounds(name: str, now: datetime, tz: tzinfo = UTC) -> tuple[datetime, datetime] | None:
    """Return the UTC ``[start, end]`` window for a named range, ``None`` for unknown names.

    Day boundaries for ``today`` and ``yesterday`` are taken in ``tz``.
    """

    start_of_day = now.astimezone(tz).replace(hour=0, minute=0, second=0, microsecond=0)
    if name == "today":
        end = start_of_day + timedelta(days=1) - timedelta(microseconds=1)
        return start_of_day.astimezone(UTC), end.astimezone(UTC)
    if name == "yesterday":
        start = start_of_day - timedelta(days=1)
        return start.astimezone(UTC), (start_of_day - timedelta(microseconds=1)).astimezone(UTC)
    if name == "week":
        return now - timedelta(weeks=1), now
    if name == "month":
        return now - timedelta(days=30), now
    return None


def list_activity_logs(
    db: Session,
    *,
    now: datetime,
    tz: tzinfo = UTC,
    category: str | None = None,
    date_range: str | None = None,
    search: str | None = None,
    sort_order: str = "desc",
    page: int = 1,
    per_page: int = 15,
) -> tuple[list[ActivityLog], int]:
    """Return one page of activity log entries and the total match count."""

    stmt = select(ActivityLog)
    if category and category != "all":
        stmt = stmt.where(ActivityLog.category == ActivityCategory(category))
    if date_range and date_range != "all":
        bounds = date_range_bounds(date_range, now, tz)
        if bounds:
            stmt = stmt.where(ActivityLog.created_at.between(*bounds))
    if search:
        pattern = f"%{search}%"
        stmt = stmt.where(
            or_(
                ActivityLog.action.ilike(pattern),
                ActivityLog.user.ilike(pattern),
                ActivityLog.target.ilike(pattern),
                ActivityLog.details.ilike(pattern),
            )
        )

    total = db.scalar(select(func.count()).select_from(stmt.subquery())) or 0
    ordering = ActivityLog.created_at.asc() if sort_order == "asc" else ActivityLog.created_at.desc()
    id_ordering = ActivityLog.id.asc() if sort_order == "asc" else ActivityLog.id.desc()
    stmt = stmt.order_by(ordering, id_ordering).offset((page - 1) * per_page).limit(per_page)
    return list(db.scalars(stmt).all()), total


__all__ = [
    "ActivityLogger",
    "SYSTEM_ACTOR",
    "date_range_bounds",
    "entity_label",
    "get_activity_logger",
    "list_activity_logs",
]
