"""Activity log endpoints."""
from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.config import get_settings
from app.db import get_db
from app.models.activity_log import ActivityCategory, ActivityLog
from app.models.api_key import ApiScope
from app.schemas.activity_log import ActivityLogCreate, ActivityLogRead
from app.schemas.common import Paginated
from app.security import require_scope
from app.services import activity_log as activity_service
from app.services.activity_log import ActivityLogger, get_activity_logger
from app.utils.time import Clock, get_clock

router = APIRouter(prefix="/activity-logs", tags=["activity-logs"])


@router.get(
    "",
    response_model=Paginated[ActivityLogRead],
    dependencies=[Depends(require_scope({ApiScope.staff}))],
)
def list_activity_logs(
    category: ActivityCategory | Literal["all"] | None = Query(default=None),
    date_range: Literal["today", "yesterday", "week", "month", "all"] | None = Query(default=None),
    search: str | None = Query(default=None, max_length=255),
    sort_order: Literal["asc", "desc"] = Query(default="desc"),
    page: int = Query(default=1, ge=1),
    per_page: int | None = Query(default=None, ge=1, le=100),
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> Paginated[ActivityLogRead]:
    """Filter, search and paginate the activity log."""

    per_page = per_page or get_settings().ACTIVITY_LOG_PAGE_SIZE
    items, total = activity_service.list_activity_logs(
        db,
        now=clock.now(),
        tz=clock.tz,
        category=category,
        date_range=date_range,
        search=search,
        sort_order=sort_order,
        page=page,
        per_page=per_page,
    )
    return Paginated[ActivityLogRead].build(
        [ActivityLogRead.model_validate(item) for item in items], total, page, per_page
    )


@router.post(
    "",
    response_model=ActivityLogRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_scope({ApiScope.admin}))],
)
def create_activity_log(
    payload: ActivityLogCreate,
    db: Session = Depends(get_db),
    activity: ActivityLogger = Depends(get_activity_logger),
) -> ActivityLog:
    """Record a manual activity log entry on behalf of the calling admin."""

    entry = activity.record(
        payload.action,
        payload.category,
        payload.target,
        payload.details,
        payload.old_values,
        payload.new_values,
    )
    db.commit()
    db.refresh(entry)
    return entry
