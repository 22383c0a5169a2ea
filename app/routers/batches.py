"""Batch and batch session endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.db import get_db
from app.models.api_key import ApiScope
from app.models.batch import Batch, BatchSession, BatchStatus
from app.schemas.batch import (
    BatchCreate,
    BatchRead,
    SessionCreate,
    SessionRead,
    SessionReschedule,
    SessionUpdate,
)
from app.schemas.common import Paginated
from app.security import require_scope
from app.services import batches as batch_service
from app.services.activity_log import ActivityLogger, get_activity_logger
from app.services.people import get_batch

router = APIRouter(tags=["batches"], dependencies=[Depends(require_scope({ApiScope.staff}))])


@router.post("/batches", response_model=BatchRead, status_code=status.HTTP_201_CREATED)
def create_batch(
    payload: BatchCreate,
    db: Session = Depends(get_db),
    activity: ActivityLogger = Depends(get_activity_logger),
) -> Batch:
    return batch_service.create_batch(db, payload, activity=activity)


@router.get("/batches", response_model=Paginated[BatchRead])
def list_batches(
    batch_status: BatchStatus | None = Query(default=None, alias="status"),
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=15, ge=1, le=100),
    db: Session = Depends(get_db),
) -> Paginated[BatchRead]:
    items, total = batch_service.list_batches(db, batch_status=batch_status, page=page, per_page=per_page)
    return Paginated[BatchRead].build(
        [BatchRead.model_validate(item) for item in items], total, page, per_page
    )


@router.get("/batches/{batch_id}", response_model=BatchRead)
def get_batch_detail(batch_id: int, db: Session = Depends(get_db)) -> Batch:
    return get_batch(db, batch_id)


@router.get("/batches/{batch_id}/sessions", response_model=list[SessionRead])
def list_sessions(batch_id: int, db: Session = Depends(get_db)) -> list[BatchSession]:
    return list(get_batch(db, batch_id).sessions)


@router.post(
    "/batches/{batch_id}/sessions",
    response_model=SessionRead,
    status_code=status.HTTP_201_CREATED,
)
def create_session(
    batch_id: int,
    payload: SessionCreate,
    db: Session = Depends(get_db),
    activity: ActivityLogger = Depends(get_activity_logger),
) -> BatchSession:
    batch = get_batch(db, batch_id)
    return batch_service.create_session(db, batch, payload, activity=activity)


@router.put("/sessions/{session_id}", response_model=SessionRead)
def update_session(
    session_id: int,
    payload: SessionUpdate,
    db: Session = Depends(get_db),
    activity: ActivityLogger = Depends(get_activity_logger),
) -> BatchSession:
    session = batch_service.get_session(db, session_id)
    return batch_service.update_session(db, session, payload, activity=activity)


@router.post("/sessions/{session_id}/reschedule", response_model=SessionRead)
def reschedule_session(
    session_id: int,
    payload: SessionReschedule,
    db: Session = Depends(get_db),
    activity: ActivityLogger = Depends(get_activity_logger),
) -> BatchSession:
    """Move a session to another date/time; fails with 409 if the batch already meets that day."""

    session = batch_service.get_session(db, session_id)
    return batch_service.reschedule_session(db, session, payload, activity=activity)


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_session(
    session_id: int,
    db: Session = Depends(get_db),
    activity: ActivityLogger = Depends(get_activity_logger),
) -> Response:
    session = batch_service.get_session(db, session_id)
    batch_service.delete_session(db, session, activity=activity)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
