"""Amenity endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.db import get_db
from app.models.amenity import Amenity
from app.models.api_key import ApiScope
from app.schemas.amenity import AmenityBulkUpdate, AmenityCreate, AmenityRead
from app.security import require_scope
from app.services import amenities as amenity_service
from app.services.activity_log import ActivityLogger, get_activity_logger
from app.utils.time import Clock, get_clock

router = APIRouter(
    prefix="/amenities",
    tags=["amenities"],
    dependencies=[Depends(require_scope({ApiScope.staff}))],
)


@router.get("", response_model=list[AmenityRead])
def list_amenities(
    enabled: bool | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[Amenity]:
    return amenity_service.list_amenities(db, enabled=enabled)


@router.post("", response_model=AmenityRead, status_code=status.HTTP_201_CREATED)
def create_amenity(
    payload: AmenityCreate,
    db: Session = Depends(get_db),
    activity: ActivityLogger = Depends(get_activity_logger),
) -> Amenity:
    return amenity_service.create_amenity(db, payload, activity=activity)


@router.put("/bulk", response_model=list[AmenityRead])
def bulk_update_amenities(
    payload: AmenityBulkUpdate,
    db: Session = Depends(get_db),
    activity: ActivityLogger = Depends(get_activity_logger),
) -> list[Amenity]:
    """Update several amenities at once; nothing is saved if any item fails."""

    return amenity_service.bulk_update_amenities(db, payload, activity=activity)


@router.put("/{amenity_id}/toggle", response_model=AmenityRead)
def toggle_amenity(
    amenity_id: int,
    db: Session = Depends(get_db),
    activity: ActivityLogger = Depends(get_activity_logger),
) -> Amenity:
    amenity = amenity_service.get_amenity(db, amenity_id)
    return amenity_service.toggle_amenity(db, amenity, activity=activity)


@router.delete("/{amenity_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_amenity(
    amenity_id: int,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    activity: ActivityLogger = Depends(get_activity_logger),
) -> Response:
    amenity = amenity_service.get_amenity(db, amenity_id)
    amenity_service.delete_amenity(db, amenity, now=clock.now(), activity=activity)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
