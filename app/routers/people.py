"""Member and partner endpoints.

Both resources share the same routes; :func:`build_router` wires one
router per person kind.
"""

from typing import Type

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.db import get_db
from app.models.api_key import ApiScope
from app.models.person import PersonKind, PersonStatus
from app.schemas.common import Paginated
from app.schemas.people import (
    MemberCreate,
    MemberRead,
    MemberUpdate,
    PartnerCreate,
    PartnerRead,
    PartnerUpdate,
    TogglePauseIn,
)
from app.security import require_scope
from app.services import directory
from app.services.activity_log import ActivityLogger, get_activity_logger
from app.services.excuse import toggle_excuse
from app.services.people import get_person
from app.utils.time import Clock, get_clock


def build_router(
    kind: PersonKind,
    create_schema: Type[BaseModel],
    update_schema: Type[BaseModel],
    read_schema: Type[BaseModel],
) -> APIRouter:
    plural = f"{kind.value}s"
    router = APIRouter(
        prefix=f"/{plural}",
        tags=[plural],
        dependencies=[Depends(require_scope({ApiScope.staff}))],
    )

    def _read(person, clock: Clock):
        return read_schema.model_validate(directory.to_read(person, kind, clock.today()))

    @router.post("", response_model=read_schema, status_code=status.HTTP_201_CREATED, name=f"create_{kind.value}")
    def create(
        payload: create_schema,  # type: ignore[valid-type]
        db: Session = Depends(get_db),
        clock: Clock = Depends(get_clock),
        activity: ActivityLogger = Depends(get_activity_logger),
    ):
        person = directory.create_person(db, kind, payload, activity=activity)
        return _read(person, clock)

    @router.get("", response_model=Paginated[read_schema], name=f"list_{plural}")
    def list_(
        search: str | None = Query(default=None, max_length=100),
        batch_id: int | None = Query(default=None, gt=0),
        person_status: PersonStatus | None = Query(default=None, alias="status"),
        page: int = Query(default=1, ge=1),
        per_page: int = Query(default=15, ge=1, le=100),
        db: Session = Depends(get_db),
        clock: Clock = Depends(get_clock),
    ):
        items, total = directory.list_people(
            db,
            kind,
            search=search,
            batch_id=batch_id,
            person_status=person_status,
            page=page,
            per_page=per_page,
        )
        return Paginated[read_schema].build([_read(item, clock) for item in items], total, page, per_page)

    @router.get("/{person_id}", response_model=read_schema, name=f"get_{kind.value}")
    def show(person_id: int, db: Session = Depends(get_db), clock: Clock = Depends(get_clock)):
        return _read(get_person(db, kind, person_id), clock)

    @router.put("/{person_id}", response_model=read_schema, name=f"update_{kind.value}")
    def update(
        person_id: int,
        payload: update_schema,  # type: ignore[valid-type]
        db: Session = Depends(get_db),
        clock: Clock = Depends(get_clock),
        activity: ActivityLogger = Depends(get_activity_logger),
    ):
        person = get_person(db, kind, person_id)
        person = directory.update_person(db, person, kind, payload, activity=activity)
        return _read(person, clock)

    @router.delete(
        "/{person_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        response_class=Response,
        name=f"delete_{kind.value}",
    )
    def delete(
        person_id: int,
        db: Session = Depends(get_db),
        clock: Clock = Depends(get_clock),
        activity: ActivityLogger = Depends(get_activity_logger),
    ) -> Response:
        person = get_person(db, kind, person_id)
        directory.delete_person(db, person, kind, now=clock.now(), activity=activity)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @router.put("/{person_id}/toggle-pause", response_model=read_schema, name=f"toggle_{kind.value}_pause")
    def toggle_pause(
        person_id: int,
        payload: TogglePauseIn,
        db: Session = Depends(get_db),
        clock: Clock = Depends(get_clock),
        activity: ActivityLogger = Depends(get_activity_logger),
    ):
        """Pause attendance until a date, or resume it."""

        person = get_person(db, kind, person_id)
        person = toggle_excuse(db, person, kind, payload, today=clock.today(), activity=activity)
        return _read(person, clock)

    return router


members_router = build_router(PersonKind.member, MemberCreate, MemberUpdate, MemberRead)
partners_router = build_router(PersonKind.partner, PartnerCreate, PartnerUpdate, PartnerRead)

__all__ = ["build_router", "members_router", "partners_router"]
