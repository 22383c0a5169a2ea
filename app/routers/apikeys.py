# app/routers/apikeys.py
from __future__ import annotations

from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.db import get_db
from app.models.admin_user import AdminUser
from app.models.api_key import ApiKey, ApiScope
from app.security import require_scope
from app.services.activity_log import ActivityLogger, get_activity_logger
from app.utils.apikey import gen_key
from app.utils.errors import error_response, is_unique_violation, not_found
from app.utils.time import Clock, get_clock

router = APIRouter(
    prefix="/apikeys",
    tags=["apikeys"],
    dependencies=[Depends(require_scope({ApiScope.admin}))],
)


# ------ Schemas ------

class CreateKeyIn(BaseModel):
    """Payload to issue a key; the raw key is generated server-side."""

    name: str = Field(max_length=100)
    scope: ApiScope = ApiScope.staff
    admin_user_id: int | None = Field(default=None, gt=0)
    days_valid: int | None = Field(default=90, gt=0)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("name cannot be blank")
        return value.strip()


class ApiKeyCreateOut(BaseModel):
    """The raw key is returned once, on creation only."""

    id: int
    name: str
    scope: ApiScope
    key: str
    admin_user_id: int | None
    expires_at: datetime | None


class ApiKeyRead(BaseModel):
    id: int
    name: str
    prefix: str
    scope: ApiScope
    is_active: bool
    admin_user_id: int | None
    created_at: datetime
    expires_at: datetime | None
    last_used_at: datetime | None

    model_config = ConfigDict(from_attributes=True)


def _get_key(db: Session, api_key_id: int) -> ApiKey:
    row = db.get(ApiKey, api_key_id)
    if not row:
        raise not_found("APIKEY_NOT_FOUND", "API key not found.")
    return row


# ------ Routes ------

@router.post("", response_model=ApiKeyCreateOut, status_code=status.HTTP_201_CREATED)
def create_api_key(
    payload: CreateKeyIn,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    activity: ActivityLogger = Depends(get_activity_logger),
) -> ApiKeyCreateOut:
    if payload.admin_user_id is not None and db.get(AdminUser, payload.admin_user_id) is None:
        raise not_found("ADMIN_USER_NOT_FOUND", "Admin user not found.")

    raw, prefix, key_hash = gen_key()
    now = clock.now()
    row = ApiKey(
        name=payload.name,
        prefix=prefix,
        key_hash=key_hash,
        scope=payload.scope,
        admin_user_id=payload.admin_user_id,
        expires_at=now + timedelta(days=payload.days_valid) if payload.days_valid else None,
        is_active=True,
    )
    db.add(row)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        if not is_unique_violation(exc):
            raise
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=error_response("APIKEY_EXISTS", "Key name already exists."),
        ) from exc

    activity.log_entity(
        "API Key Created",
        row,
        f'API key "{row.name}" was created with scope {row.scope.value}.',
        new_values={"name": row.name, "scope": row.scope, "admin_user_id": row.admin_user_id, "key_hash": key_hash},
    )
    db.commit()
    db.refresh(row)

    return ApiKeyCreateOut(
        id=row.id,
        name=row.name,
        scope=row.scope,
        key=raw,
        admin_user_id=row.admin_user_id,
        expires_at=row.expires_at,
    )


@router.get("/{api_key_id}", response_model=ApiKeyRead)
def get_apikey(api_key_id: int, db: Session = Depends(get_db)) -> ApiKey:
    return _get_key(db, api_key_id)


@router.delete("/{api_key_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def revoke_apikey(
    api_key_id: int,
    db: Session = Depends(get_db),
    activity: ActivityLogger = Depends(get_activity_logger),
) -> Response:
    row = _get_key(db, api_key_id)
    if not row.is_active:
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    row.is_active = False
    activity.log_entity(
        "API Key Revoked",
        row,
        f'API key "{row.name}" was revoked.',
        {"is_active": True},
        {"is_active": False},
    )
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
