# app/security.py
"""Security dependencies for API key validation, scope enforcement and the acting admin."""
from __future__ import annotations

import logging
from datetime import datetime, UTC
from typing import Callable, Set

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from app.config import DEV_API_KEY_ALLOWED, ENV
from app.db import get_db
from app.models.admin_user import AdminUser
from app.models.api_key import ApiKey, ApiScope
from app.utils.apikey import find_valid_key
from app.utils.errors import error_response

logger = logging.getLogger(__name__)


def _extract_key(
    authorization: str | None = Header(default=None),
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
) -> str | None:
    """Read the key from ``Authorization: Bearer ...`` or ``X-API-Key``."""
    if x_api_key:
        return x_api_key.strip()
    if authorization and authorization.startswith("Bearer "):
        return authorization.split(" ", 1)[1].strip()
    return None


def _legacy_key() -> ApiKey:
    now = datetime.now(UTC)
    return ApiKey(
        id=0,
        name="__legacy__",
        prefix="legacy",
        key_hash="legacy",
        scope=ApiScope.admin,
        is_active=True,
        created_at=now,
        expires_at=None,
        last_used_at=now,
        admin_user_id=None,
    )


def require_api_key(
    db: Session = Depends(get_db),
    token: str | None = Depends(_extract_key),
) -> ApiKey:
    """Validate API key tokens and return the corresponding row."""
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error_response("NO_API_KEY", "API key required."),
        )

    key = find_valid_key(db, token)
    if key == "legacy":
        if not DEV_API_KEY_ALLOWED:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=error_response("LEGACY_KEY_FORBIDDEN", "Legacy dev key disabled."),
            )
        logger.warning("Legacy API key used", extra={"env": ENV})
        return _legacy_key()

    if not isinstance(key, ApiKey) or not key.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error_response("UNAUTHORIZED", "Invalid or expired API key"),
        )

    key.last_used_at = datetime.now(UTC)
    db.commit()
    return key


def require_scope(allowed: Set[ApiScope]) -> Callable:
    """Ensure the key carries one of the allowed scopes (admin passes everywhere)."""

    if not allowed:
        raise RuntimeError("require_scope needs a non-empty set of ApiScope")

    def _dep(key: ApiKey = Depends(require_api_key)) -> ApiKey:
        if key.scope == ApiScope.admin or key.scope in allowed:
            return key
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=error_response(
                "INSUFFICIENT_SCOPE",
                f"Requires one of: {sorted(scope.value for scope in allowed)}",
            ),
        )

    return _dep


def get_current_admin(
    api_key: ApiKey = Depends(require_api_key),
    db: Session = Depends(get_db),
) -> AdminUser | None:
    """Return the admin bound to the API key, or ``None`` for system callers."""

    if api_key.admin_user_id is None:
        return None
    admin = db.get(AdminUser, api_key.admin_user_id)
    if admin is None or not admin.is_active:
        return None
    return admin


__all__ = ["require_api_key", "require_scope", "get_current_admin"]
