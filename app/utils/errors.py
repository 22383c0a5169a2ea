"""Utility helpers for standardized error responses."""
from typing import Any

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError


def error_response(code: str, message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    """Return a standardized error payload."""

    payload: dict[str, Any] = {"error": {"code": code, "message": message}}
    if details:
        payload["error"]["details"] = details
    return payload


def not_found(code: str, message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error_response(code, message))


def validation_failed(message: str, fields: dict[str, list[str]] | None = None, code: str = "VALIDATION_ERROR") -> HTTPException:
    """422 with optional field-level messages under ``details``."""

    return HTTPException(
        status_code=422,
        detail=error_response(code, message, fields),
    )


def is_unique_violation(exc: IntegrityError) -> bool:
    """Whether an ``IntegrityError`` comes from a UNIQUE constraint (SQLite or PostgreSQL wording)."""

    message = str(exc.orig).lower()
    return "unique constraint" in message or "duplicate key" in message
