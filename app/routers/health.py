"""Health check endpoint."""
from __future__ import annotations

import logging

from alembic.config import Config
from alembic.script import ScriptDirectory
from fastapi import APIRouter
from sqlalchemy import text

from app.config import AppInfo, get_settings
from app.db import get_engine

router = APIRouter(prefix="/health", tags=["health"])
logger = logging.getLogger(__name__)


def _db_status() -> str:
    """Return 'ok' if the DB is reachable, 'error' otherwise."""

    try:
        engine = get_engine()
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return "ok"
    except Exception:  # noqa: BLE001
        logger.exception("DB health check failed")
        return "error"


def _expected_migration_head() -> str | None:
    try:
        config = Config("alembic.ini")
        script = ScriptDirectory.from_config(config)
        return script.get_current_head()
    except Exception:  # noqa: BLE001
        logger.exception("Failed to load Alembic head revision")
        return None


def _migrations_status() -> tuple[bool, str]:
    expected_head = _expected_migration_head()
    try:
        engine = get_engine()
        with engine.connect() as conn:
            current = conn.execute(text("SELECT version_num FROM alembic_version")).scalar()
        if expected_head and current == expected_head:
            return True, "up_to_date"
        if expected_head is None:
            return False, "unknown"
        return False, "out_of_date"
    except Exception:  # noqa: BLE001
        logger.exception("Migration check failed")
        return False, "unknown"


@router.get("", summary="Health check")
def healthcheck() -> dict[str, object]:
    """Report database reachability and whether migrations are at head."""

    settings = get_settings()
    db_status = _db_status()
    db_ok = db_status == "ok"
    if db_ok:
        migration_ok, migration_status = _migrations_status()
    else:
        migration_ok, migration_status = False, "unknown"
    info = AppInfo()
    return {
        "status": "ok" if db_ok and migration_ok else "degraded",
        "app": info.name,
        "version": info.version,
        "env": settings.app_env,
        "timezone": settings.APP_TIMEZONE,
        "db_ok": db_ok,
        "db_status": db_status,
        "migrations_ok": migration_ok,
        "migrations_status": migration_status,
    }
