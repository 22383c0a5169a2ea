"""API routers for the back-office API."""
from fastapi import APIRouter

from . import activity_logs, amenities, apikeys, attendance, batches, health
from .people import members_router, partners_router


def get_api_router() -> APIRouter:
    """Return the root API router."""

    api_router = APIRouter()
    api_router.include_router(health.router)
    api_router.include_router(activity_logs.router)
    api_router.include_router(members_router)
    api_router.include_router(partners_router)
    api_router.include_router(batches.router)
    api_router.include_router(attendance.router)
    api_router.include_router(amenities.router)
    api_router.include_router(apikeys.router)
    return api_router
