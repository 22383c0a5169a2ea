"""Time utilities and the injectable clock."""
from __future__ import annotations

from datetime import UTC, date, datetime
from zoneinfo import ZoneInfo

from app.config import get_settings


def utcnow() -> datetime:
    """Return current UTC time with timezone awareness."""

    return datetime.now(tz=UTC)


class Clock:
    """Source of "now" and of the server's current calendar date.

    Attendance editability and pause windows are evaluated against
    :meth:`today`, which is the current date in the configured timezone.
    """

    def __init__(self, tz_name: str = "UTC") -> None:
        self.tz = ZoneInfo(tz_name)

    def now(self) -> datetime:
        return utcnow()

    def today(self) -> date:
        return self.now().astimezone(self.tz).date()


class FixedClock(Clock):
    """Clock frozen at a given instant."""

    def __init__(self, at: datetime, tz_name: str = "UTC") -> None:
        super().__init__(tz_name)
        self.set(at)

    def set(self, at: datetime) -> None:
        self._at = at if at.tzinfo is not None else at.replace(tzinfo=UTC)

    def now(self) -> datetime:
        return self._at


def get_clock() -> Clock:
    """FastAPI dependency returning the server clock."""

    return Clock(get_settings().APP_TIMEZONE)


__all__ = ["Clock", "FixedClock", "get_clock", "utcnow"]
