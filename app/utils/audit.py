"""Helpers shaping the value maps stored on activity log entries."""
from __future__ import annotations

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, Mapping

SENSITIVE_KEYS = {"password", "remember_token", "key_hash"}

# Housekeeping columns stay in the value maps but are left out of the
# human-readable change description.
HOUSEKEEPING_FIELDS = frozenset({"created_at", "updated_at", "created_by", "updated_by"})


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (dt.datetime, dt.date, dt.time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return value


def sanitize_payload_for_audit(data: Any) -> Any:
    """Return a JSON-ready copy of ``data`` with credential fields masked."""

    if isinstance(data, Mapping):
        sanitized: dict[str, Any] = {}
        for key, value in data.items():
            if key in SENSITIVE_KEYS and value is not None:
                sanitized[key] = "***"
            else:
                sanitized[key] = sanitize_payload_for_audit(value)
        return sanitized

    if isinstance(data, (list, tuple)):
        return [sanitize_payload_for_audit(item) for item in data]

    return _jsonable(data)


def snapshot(obj: Any, fields: Iterable[str]) -> dict[str, Any]:
    """Capture the current values of ``fields`` on ``obj``."""

    return {field: getattr(obj, field) for field in fields}


def diff_values(
    before: Mapping[str, Any], after: Mapping[str, Any]
) -> tuple[dict[str, Any], dict[str, Any]]:
    """Return ``(old, new)`` restricted to the keys whose values differ.

    A key present on only one side is reported with ``None`` on the other.
    """

    old: dict[str, Any] = {}
    new: dict[str, Any] = {}
    for key in list(before) + [k for k in after if k not in before]:
        previous = before.get(key)
        current = after.get(key)
        if _jsonable(previous) != _jsonable(current):
            old[key] = previous
            new[key] = current
    return old, new


def describe_changes(
    old: Mapping[str, Any],
    new: Mapping[str, Any],
    exclude: Iterable[str] = HOUSEKEEPING_FIELDS,
) -> list[str]:
    """Render ``key changed from "a" to "b"`` phrases for a diff."""

    skipped = set(exclude)
    parts = []
    for key, current in new.items():
        if key in skipped:
            continue
        previous = old.get(key)
        parts.append(f'{key} changed from "{_display(previous)}" to "{_display(current)}"')
    return parts


def _display(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(_display(item) for item in value)
    return str(_jsonable(value))


__all__ = [
    "HOUSEKEEPING_FIELDS",
    "SENSITIVE_KEYS",
    "describe_changes",
    "diff_values",
    "sanitize_payload_for_audit",
    "snapshot",
]
