"""Pause/resume tests."""
from datetime import date, timedelta

import pytest
from sqlalchemy import select

from app.models import ActivityLog, PersonStatus
from app.services.people import effective_display_status, is_effectively_paused

TODAY = date(2025, 1, 5)


def _logs(db_session) -> list[ActivityLog]:
    return list(db_session.scalars(select(ActivityLog).order_by(ActivityLog.id)).all())


@pytest.mark.anyio("asyncio")
async def test_pause_then_resume_round_trip(client, staff_headers, db_session, make_member):
    member = make_member(name="Mia")

    paused = await client.put(
        f"/members/{member.id}/toggle-pause",
        json={"action": "pause", "end_date": "2025-01-10", "reason": "Family trip"},
        headers=staff_headers,
    )
    assert paused.status_code == 200
    body = paused.json()
    assert body["excused_until"] == "2025-01-10"
    assert body["excuse_reason"] == "Family trip"
    assert body["effective_display_status"] == "paused"
    assert body["status"] == "active"

    resumed = await client.put(
        f"/members/{member.id}/toggle-pause", json={"action": "resume"}, headers=staff_headers
    )
    assert resumed.status_code == 200
    body = resumed.json()
    assert body["excused_until"] is None and body["excuse_reason"] is None
    assert body["effective_display_status"] == "active"

    pause_log, resume_log = _logs(db_session)
    assert pause_log.action == "Member Attendance Paused"
    assert pause_log.details == 'Attendance for member "Mia" paused until 2025-01-10 due to: "Family trip".'
    assert resume_log.action == "Member Attendance Resumed"
    assert pause_log.category.value == "attendance_management"
    assert pause_log.old_values == resume_log.new_values == {"excused_until": None, "excuse_reason": None}
    assert pause_log.new_values == resume_log.old_values == {
        "excused_until": "2025-01-10",
        "excuse_reason": "Family trip",
    }


@pytest.mark.anyio("asyncio")
async def test_resume_is_idempotent_and_logged_each_time(client, staff_headers, db_session, make_member):
    member = make_member()

    for _ in range(2):
        response = await client.put(
            f"/members/{member.id}/toggle-pause", json={"action": "resume"}, headers=staff_headers
        )
        assert response.status_code == 200
        assert response.json()["excused_until"] is None
        assert response.json()["excuse_reason"] is None

    logs = _logs(db_session)
    assert [log.action for log in logs] == ["Member Attendance Resumed"] * 2


@pytest.mark.anyio("asyncio")
@pytest.mark.parametrize(
    "payload, field",
    [
        ({"action": "pause", "end_date": "2025-01-10"}, "reason"),
        ({"action": "pause", "end_date": "2025-01-10", "reason": "   "}, "reason"),
        ({"action": "pause", "reason": "Sick"}, "end_date"),
        ({"action": "pause", "end_date": "2025-01-04", "reason": "Sick"}, "end_date"),
    ],
)
async def test_pause_validation(client, staff_headers, db_session, make_member, payload, field):
    member = make_member()

    response = await client.put(f"/members/{member.id}/toggle-pause", json=payload, headers=staff_headers)

    assert response.status_code == 422
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert field in error["details"]
    db_session.refresh(member)
    assert member.excused_until is None and member.excuse_reason is None
    assert _logs(db_session) == []


@pytest.mark.anyio("asyncio")
async def test_pause_ending_today_is_accepted(client, staff_headers, make_partner):
    partner = make_partner()

    response = await client.put(
        f"/partners/{partner.id}/toggle-pause",
        json={"action": "pause", "end_date": TODAY.isoformat(), "reason": "Conference"},
        headers=staff_headers,
    )

    assert response.status_code == 200
    assert response.json()["effective_display_status"] == "paused"


@pytest.mark.anyio("asyncio")
async def test_toggle_unknown_person(client, staff_headers):
    response = await client.put("/partners/999999/toggle-pause", json={"action": "resume"}, headers=staff_headers)

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "PARTNER_NOT_FOUND"


@pytest.mark.parametrize(
    "excused_until, expected",
    [
        (None, False),
        (TODAY - timedelta(days=1), False),
        (TODAY, True),
        (TODAY + timedelta(days=3), True),
    ],
)
def test_effectively_paused_invariant(make_member, excused_until, expected):
    member = make_member(
        status=PersonStatus.inactive,
        excused_until=excused_until,
        excuse_reason="Reason" if excused_until else None,
    )

    assert is_effectively_paused(member, TODAY) is expected
    assert effective_display_status(member, TODAY) == ("paused" if expected else "inactive")
