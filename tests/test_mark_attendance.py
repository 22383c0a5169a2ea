"""Mark-attendance endpoint tests."""
from datetime import UTC, date, datetime

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from app.models import ActivityLog, AdminUser, MemberAttendance, PartnerAttendance, PersonStatus
from app.models.activity_log import ActivityCategory
from app.schemas.attendance import MarkAttendanceIn
from app.services.activity_log import ActivityLogger
from app.services.attendance import mark_attendance


def _payload(batch, person, on: date, status: str = "present", person_type: str = "member", **extra):
    return {
        "batch_id": batch.id,
        "date": on.isoformat(),
        "type": person_type,
        "person_id": person.id,
        "status": status,
        **extra,
    }


def _attendance_logs(db_session) -> list[ActivityLog]:
    return list(
        db_session.scalars(
            select(ActivityLog)
            .where(ActivityLog.category == ActivityCategory.attendance_management)
            .order_by(ActivityLog.id)
        ).all()
    )


@pytest.mark.anyio("asyncio")
async def test_mark_then_snapshot_shows_marked_record(
    client, staff_headers, admin_user, db_session, make_batch, make_session, make_member
):
    batch = make_batch(name="Robotics")
    make_session(batch, date(2025, 1, 1))
    member = make_member(name="Mia", batches=[batch])

    response = await client.post(
        "/attendance/mark", json=_payload(batch, member, date(2025, 1, 1)), headers=staff_headers
    )
    assert response.status_code == 200
    marked = response.json()
    assert marked["source"] == "persisted"
    assert marked["status"] == "present"
    assert marked["marked_by"] == admin_user.id

    snapshot = await client.get(f"/attendance/batch/{batch.id}/all", headers=staff_headers)
    (record,) = snapshot.json()["records"]
    assert record["status"] == "present"
    assert record["marked_at"] is not None
    assert record["marked_by"] == admin_user.id

    (entry,) = _attendance_logs(db_session)
    assert entry.action == "Attendance Marked"
    assert entry.target == "Mia"
    assert entry.user == "Jane Doe"
    assert entry.old_values is None
    assert entry.new_values == {"status": "present"}
    assert entry.details == 'Attendance for Mia on 2025-01-01 for batch "Robotics" marked as present.'


@pytest.mark.anyio("asyncio")
async def test_remarking_updates_the_same_row(client, staff_headers, db_session, make_batch, make_session, make_member):
    batch = make_batch()
    make_session(batch, date(2025, 1, 2))
    member = make_member(batches=[batch])

    for status in ("present", "absent"):
        response = await client.post(
            "/attendance/mark",
            json=_payload(batch, member, date(2025, 1, 2), status=status, notes="late bus"),
            headers=staff_headers,
        )
        assert response.status_code == 200

    assert db_session.scalar(select(func.count()).select_from(MemberAttendance)) == 1
    row = db_session.scalars(select(MemberAttendance)).one()
    assert row.notes == "late bus"
    logs = _attendance_logs(db_session)
    assert [log.new_values for log in logs] == [{"status": "present"}, {"status": "absent"}]
    assert logs[1].old_values == {"status": "present"}


@pytest.mark.anyio("asyncio")
async def test_today_is_markable_and_tomorrow_is_not(client, staff_headers, make_batch, make_session, make_member):
    batch = make_batch()
    make_session(batch, date(2025, 1, 5))
    make_session(batch, date(2025, 1, 6))
    member = make_member(batches=[batch])

    today = await client.post("/attendance/mark", json=_payload(batch, member, date(2025, 1, 5)), headers=staff_headers)
    assert today.status_code == 200

    tomorrow = await client.post(
        "/attendance/mark", json=_payload(batch, member, date(2025, 1, 6)), headers=staff_headers
    )
    assert tomorrow.status_code == 403
    assert tomorrow.json()["error"]["code"] == "ATTENDANCE_NOT_EDITABLE"


@pytest.mark.anyio("asyncio")
async def test_editability_follows_the_clock(client, staff_headers, fixed_clock, make_batch, make_session, make_member):
    batch = make_batch()
    make_session(batch, date(2025, 1, 6))
    member = make_member(batches=[batch])
    fixed_clock.set(fixed_clock.now().replace(day=6))

    response = await client.post(
        "/attendance/mark", json=_payload(batch, member, date(2025, 1, 6)), headers=staff_headers
    )

    assert response.status_code == 200


@pytest.mark.anyio("asyncio")
async def test_paused_person_can_only_be_excused(client, staff_headers, make_batch, make_session, make_member):
    batch = make_batch()
    make_session(batch, date(2025, 1, 5))
    member = make_member(batches=[batch], excused_until=date(2025, 1, 7), excuse_reason="Sick")

    present = await client.post("/attendance/mark", json=_payload(batch, member, date(2025, 1, 5)), headers=staff_headers)
    assert present.status_code == 422
    assert present.json()["error"]["code"] == "PERSON_EXCUSED"

    excused = await client.post(
        "/attendance/mark",
        json=_payload(batch, member, date(2025, 1, 5), status="excused"),
        headers=staff_headers,
    )
    assert excused.status_code == 200


@pytest.mark.anyio("asyncio")
async def test_partner_attendance_is_stored_separately(
    client, staff_headers, db_session, make_batch, make_session, make_partner
):
    batch = make_batch()
    make_session(batch, date(2025, 1, 3))
    partner = make_partner(name="Coach Kim", batches=[batch])

    response = await client.post(
        "/attendance/mark",
        json=_payload(batch, partner, date(2025, 1, 3), person_type="partner"),
        headers=staff_headers,
    )

    assert response.status_code == 200
    assert response.json()["person"]["type"] == "partner"
    assert db_session.scalar(select(func.count()).select_from(PartnerAttendance)) == 1
    assert db_session.scalar(select(func.count()).select_from(MemberAttendance)) == 0


@pytest.mark.anyio("asyncio")
async def test_mark_not_found_cases(client, staff_headers, make_batch, make_session, make_member):
    batch = make_batch()
    make_session(batch, date(2025, 1, 2))
    enrolled = make_member(batches=[batch])
    outsider = make_member(name="Outsider")

    no_session = await client.post(
        "/attendance/mark", json=_payload(batch, enrolled, date(2025, 1, 3)), headers=staff_headers
    )
    assert no_session.status_code == 404
    assert no_session.json()["error"]["code"] == "SESSION_NOT_FOUND"

    not_enrolled = await client.post(
        "/attendance/mark", json=_payload(batch, outsider, date(2025, 1, 2)), headers=staff_headers
    )
    assert not_enrolled.status_code == 404
    assert not_enrolled.json()["error"]["code"] == "PERSON_NOT_IN_BATCH"

    payload = _payload(batch, enrolled, date(2025, 1, 2))
    payload["person_id"] = 999999
    missing_person = await client.post("/attendance/mark", json=payload, headers=staff_headers)
    assert missing_person.status_code == 404
    assert missing_person.json()["error"]["code"] == "MEMBER_NOT_FOUND"


@pytest.mark.anyio("asyncio")
async def test_mark_rejects_unknown_status(client, staff_headers, make_batch, make_session, make_member):
    batch = make_batch()
    make_session(batch, date(2025, 1, 2))
    member = make_member(batches=[batch])

    response = await client.post(
        "/attendance/mark", json=_payload(batch, member, date(2025, 1, 2), status="late"), headers=staff_headers
    )

    assert response.status_code == 422
    assert "status" in response.json()["error"]["details"]


@pytest.mark.anyio("asyncio")
async def test_attendance_by_date_and_partner_recent(
    client, staff_headers, make_batch, make_session, make_partner
):
    batch = make_batch()
    for day in (1, 2, 3):
        make_session(batch, date(2025, 1, day))
    partner = make_partner(batches=[batch])
    for day in (1, 3):
        response = await client.post(
            "/attendance/mark",
            json=_payload(batch, partner, date(2025, 1, day), person_type="partner"),
            headers=staff_headers,
        )
        assert response.status_code == 200

    by_date = await client.get(
        "/attendance/by-date",
        params={"batch_id": batch.id, "date": "2025-01-03", "type": "partner"},
        headers=staff_headers,
    )
    assert by_date.status_code == 200
    assert [row["session"]["date"] for row in by_date.json()] == ["2025-01-03"]

    recent = await client.get(f"/attendance/partner/{partner.id}/recent", headers=staff_headers)
    assert recent.status_code == 200
    assert [row["session"]["date"] for row in recent.json()] == ["2025-01-03", "2025-01-01"]


@pytest.mark.anyio("asyncio")
async def test_pause_blocks_past_sessions_inside_the_window(
    client, staff_headers, db_session, make_batch, make_session, make_member
):
    batch = make_batch()
    make_session(batch, date(2025, 1, 3))
    member = make_member(batches=[batch], excused_until=date(2025, 1, 10), excuse_reason="Travel")

    present = await client.post("/attendance/mark", json=_payload(batch, member, date(2025, 1, 3)), headers=staff_headers)
    assert present.status_code == 422
    assert present.json()["error"]["code"] == "PERSON_EXCUSED"
    assert db_session.scalar(select(func.count()).select_from(MemberAttendance)) == 0

    excused = await client.post(
        "/attendance/mark",
        json=_payload(batch, member, date(2025, 1, 3), status="excused"),
        headers=staff_headers,
    )
    assert excused.status_code == 200


@pytest.mark.anyio("asyncio")
async def test_pause_ending_before_the_session_does_not_block(
    client, staff_headers, make_batch, make_session, make_member
):
    batch = make_batch()
    make_session(batch, date(2025, 1, 3))
    member = make_member(batches=[batch], excused_until=date(2025, 1, 2), excuse_reason="Sick")

    response = await client.post("/attendance/mark", json=_payload(batch, member, date(2025, 1, 3)), headers=staff_headers)

    assert response.status_code == 200
    assert response.json()["status"] == "present"


@pytest.mark.anyio("asyncio")
async def test_inactive_member_is_not_on_the_roster(client, staff_headers, make_batch, make_session, make_member):
    batch = make_batch()
    make_session(batch, date(2025, 1, 2))
    member = make_member(batches=[batch], status=PersonStatus.inactive)

    response = await client.post("/attendance/mark", json=_payload(batch, member, date(2025, 1, 2)), headers=staff_headers)

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "PERSON_NOT_IN_BATCH"
    snapshot = await client.get(f"/attendance/batch/{batch.id}/all", headers=staff_headers)
    assert snapshot.json()["records"] == []


def test_storage_fault_while_marking_is_not_reported_as_conflict(db_session, make_batch, make_session, make_member):
    batch = make_batch()
    make_session(batch, date(2025, 1, 2))
    member = make_member(batches=[batch])
    db_session.commit()
    # Unknown admin id: the marked_by foreign key fails on flush.
    ghost = AdminUser(id=987654, first_name="Ghost", last_name="Admin", email="ghost@example.com")
    payload = MarkAttendanceIn(
        batch_id=batch.id, date=date(2025, 1, 2), type="member", person_id=member.id, status="present"
    )

    with pytest.raises(IntegrityError):
        mark_attendance(
            db_session,
            payload,
            today=date(2025, 1, 5),
            now=datetime(2025, 1, 5, 12, 0, tzinfo=UTC),
            activity=ActivityLogger(db_session, actor=ghost),
        )

    assert db_session.scalar(select(func.count()).select_from(MemberAttendance)) == 0
    assert _attendance_logs(db_session) == []
