from datetime import date, datetime, UTC
from decimal import Decimal

from app.models.person import PersonStatus
from app.utils.audit import (
    describe_changes,
    diff_values,
    sanitize_payload_for_audit,
    snapshot,
)


def test_sanitize_masks_credentials_and_normalises_values():
    payload = {
        "password": "hunter2",
        "key_hash": "abc",
        "status": PersonStatus.active,
        "excused_until": date(2025, 1, 10),
        "marked_at": datetime(2025, 1, 5, 9, 30, tzinfo=UTC),
        "pay_amount": Decimal("12.50"),
        "nested": [{"remember_token": "t", "name": "Mia"}],
    }

    sanitized = sanitize_payload_for_audit(payload)

    assert sanitized["password"] == "***"
    assert sanitized["key_hash"] == "***"
    assert sanitized["status"] == "active"
    assert sanitized["excused_until"] == "2025-01-10"
    assert sanitized["marked_at"] == "2025-01-05T09:30:00+00:00"
    assert sanitized["pay_amount"] == "12.50"
    assert sanitized["nested"] == [{"remember_token": "***", "name": "Mia"}]


def test_sanitize_keeps_null_credentials_null():
    assert sanitize_payload_for_audit({"password": None}) == {"password": None}


def test_diff_values_keeps_only_changed_keys():
    before = {"name": "Mia", "email": "mia@example.com", "status": "active"}
    after = {"name": "Mia", "email": "mia@new.example.com", "status": "inactive"}

    old, new = diff_values(before, after)

    assert old == {"email": "mia@example.com", "status": "active"}
    assert new == {"email": "mia@new.example.com", "status": "inactive"}


def test_diff_values_reports_one_sided_keys_with_none():
    old, new = diff_values({"a": 1}, {"b": 2})

    assert old == {"a": 1, "b": None}
    assert new == {"a": None, "b": 2}


def test_diff_values_treats_enum_and_value_as_equal():
    old, new = diff_values({"status": PersonStatus.active}, {"status": "active"})

    assert old == {} and new == {}


def test_describe_changes_skips_housekeeping_fields():
    old = {"name": "Mia", "updated_by": 1, "updated_at": "2025-01-01"}
    new = {"name": "Mila", "updated_by": 2, "updated_at": "2025-01-02"}

    assert describe_changes(old, new) == ['name changed from "Mia" to "Mila"']


def test_describe_changes_renders_lists_and_nulls():
    parts = describe_changes({"batch_ids": [1], "excuse_reason": None}, {"batch_ids": [1, 2], "excuse_reason": "Sick"})

    assert parts == [
        'batch_ids changed from "1" to "1, 2"',
        'excuse_reason changed from "" to "Sick"',
    ]


def test_snapshot_reads_listed_attributes():
    class Row:
        name = "Mia"
        email = "mia@example.com"
        mobile = "0700000000"

    assert snapshot(Row(), ("name", "email")) == {"name": "Mia", "email": "mia@example.com"}
