"""initial back-office schema"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "20250101_0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def _actor_columns() -> list[sa.Column]:
    return [
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("admin_users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("updated_by", sa.Integer(), sa.ForeignKey("admin_users.id", ondelete="SET NULL"), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "admin_users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.UniqueConstraint("email", name="uq_admin_users_email"),
    )

    op.create_table(
        "api_keys",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("prefix", sa.String(length=16), nullable=False),
        sa.Column("key_hash", sa.String(length=128), nullable=False),
        sa.Column("scope", sa.String(length=10), nullable=False, server_default="staff"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "admin_user_id",
            sa.Integer(),
            sa.ForeignKey("admin_users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        *_timestamps(),
        sa.UniqueConstraint("name", name="uq_api_keys_name"),
        sa.UniqueConstraint("prefix", name="uq_api_keys_prefix"),
        sa.UniqueConstraint("key_hash", name="uq_api_keys_key_hash"),
    )
    op.create_index("ix_api_keys_admin_user_id", "api_keys", ["admin_user_id"])

    op.create_table(
        "batches",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("status", sa.String(length=9), nullable=False, server_default="active"),
        sa.Column("capacity", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("capacity >= 0", name="ck_batch_capacity_non_negative"),
    )
    op.create_index("ix_batches_status", "batches", ["status"])

    op.create_table(
        "members",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=40), nullable=False),
        sa.Column("email", sa.String(length=100), nullable=False),
        sa.Column("mobile", sa.String(length=20), nullable=False),
        sa.Column("status", sa.String(length=11), nullable=False, server_default="active"),
        sa.Column("excused_until", sa.Date(), nullable=True),
        sa.Column("excuse_reason", sa.Text(), nullable=True),
        *_actor_columns(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("email", name="uq_members_email"),
        sa.UniqueConstraint("mobile", name="uq_members_mobile"),
    )

    op.create_table(
        "partners",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=100), nullable=False),
        sa.Column("mobile", sa.String(length=20), nullable=False),
        sa.Column("specialization", sa.String(length=255), nullable=True),
        sa.Column("status", sa.String(length=11), nullable=False, server_default="active"),
        sa.Column("pay_type", sa.String(length=13), nullable=False, server_default="fixed"),
        sa.Column("pay_amount", sa.Numeric(10, 2), nullable=True),
        sa.Column("pay_percentage", sa.Numeric(5, 2), nullable=True),
        sa.Column("excused_until", sa.Date(), nullable=True),
        sa.Column("excuse_reason", sa.Text(), nullable=True),
        *_actor_columns(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("email", name="uq_partners_email"),
        sa.UniqueConstraint("mobile", name="uq_partners_mobile"),
    )

    op.create_table(
        "batch_members",
        sa.Column("batch_id", sa.Integer(), sa.ForeignKey("batches.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("member_id", sa.Integer(), sa.ForeignKey("members.id", ondelete="CASCADE"), primary_key=True),
    )
    op.create_table(
        "batch_partners",
        sa.Column("batch_id", sa.Integer(), sa.ForeignKey("batches.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("partner_id", sa.Integer(), sa.ForeignKey("partners.id", ondelete="CASCADE"), primary_key=True),
    )

    op.create_table(
        "batch_sessions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("batch_id", sa.Integer(), sa.ForeignKey("batches.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=True),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("status", sa.String(length=11), nullable=False, server_default="scheduled"),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("batch_id", "date", name="uq_batch_sessions_batch_date"),
        sa.CheckConstraint("end_time > start_time", name="ck_batch_session_time_order"),
    )
    op.create_index("ix_batch_sessions_batch_id", "batch_sessions", ["batch_id"])

    for table, person_table, person_column, constraint in (
        ("member_attendances", "members", "member_id", "uq_member_attendance_session"),
        ("partner_attendances", "partners", "partner_id", "uq_partner_attendance_session"),
    ):
        op.create_table(
            table,
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column(
                person_column,
                sa.Integer(),
                sa.ForeignKey(f"{person_table}.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column(
                "batch_session_id",
                sa.Integer(),
                sa.ForeignKey("batch_sessions.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column("status", sa.String(length=10), nullable=False, server_default="not marked"),
            sa.Column("notes", sa.Text(), nullable=True),
            sa.Column("marked_at", sa.DateTime(timezone=True), nullable=True),
            sa.Column(
                "marked_by",
                sa.Integer(),
                sa.ForeignKey("admin_users.id", ondelete="SET NULL"),
                nullable=True,
            ),
            *_timestamps(),
            sa.UniqueConstraint(person_column, "batch_session_id", name=constraint),
        )
        op.create_index(f"ix_{table}_{person_column}", table, [person_column])
        op.create_index(f"ix_{table}_batch_session_id", table, ["batch_session_id"])

    op.create_table(
        "amenities",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("icon", sa.String(length=255), nullable=True),
        sa.Column("category", sa.String(length=10), nullable=False),
        sa.Column("enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("name", name="uq_amenities_name"),
    )

    op.create_table(
        "action_logs",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("action", sa.String(length=255), nullable=False),
        sa.Column("user", sa.String(length=255), nullable=False),
        sa.Column("target", sa.String(length=255), nullable=False),
        sa.Column("category", sa.String(length=40), nullable=False),
        sa.Column("details", sa.Text(), nullable=False),
        sa.Column("ip_address", sa.String(length=45), nullable=True),
        sa.Column("old_values", sa.JSON(), nullable=True),
        sa.Column("new_values", sa.JSON(), nullable=True),
        sa.Column(
            "performed_by",
            sa.Integer(),
            sa.ForeignKey("admin_users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("entity_type", sa.String(length=100), nullable=True),
        sa.Column("entity_id", sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_action_logs_category_created", "action_logs", ["category", "created_at"])
    op.create_index("ix_action_logs_performer_created", "action_logs", ["performed_by", "created_at"])
    op.create_index("ix_action_logs_entity", "action_logs", ["entity_type", "entity_id"])


def downgrade() -> None:
    op.drop_index("ix_action_logs_entity", table_name="action_logs")
    op.drop_index("ix_action_logs_performer_created", table_name="action_logs")
    op.drop_index("ix_action_logs_category_created", table_name="action_logs")
    op.drop_table("action_logs")
    op.drop_table("amenities")
    for table, person_column in (("partner_attendances", "partner_id"), ("member_attendances", "member_id")):
        op.drop_index(f"ix_{table}_batch_session_id", table_name=table)
        op.drop_index(f"ix_{table}_{person_column}", table_name=table)
        op.drop_table(table)
    op.drop_index("ix_batch_sessions_batch_id", table_name="batch_sessions")
    op.drop_table("batch_sessions")
    op.drop_table("batch_partners")
    op.drop_table("batch_members")
    op.drop_table("partners")
    op.drop_table("members")
    op.drop_index("ix_batches_status", table_name="batches")
    op.drop_table("batches")
    op.drop_index("ix_api_keys_admin_user_id", table_name="api_keys")
    op.drop_table("api_keys")
    op.drop_table("admin_users")
