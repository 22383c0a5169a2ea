"""Activity log model."""
from enum import Enum as PyEnum

from sqlalchemy import Enum as SqlEnum, ForeignKey, Index, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class ActivityCategory(str, PyEnum):
    """Subsystem tag grouping activity log entries."""

    user_management = "user_management"
    venue_management = "venue_management"
    batch_management = "batch_management"
    partner_management = "partner_management"
    program_management = "program_management"
    amenity_management = "amenity_management"
    member_management = "member_management"
    batch_session_management = "batch_session_management"
    profile_management = "profile_management"
    fixed_asset_management = "fixed_asset_management"
    attendance_management = "attendance_management"
    system = "system"


class ActivityLog(Base):
    """One administrative action. Rows are inserted, never updated or deleted."""

    __tablename__ = "action_logs"
    __table_args__ = (
        Index("ix_action_logs_category_created", "category", "created_at"),
        Index("ix_action_logs_performer_created", "performed_by", "created_at"),
        Index("ix_action_logs_entity", "entity_type", "entity_id"),
    )

    action: Mapped[str] = mapped_column(String(255), nullable=False)
    user: Mapped[str] = mapped_column(String(255), nullable=False)
    target: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[ActivityCategory] = mapped_column(
        SqlEnum(ActivityCategory, name="activitycategory", native_enum=False, length=40), nullable=False
    )
    details: Mapped[str] = mapped_column(Text, nullable=False)
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)
    old_values: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    new_values: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    performed_by: Mapped[int | None] = mapped_column(
        ForeignKey("admin_users.id", ondelete="SET NULL"), nullable=True
    )
    entity_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    entity_id: Mapped[int | None] = mapped_column(nullable=True)

    performer = relationship("AdminUser")
