"""Attendance models: one row per (person, session)."""
from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import DateTime, Enum as SqlEnum, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class AttendanceStatus(str, PyEnum):
    PRESENT = "present"
    ABSENT = "absent"
    EXCUSED = "excused"
    NOT_MARKED = "not marked"


def _status_column():
    return mapped_column(
        SqlEnum(
            AttendanceStatus,
            name="attendancestatus",
            native_enum=False,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        default=AttendanceStatus.NOT_MARKED,
        nullable=False,
    )


class MemberAttendance(Base):
    __tablename__ = "member_attendances"
    __table_args__ = (UniqueConstraint("member_id", "batch_session_id", name="uq_member_attendance_session"),)

    member_id: Mapped[int] = mapped_column(ForeignKey("members.id", ondelete="CASCADE"), nullable=False, index=True)
    batch_session_id: Mapped[int] = mapped_column(
        ForeignKey("batch_sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status: Mapped[AttendanceStatus] = _status_column()
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    marked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    marked_by: Mapped[int | None] = mapped_column(ForeignKey("admin_users.id", ondelete="SET NULL"), nullable=True)

    session = relationship("BatchSession")
    member = relationship("Member")


class PartnerAttendance(Base):
    __tablename__ = "partner_attendances"
    __table_args__ = (UniqueConstraint("partner_id", "batch_session_id", name="uq_partner_attendance_session"),)

    partner_id: Mapped[int] = mapped_column(ForeignKey("partners.id", ondelete="CASCADE"), nullable=False, index=True)
    batch_session_id: Mapped[int] = mapped_column(
        ForeignKey("batch_sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status: Mapped[AttendanceStatus] = _status_column()
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    marked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    marked_by: Mapped[int | None] = mapped_column(ForeignKey("admin_users.id", ondelete="SET NULL"), nullable=True)

    session = relationship("BatchSession")
    partner = relationship("Partner")
