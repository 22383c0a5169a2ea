"""Batch (class cohort) and session models."""
import datetime as dt
from enum import Enum as PyEnum

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Enum as SqlEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    Time,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class BatchStatus(str, PyEnum):
    active = "active"
    inactive = "inactive"
    completed = "completed"


class SessionStatus(str, PyEnum):
    scheduled = "scheduled"
    completed = "completed"
    cancelled = "cancelled"
    rescheduled = "rescheduled"


batch_members = Table(
    "batch_members",
    Base.metadata,
    Column("batch_id", ForeignKey("batches.id", ondelete="CASCADE"), primary_key=True),
    Column("member_id", ForeignKey("members.id", ondelete="CASCADE"), primary_key=True),
)

batch_partners = Table(
    "batch_partners",
    Base.metadata,
    Column("batch_id", ForeignKey("batches.id", ondelete="CASCADE"), primary_key=True),
    Column("partner_id", ForeignKey("partners.id", ondelete="CASCADE"), primary_key=True),
)


class Batch(Base):
    """A scheduled cohort with its own roster and session calendar."""

    __tablename__ = "batches"
    __table_args__ = (
        CheckConstraint("capacity >= 0", name="ck_batch_capacity_non_negative"),
        Index("ix_batches_status", "status"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[BatchStatus] = mapped_column(
        SqlEnum(BatchStatus, name="batchstatus", native_enum=False), default=BatchStatus.active, nullable=False
    )
    capacity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    start_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    deleted_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    sessions = relationship(
        "BatchSession",
        back_populates="batch",
        cascade="all, delete-orphan",
        order_by="BatchSession.date",
    )
    members = relationship("Member", secondary=batch_members, back_populates="batches")
    partners = relationship("Partner", secondary=batch_partners, back_populates="batches")

    @property
    def member_ids(self) -> list[int]:
        return sorted(member.id for member in self.members)

    @property
    def partner_ids(self) -> list[int]:
        return sorted(partner.id for partner in self.partners)


class BatchSession(Base):
    """One concrete meeting of a batch. A batch meets at most once per date."""

    __tablename__ = "batch_sessions"
    __table_args__ = (
        UniqueConstraint("batch_id", "date", name="uq_batch_sessions_batch_date"),
        CheckConstraint("end_time > start_time", name="ck_batch_session_time_order"),
    )

    batch_id: Mapped[int] = mapped_column(ForeignKey("batches.id", ondelete="CASCADE"), nullable=False, index=True)
    title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    start_time: Mapped[dt.time] = mapped_column(Time, nullable=False)
    end_time: Mapped[dt.time] = mapped_column(Time, nullable=False)
    status: Mapped[SessionStatus] = mapped_column(
        SqlEnum(SessionStatus, name="sessionstatus", native_enum=False),
        default=SessionStatus.scheduled,
        nullable=False,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    batch = relationship("Batch", back_populates="sessions")
