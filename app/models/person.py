"""Member and partner models.

Both carry the excuse (pause) window fields ``excused_until`` and
``excuse_reason``. The pair is always written together: both set on pause,
both cleared on resume.
"""
import datetime as dt
from decimal import Decimal
from enum import Enum as PyEnum

from sqlalchemy import Date, DateTime, Enum as SqlEnum, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base
from .batch import batch_members, batch_partners


class PersonKind(str, PyEnum):
    member = "member"
    partner = "partner"


class PersonStatus(str, PyEnum):
    active = "active"
    inactive = "inactive"
    pending = "pending"
    blacklisted = "blacklisted"


class PartnerPayType(str, PyEnum):
    fixed = "fixed"
    revenue_share = "revenue_share"


class Member(Base):
    """A student enrolled in one or more batches."""

    __tablename__ = "members"

    name: Mapped[str] = mapped_column(String(40), nullable=False)
    email: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    mobile: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    status: Mapped[PersonStatus] = mapped_column(
        SqlEnum(PersonStatus, name="memberstatus", native_enum=False), default=PersonStatus.active, nullable=False
    )
    excused_until: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    excuse_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[int | None] = mapped_column(ForeignKey("admin_users.id", ondelete="SET NULL"), nullable=True)
    updated_by: Mapped[int | None] = mapped_column(ForeignKey("admin_users.id", ondelete="SET NULL"), nullable=True)
    deleted_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    batches = relationship("Batch", secondary=batch_members, back_populates="members")

    @property
    def batch_ids(self) -> list[int]:
        return sorted(batch.id for batch in self.batches)


class Partner(Base):
    """An instructor assigned to batches."""

    __tablename__ = "partners"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    mobile: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    specialization: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[PersonStatus] = mapped_column(
        SqlEnum(PersonStatus, name="partnerstatus", native_enum=False), default=PersonStatus.active, nullable=False
    )
    pay_type: Mapped[PartnerPayType] = mapped_column(
        SqlEnum(PartnerPayType, name="partnerpaytype", native_enum=False),
        default=PartnerPayType.fixed,
        nullable=False,
    )
    pay_amount: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    pay_percentage: Mapped[Decimal | None] = mapped_column(Numeric(5, 2), nullable=True)
    excused_until: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    excuse_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[int | None] = mapped_column(ForeignKey("admin_users.id", ondelete="SET NULL"), nullable=True)
    updated_by: Mapped[int | None] = mapped_column(ForeignKey("admin_users.id", ondelete="SET NULL"), nullable=True)
    deleted_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    batches = relationship("Batch", secondary=batch_partners, back_populates="partners")

    @property
    def batch_ids(self) -> list[int]:
        return sorted(batch.id for batch in self.batches)
